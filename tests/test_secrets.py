"""
Tests for secret-store lookups and masking.
Validates canonicalized secret commands, degraded failures and log masking.
"""

import logging

import pytest

from conftest import FakeRunner, failed, ok
from loadenv.exec.substitution import SubstitutionContext
from loadenv.security.secrets import SecretLookupPass, SecretsMaskingFilter, SecretsRegistry
from loadenv.variables import VariableExpander


def make_context(scope=None, key="DB_PASS"):
    scope = scope or {}
    return SubstitutionContext(key=key, line_number=2, source="prod.env", scope=scope, command_env=dict(scope))


class TestSecretLookupPass:
    """Test the $(gopass show PATH) form."""

    @pytest.mark.parametrize("text", [
        "$(gopass show my/db/pass)",
        "$(gopass my/db/pass)",
        "$(gopass show my/db/pass --clip)",
        "$(gopass show my/db/pass -o -f)",
        "$( gopass show my/db/pass )",
    ])
    def test_canonicalized_invocation(self, text):
        runner = FakeRunner({"gopass show --password my/db/pass": ok("pw\n")})
        lookup = SecretLookupPass(runner, VariableExpander())

        assert lookup.apply(text, make_context()) == "pw"
        assert runner.calls[0].program == "gopass"
        assert runner.calls[0].args == ["show", "--password", "my/db/pass"]

    def test_embedded_in_larger_value(self):
        runner = FakeRunner({"gopass show --password db/pw": ok("pw")})
        lookup = SecretLookupPass(runner, VariableExpander())

        result = lookup.apply("postgres://app:$(gopass show db/pw)@db:5432", make_context())
        assert result == "postgres://app:pw@db:5432"

    def test_other_commands_not_matched(self):
        runner = FakeRunner()
        lookup = SecretLookupPass(runner, VariableExpander())

        assert lookup.apply("$(gopassx show a)", make_context()) == "$(gopassx show a)"
        assert lookup.apply("$(echo gopass)", make_context()) == "$(echo gopass)"
        assert runner.calls == []

    def test_output_reexpanded(self):
        runner = FakeRunner({"gopass show --password tmpl": ok("user-$USER")})
        lookup = SecretLookupPass(runner, VariableExpander())

        assert lookup.apply("$(gopass show tmpl)", make_context({"USER": "bob"})) == "user-bob"

    def test_failure_sets_empty_and_warns(self, caplog):
        runner = FakeRunner({"gopass show --password non/existent": failed(1, "not found")})
        lookup = SecretLookupPass(runner, VariableExpander())

        with caplog.at_level(logging.WARNING):
            result = lookup.apply("$(gopass show non/existent)", make_context(key="FAILED_SECRET"))

        assert result == ""
        message = caplog.records[0].getMessage()
        assert caplog.records[0].levelname == "WARNING"
        assert "FAILED_SECRET" in message
        assert "non/existent" in message
        assert "line 2" in message

    def test_empty_output_warns(self, caplog):
        runner = FakeRunner({"gopass show --password some/api/key": ok("")})
        lookup = SecretLookupPass(runner, VariableExpander())

        with caplog.at_level(logging.WARNING):
            assert lookup.apply("$(gopass show some/api/key)", make_context()) == ""
        assert "empty value" in caplog.records[0].getMessage()

    def test_custom_tool(self):
        runner = FakeRunner({"pass show --password email/work": ok("x")})
        lookup = SecretLookupPass(runner, VariableExpander(), tool="pass")

        assert lookup.apply("$(pass show email/work)", make_context()) == "x"

    def test_records_fetched_values(self):
        registry = SecretsRegistry()
        runner = FakeRunner({"gopass show --password a": ok("topsecret")})
        lookup = SecretLookupPass(runner, VariableExpander(), registry=registry)

        lookup.apply("$(gopass show a)", make_context())

        assert len(registry) == 1
        assert registry.mask_text("value topsecret") == "value ***"


class TestSecretsRegistry:
    """Test masking of recorded secrets."""

    def test_mask_text(self):
        registry = SecretsRegistry()
        registry.add("supersecret123")
        registry.add("key_abcd1234")

        text = "password=supersecret123&api_key=key_abcd1234"
        assert registry.mask_text(text) == "password=***&api_key=***"

    def test_empty_values_not_recorded(self):
        registry = SecretsRegistry()
        registry.add("")
        assert len(registry) == 0
        assert registry.mask_text("anything") == "anything"

    def test_longest_secret_masked_first(self):
        registry = SecretsRegistry()
        registry.add("abc")
        registry.add("abcdef")

        assert registry.mask_text("x abcdef y abc") == "x *** y ***"

    def test_regex_characters_are_literal(self):
        registry = SecretsRegistry()
        registry.add("a.b*c")
        assert registry.mask_text("aXbbc a.b*c") == "aXbbc ***"

    def test_mask_dict(self):
        registry = SecretsRegistry()
        registry.add("hidden")
        masked = registry.mask_dict({"cmd": "echo hidden", "count": 3})
        assert masked == {"cmd": "echo ***", "count": 3}

    def test_clear(self):
        registry = SecretsRegistry()
        registry.add("hidden")
        registry.clear()
        assert registry.mask_text("hidden") == "hidden"


class TestSecretsMaskingFilter:
    """Test the logging filter."""

    def test_masks_message_and_args(self):
        registry = SecretsRegistry()
        registry.add("hunter2")
        masking = SecretsMaskingFilter(registry)

        record = logging.LogRecord(
            "loadenv", logging.WARNING, __file__, 1,
            "command 'echo hunter2' failed for %s", ("hunter2",), None,
        )

        assert masking.filter(record) is True
        assert record.getMessage() == "command 'echo ***' failed for ***"

    def test_non_string_args_preserved(self):
        registry = SecretsRegistry()
        registry.add("hunter2")
        masking = SecretsMaskingFilter(registry)

        record = logging.LogRecord("loadenv", logging.WARNING, __file__, 1, "line %d", (5,), None)
        masking.filter(record)
        assert record.getMessage() == "line 5"

    def test_masks_records_through_handler(self, caplog):
        registry = SecretsRegistry()
        registry.add("s3cr3t")
        caplog.handler.addFilter(SecretsMaskingFilter(registry))

        with caplog.at_level(logging.WARNING):
            logging.getLogger("loadenv.test").warning("leaked s3cr3t here")

        assert caplog.records[0].getMessage() == "leaked *** here"
