"""Shared fixtures: a scripted command runner and env file helpers."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import pytest

from loadenv.exec.runner import CommandResult


@dataclass
class RecordedCall:
    """One invocation seen by FakeRunner."""
    program: str
    args: List[str]
    env: Dict[str, str]

    @property
    def command_line(self) -> str:
        return " ".join([self.program, *self.args])


def ok(stdout: str) -> CommandResult:
    """Successful result with the given stdout."""
    return CommandResult(exit_code=0, stdout=stdout.encode('utf-8'))


def failed(exit_code: int = 1, stderr: str = "") -> CommandResult:
    """Failed result with a nonzero exit code."""
    return CommandResult(exit_code=exit_code, stderr=stderr.encode('utf-8'))


Response = Union[CommandResult, Callable[[str, List[str], Dict[str, str]], CommandResult]]


class FakeRunner:
    """
    Command runner that never spawns a process.

    Responses are keyed by the full command line ("gopass show --password a/b",
    "sh -c echo hi"). Unscripted commands get the default response.
    """

    def __init__(self, responses: Optional[Dict[str, Response]] = None, default: Optional[Response] = None):
        self.responses = dict(responses or {})
        self.default = default or CommandResult(
            exit_code=127,
            error={"type": "execution_error", "message": "command not scripted", "context": {}},
        )
        self.calls: List[RecordedCall] = []

    def run(self, program: str, args: List[str], env: Dict[str, str]) -> CommandResult:
        call = RecordedCall(program, list(args), dict(env))
        self.calls.append(call)
        response = self.responses.get(call.command_line, self.default)
        if callable(response):
            return response(program, list(args), dict(env))
        return response

    @property
    def command_lines(self) -> List[str]:
        return [call.command_line for call in self.calls]


@pytest.fixture
def fake_runner():
    """FakeRunner with no scripted responses."""
    return FakeRunner()


@pytest.fixture
def write_env(tmp_path):
    """Write an env file into tmp_path and return its path."""
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content)
        return path
    return _write
