"""
Command runner capability.
The only side-effecting dependency of the resolution engine; tests swap in
a runner that never spawns a process.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one command invocation."""
    exit_code: int
    stdout: bytes = b""
    stderr: bytes = b""
    error: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and self.error is None

    def text(self) -> str:
        """Decoded stdout with a single trailing newline removed."""
        output = self.stdout.decode('utf-8', errors='replace')
        if output.endswith('\n'):
            output = output[:-1]
        return output

    def describe_failure(self) -> str:
        """Short human-readable reason for a failed invocation."""
        if self.error:
            return self.error.get("message", "execution error")
        return f"exit status {self.exit_code}"


class CommandRunner(Protocol):
    """Runs a program with arguments in a given environment."""

    def run(self, program: str, args: List[str], env: Dict[str, str]) -> CommandResult:
        ...


class SubprocessRunner:
    """
    Runs commands as real child processes.

    Stdout is captured; stderr is inherited so the child's diagnostics show
    up on load-env's own stderr as they happen. There is no timeout: a
    command that hangs blocks resolution.
    """

    def run(self, program: str, args: List[str], env: Dict[str, str]) -> CommandResult:
        """
        Execute program with args.

        Args:
            program: Executable name or path
            args: Arguments after the program name
            env: Complete environment for the child

        Returns:
            CommandResult; spawn failures are reported in error, never raised
        """
        argv = [program, *args]
        logger.debug(f"Running command: {argv}")

        try:
            # argv mode, no shell=True
            result = subprocess.run(
                argv,
                env=env,
                stdout=subprocess.PIPE,
                stderr=None,
            )
        except (OSError, ValueError) as e:
            return CommandResult(
                exit_code=127,
                error={
                    "type": "execution_error",
                    "message": str(e),
                    "context": {"argv": argv},
                },
            )

        return CommandResult(exit_code=result.returncode, stdout=result.stdout or b"")
