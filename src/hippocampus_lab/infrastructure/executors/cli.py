"""
Command-line LLM executor

Runs an external LLM command-line tool (claude / gemini / codex) as a subprocess
with the prompt as its argument.
"""

import subprocess
import time

from hippocampus_lab.domain.constants import CLIType
from hippocampus_lab.domain.errors import HarnessError
from hippocampus_lab.domain.value_objects import ExecutionResponse
from hippocampus_lab.infrastructure.executors.base import ModelExecutor, RetryMixin

# Command and leading arguments per CLI; the prompt is appended last
CLI_COMMANDS: dict[str, list[str]] = {
    CLIType.CLAUDE.value: ["claude", "-p"],
    CLIType.GEMINI.value: ["gemini", "-p"],
    CLIType.CODEX.value: ["codex", "-p"],
}


def get_cli_command(cli: str) -> list[str]:
    """
    Get the command line for a CLI type

    Raises:
        HarnessError: (kind CONFIGURATION) for an unsupported CLI
    """
    command = CLI_COMMANDS.get(cli)
    if command is None:
        raise HarnessError.configuration(f"Unsupported CLI: {cli}")
    return list(command)


class CLIExecutor(RetryMixin, ModelExecutor):
    """Executor that shells out to an LLM command-line tool"""

    def __init__(
        self,
        cli: str,
        timeout_seconds: int = 30,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
    ):
        """
        Args:
            cli: CLI type (claude, gemini, codex)
            timeout_seconds: Timeout per attempt in seconds (default: 30)
            max_retries: Maximum number of attempts (default: 3)
            retry_delay_seconds: Base backoff delay in seconds (default: 1.0)
        """
        self.cli = cli
        self.command = get_cli_command(cli)
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

    def _run(self, prompt: str) -> str:
        try:
            proc = subprocess.run(
                [*self.command, prompt],
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            stderr = e.stderr if isinstance(e.stderr, str) else ""
            raise HarnessError.timeout(
                f"{self.cli} timed out after {self.timeout_seconds}s", stderr=stderr
            ) from e
        except OSError as e:
            raise HarnessError.execution(f"Failed to start {self.cli}: {e}") from e

        if proc.returncode != 0:
            raise HarnessError.execution(
                f"CLI exited with code {proc.returncode}",
                exit_code=proc.returncode,
                stderr=proc.stderr or "",
            )
        return proc.stdout

    def execute(self, prompt: str) -> ExecutionResponse:
        """
        Send a prompt and retrieve the response

        Token counts are not reported by the CLIs and are left unset.

        Raises:
            HarnessError: EXECUTION or TIMEOUT once all retries are exhausted
        """
        def _call():
            start_time = time.time()
            stdout = self._run(prompt)
            latency_ms = (time.time() - start_time) * 1000
            return ExecutionResponse(response=stdout.strip(), latency_ms=latency_ms)

        return self._with_retry(_call, retryable_exceptions=(HarnessError,))
