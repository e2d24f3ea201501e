"""
Anthropic Claude API executor
"""

import os
import time

from anthropic import Anthropic, APIConnectionError, RateLimitError, APIStatusError

from hippocampus_lab.domain.errors import HarnessError
from hippocampus_lab.domain.value_objects import ExecutionResponse
from hippocampus_lab.infrastructure.executors.base import ModelExecutor, RetryMixin

_RETRYABLE = (APIConnectionError, RateLimitError, APIStatusError)


class ClaudeAPIExecutor(RetryMixin, ModelExecutor):
    """Executor using the Anthropic Messages API"""

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        temperature: float = 0.0,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        max_tokens: int = 1024,
    ):
        """
        Args:
            model_name: Model name (e.g. claude-haiku-4-5-20251001)
            api_key: Anthropic API key (falls back to environment variable if not specified)
            temperature: Sampling temperature (default: 0.0)
            max_retries: Maximum number of attempts (default: 3)
            retry_delay_seconds: Base backoff delay in seconds (default: 1.0)
            max_tokens: Maximum number of output tokens (default: 1024)
        """
        self.model_name = model_name
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.temperature = temperature
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.max_tokens = max_tokens

        if not self.api_key:
            raise HarnessError.configuration("ANTHROPIC_API_KEY is not set")

        self.client = Anthropic(api_key=self.api_key)

    def execute(self, prompt: str) -> ExecutionResponse:
        """
        Send a prompt and retrieve the response

        Raises:
            HarnessError: EXECUTION once all retries are exhausted
        """
        def _call():
            start_time = time.time()
            response = self.client.messages.create(
                model=self.model_name,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt}]
            )
            latency_ms = (time.time() - start_time) * 1000

            return ExecutionResponse(
                response=response.content[0].text.strip(),
                latency_ms=latency_ms,
                input_tokens=getattr(response.usage, "input_tokens", None),
                output_tokens=getattr(response.usage, "output_tokens", None),
                model_name=self.model_name,
            )

        try:
            return self._with_retry(_call, retryable_exceptions=_RETRYABLE)
        except _RETRYABLE as e:
            raise HarnessError.execution(f"Claude API call failed: {e}") from e
