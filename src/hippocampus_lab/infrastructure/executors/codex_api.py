"""
OpenAI-compatible API executor (used for the codex CLI type)
"""

import os
import time

import openai
from openai import OpenAI

from hippocampus_lab.domain.errors import HarnessError
from hippocampus_lab.domain.value_objects import ExecutionResponse
from hippocampus_lab.infrastructure.executors.base import ModelExecutor, RetryMixin

_RETRYABLE = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.APIStatusError,
)


class CodexAPIExecutor(RetryMixin, ModelExecutor):
    """Executor using the OpenAI Chat Completions API"""

    def __init__(
        self,
        model_name: str,
        base_url: str | None = None,
        api_key: str | None = None,
        temperature: float = 0.0,
        timeout_seconds: int = 30,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        max_tokens: int = 1024,
    ):
        """
        Args:
            model_name: Model name (e.g. gpt-4.1-mini)
            base_url: API endpoint (falls back to OPENAI_BASE_URL env var if not specified)
            api_key: API key (falls back to OPENAI_API_KEY env var if not specified)
            temperature: Sampling temperature (default: 0.0)
            timeout_seconds: Request timeout in seconds (default: 30)
            max_retries: Maximum number of attempts (default: 3)
            retry_delay_seconds: Base backoff delay in seconds (default: 1.0)
            max_tokens: Maximum number of output tokens (default: 1024)
        """
        self.model_name = model_name
        self.temperature = temperature
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.max_tokens = max_tokens

        # Configuration priority: argument > environment variable
        base_url = base_url or os.environ.get("OPENAI_BASE_URL")
        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise HarnessError.configuration("OPENAI_API_KEY is not set")

        self.client = OpenAI(base_url=base_url, api_key=api_key, timeout=timeout_seconds, max_retries=0)

    def execute(self, prompt: str) -> ExecutionResponse:
        """
        Send a prompt and retrieve the response

        Raises:
            HarnessError: EXECUTION once all retries are exhausted
        """
        def _call():
            start_time = time.time()
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            latency_ms = (time.time() - start_time) * 1000

            input_tokens = None
            output_tokens = None
            if response.usage:
                input_tokens = response.usage.prompt_tokens
                output_tokens = response.usage.completion_tokens

            return ExecutionResponse(
                response=(response.choices[0].message.content or "").strip(),
                latency_ms=latency_ms,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                model_name=self.model_name,
            )

        try:
            return self._with_retry(_call, retryable_exceptions=_RETRYABLE)
        except _RETRYABLE as e:
            raise HarnessError.execution(f"OpenAI API call failed: {e}") from e
