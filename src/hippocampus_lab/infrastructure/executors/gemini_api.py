"""
Gemini (Google GenAI SDK via Vertex AI) executor
"""

import os
import time

from google import genai
from google.api_core import exceptions as google_exceptions
from google.genai.types import GenerateContentConfig, HttpOptions

from hippocampus_lab.domain.errors import HarnessError
from hippocampus_lab.domain.value_objects import ExecutionResponse
from hippocampus_lab.infrastructure.executors.base import ModelExecutor, RetryMixin

_RETRYABLE = (
    google_exceptions.DeadlineExceeded,
    google_exceptions.ServiceUnavailable,
    google_exceptions.ResourceExhausted,
)


class GeminiAPIExecutor(RetryMixin, ModelExecutor):
    """Executor using Google GenAI SDK (via Vertex AI)"""

    def __init__(
        self,
        model_name: str,
        project_id: str | None = None,
        location: str | None = None,
        temperature: float = 0.0,
        timeout_seconds: int = 30,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
    ):
        """
        Args:
            model_name: Model name (e.g. gemini-2.5-flash)
            project_id: GCP project ID (falls back to environment variable if not specified)
            location: Region (default: global)
            temperature: Sampling temperature (default: 0.0)
            timeout_seconds: Timeout in seconds (default: 30)
            max_retries: Maximum number of attempts (default: 3)
            retry_delay_seconds: Base backoff delay in seconds (default: 1.0)
        """
        self.model_name = model_name
        self.project_id = project_id or os.environ.get("GCP_PROJECT_ID")
        self.location = location or "global"
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds

        if not self.project_id:
            raise HarnessError.configuration("GCP_PROJECT_ID is not set")

        # Timeout is configured via HttpOptions (milliseconds)
        self.client = genai.Client(
            vertexai=True,
            project=self.project_id,
            location=self.location,
            http_options=HttpOptions(timeout=timeout_seconds * 1000),
        )
        self.generation_config = GenerateContentConfig(temperature=temperature)

    def execute(self, prompt: str) -> ExecutionResponse:
        """
        Send a prompt and retrieve the response

        Raises:
            HarnessError: EXECUTION once all retries are exhausted
        """
        def _call():
            start_time = time.time()
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=self.generation_config,
            )
            latency_ms = (time.time() - start_time) * 1000

            input_tokens = None
            output_tokens = None
            if getattr(response, "usage_metadata", None):
                input_tokens = getattr(response.usage_metadata, "prompt_token_count", None)
                output_tokens = getattr(response.usage_metadata, "candidates_token_count", None)

            return ExecutionResponse(
                response=(response.text or "").strip(),
                latency_ms=latency_ms,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                model_name=self.model_name,
            )

        try:
            return self._with_retry(_call, retryable_exceptions=_RETRYABLE)
        except _RETRYABLE as e:
            raise HarnessError.execution(f"Gemini API call failed: {e}") from e
