"""
Dry-run executor

Returns canned responses without invoking any model.
"""

import math
import random

from hippocampus_lab.domain.value_objects import ExecutionResponse
from hippocampus_lab.infrastructure.executors.base import ModelExecutor

MOCK_OUTPUT_TOKENS = 20


def _last_question(prompt: str) -> str:
    user_lines = [line for line in prompt.split("\n") if line.startswith("User:")]
    if not user_lines:
        return ""
    return user_lines[-1].replace("User:", "", 1).strip()


class DryRunExecutor(ModelExecutor):
    """Executor producing mock responses for pipeline dry runs"""

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng if rng is not None else random.Random()

    def execute(self, prompt: str) -> ExecutionResponse:
        question = _last_question(prompt)
        return ExecutionResponse(
            response=f'[DRY RUN] Mock response to: "{question[:50]}..."',
            latency_ms=self._rng.random() * 100 + 50,
            input_tokens=math.ceil(len(prompt) / 4),
            output_tokens=MOCK_OUTPUT_TOKENS,
            model_name="dry-run",
        )
