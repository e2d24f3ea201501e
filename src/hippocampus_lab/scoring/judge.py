"""
Subjective (LLM-as-judge) scoring

Builds the judge prompt, runs it through an executor, and extracts a validated
coherence/fluency judgment from the judge's free-form reply.
"""

from __future__ import annotations

import json
import logging
import random
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hippocampus_lab.infrastructure.executors.base import ModelExecutor

from hippocampus_lab.domain.constants import JUDGE_SCORE_MAX, JUDGE_SCORE_MIN
from hippocampus_lab.domain.errors import HarnessError
from hippocampus_lab.domain.value_objects import SubjectiveScores

logger = logging.getLogger(__name__)

JUDGE_PROMPT_TEMPLATE = """You are evaluating an AI assistant's response for quality.

## Conversation History
{conversation_context}

## Question Asked
"{question}"

## Response to Evaluate
"{response}"

## Scoring Criteria (1-5 scale)

**Coherence:** Does the response fit naturally with the conversation?
- 5: Perfectly consistent with all prior context
- 3: Minor inconsistencies or missed references
- 1: Contradicts or ignores conversation history

**Fluency:** Is the response well-formed and clear?
- 5: Clear, well-structured, appropriate length
- 3: Understandable but awkward or verbose
- 1: Confusing, incomplete, or poorly written

IMPORTANT: Do NOT evaluate factual correctness. Only evaluate coherence and fluency.

Respond ONLY with JSON: {{"coherence": N, "fluency": N, "reasoning": "brief explanation"}}"""

MOCK_REASONING = "[DRY RUN] Mock evaluation"

# First {...} fragment mentioning both keys, in order
_JUDGMENT_RE = re.compile(r"\{[\s\S]*?\"coherence\"[\s\S]*?\"fluency\"[\s\S]*?\}")

_DIAGNOSTIC_PREFIX_CHARS = 200


def build_judge_prompt(conversation_context: str, question: str, response: str) -> str:
    """Fill the judge prompt template"""
    return JUDGE_PROMPT_TEMPLATE.format(
        conversation_context=conversation_context,
        question=question,
        response=response,
    )


def _validate_score(data: dict, field: str) -> float:
    value = data.get(field)
    # bool is an int subclass but not a score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise HarnessError.parse(f"Invalid {field} score: {value!r}", field=field, value=value)
    if not JUDGE_SCORE_MIN <= value <= JUDGE_SCORE_MAX:
        raise HarnessError.parse(f"Invalid {field} score: {value!r}", field=field, value=value)
    return value


def parse_judge_response(text: str) -> SubjectiveScores:
    """
    Extract a coherence/fluency judgment from the judge's reply

    Args:
        text: Raw judge output

    Returns:
        SubjectiveScores

    Raises:
        HarnessError: (kind PARSE) when no JSON fragment is found, the fragment
            does not parse, or a score is not a number within [1, 5]
    """
    match = _JUDGMENT_RE.search(text)
    if not match:
        raise HarnessError.parse(
            f"Could not find JSON in judge response: {text[:_DIAGNOSTIC_PREFIX_CHARS]}"
        )

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise HarnessError.parse(f"Failed to parse judge response: {e}") from e

    if not isinstance(data, dict):
        raise HarnessError.parse(f"Failed to parse judge response: expected an object, got {type(data).__name__}")

    coherence = _validate_score(data, "coherence")
    fluency = _validate_score(data, "fluency")
    reasoning = data.get("reasoning")

    return SubjectiveScores(
        coherence=coherence,
        fluency=fluency,
        reasoning=reasoning if isinstance(reasoning, str) else "",
    )


def mock_subjective_scores(rng: random.Random) -> SubjectiveScores:
    """
    Placeholder judgment used when no live judge is called

    Coherence and fluency are drawn independently from {3, 4, 5}.
    """
    return SubjectiveScores(
        coherence=rng.randint(3, 5),
        fluency=rng.randint(3, 5),
        reasoning=MOCK_REASONING,
    )


class SubjectiveJudge:
    """
    Scorer that uses an LLM as a judge of coherence and fluency

    Factual correctness is left to the objective scorer.
    """

    def __init__(self, executor: ModelExecutor) -> None:
        self._executor = executor

    def judge(self, conversation_context: str, question: str, response: str) -> SubjectiveScores:
        """
        Have the judge model score a response

        Raises:
            HarnessError: PARSE when the judge output is unusable, or the
                executor's EXECUTION / TIMEOUT error
        """
        prompt = build_judge_prompt(conversation_context, question, response)
        result = self._executor.execute(prompt)
        logger.debug("Judge replied in %.0fms", result.latency_ms)
        return parse_judge_response(result.response)
