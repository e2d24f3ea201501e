"""
Objective scoring functions

Deterministic metrics computed without model judgment. Matching is plain
case-insensitive substring containment: no stemming, tokenization, or fuzzy matching.
"""

from __future__ import annotations

from typing import Sequence

from hippocampus_lab.domain.entities import RecallQuestion
from hippocampus_lab.domain.value_objects import ObjectiveScores


def exact_match(response: str, expected_answer: str) -> bool:
    """
    Check whether the response contains the expected answer

    Args:
        response: Model response
        expected_answer: Expected answer

    Returns:
        True if the lower-cased answer is a substring of the lower-cased response
    """
    return expected_answer.lower() in response.lower()


def entity_recall(response: str, expected_entities: Sequence[str]) -> float:
    """
    Fraction of expected entities mentioned in the response

    Only recall is measured; precision would need entity extraction from the response.

    Args:
        response: Model response
        expected_entities: Entities the answer should mention

    Returns:
        Recall (0.0 to 1.0). 1.0 when there are no expected entities.
    """
    if not expected_entities:
        return 1.0

    response_lower = response.lower()
    found = sum(1 for entity in expected_entities if entity.lower() in response_lower)
    return found / len(expected_entities)


def evaluate_objective(response: str, question: RecallQuestion) -> ObjectiveScores:
    """Score a response against a question's expected answer and entities"""
    return ObjectiveScores(
        exact_match=exact_match(response, question.expected_answer),
        entity_recall=entity_recall(response, question.expected_entities),
    )
