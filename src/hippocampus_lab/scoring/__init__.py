"""
Scoring sub-package

Provides objective (string/entity matching) and subjective (LLM judge) scoring.
"""

from hippocampus_lab.domain.value_objects import ObjectiveScores, SubjectiveScores
from hippocampus_lab.scoring.objective import (
    entity_recall,
    evaluate_objective,
    exact_match,
)
from hippocampus_lab.scoring.judge import (
    JUDGE_PROMPT_TEMPLATE,
    SubjectiveJudge,
    build_judge_prompt,
    mock_subjective_scores,
    parse_judge_response,
)

__all__ = [
    # value objects (re-exported from domain)
    "ObjectiveScores",
    "SubjectiveScores",
    # objective
    "entity_recall",
    "evaluate_objective",
    "exact_match",
    # judge
    "JUDGE_PROMPT_TEMPLATE",
    "SubjectiveJudge",
    "build_judge_prompt",
    "mock_subjective_scores",
    "parse_judge_response",
]
