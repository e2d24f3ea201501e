"""
Trial Execution and Evaluation

Per-record logic for the first two pipeline phases: running one trial through
an executor, and scoring one executed trial.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone

from hippocampus_lab.domain.entities import EvaluatedResult, ExecutionResult, TestConversation
from hippocampus_lab.harness_config import TechniqueConfig
from hippocampus_lab.infrastructure.executors.base import ModelExecutor
from hippocampus_lab.scoring.judge import SubjectiveJudge, mock_subjective_scores
from hippocampus_lab.scoring.objective import evaluate_objective
from hippocampus_lab.techniques import Technique, format_turns


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def execute_trial(
    technique: Technique,
    conversation: TestConversation,
    question_index: int,
    executor: ModelExecutor,
    experiment_id: str,
    cli: str,
    config: TechniqueConfig | None = None,
    rng: random.Random | None = None,
    model: str | None = None,
) -> ExecutionResult:
    """
    Execute a single trial.

    Args:
        technique: Technique selecting the prompt history
        conversation: Conversation under test
        question_index: Index into conversation.recall_questions
        executor: Executor that sends the prompt to the model
        experiment_id: Experiment ID
        cli: CLI name recorded on the result
        config: TechniqueConfig
        rng: Random source for sampling techniques
        model: Model name recorded on the result (optional)

    Returns:
        ExecutionResult

    Raises:
        HarnessError: EXECUTION / TIMEOUT from the executor
    """
    question = conversation.recall_questions[question_index]
    prompt = technique.build_prompt(conversation, question, config=config, rng=rng)
    response = executor.execute(prompt)

    return ExecutionResult(
        experiment_id=experiment_id,
        timestamp=_now(),
        technique=technique.name,
        cli=cli,
        conversation_id=conversation.id,
        question_index=question_index,
        prompt=prompt,
        response=response.response,
        latency_ms=response.latency_ms,
        model=model or response.model_name,
        input_tokens=response.input_tokens,
        output_tokens=response.output_tokens,
    )


def evaluate_result(
    result: ExecutionResult,
    conversation: TestConversation,
    judge: SubjectiveJudge | None = None,
    rng: random.Random | None = None,
) -> EvaluatedResult:
    """
    Score an executed trial.

    Objective scores are always computed. Subjective scores come from the judge,
    or from the mock scorer when no judge is given.

    Raises:
        IndexError: When the result's question index is not in the conversation
        HarnessError: PARSE / EXECUTION / TIMEOUT from the judge
    """
    question = conversation.recall_questions[result.question_index]
    objective = evaluate_objective(result.response, question)

    if judge is None:
        subjective = mock_subjective_scores(rng if rng is not None else random.Random())
    else:
        subjective = judge.judge(format_turns(conversation.turns), question.question, result.response)

    return EvaluatedResult(execution=result, objective=objective, subjective=subjective)
