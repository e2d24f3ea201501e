"""
Result Aggregation

Groups scored trials by technique and computes point estimates with 95%
confidence intervals.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

import pandas as pd

from hippocampus_lab.domain.entities import EvaluatedResult, ExperimentReport, TechniqueReport
from hippocampus_lab.domain.value_objects import TechniqueMetrics
from hippocampus_lab.statistics import mean_ci, proportion_ci


def _to_row(result: EvaluatedResult) -> dict:
    return {
        "technique": result.technique,
        # Missing token counts count as zero
        "input_tokens": result.input_tokens or 0,
        "latency_ms": result.latency_ms,
        "exact_match": bool(result.objective.exact_match),
        "entity_recall": result.objective.entity_recall,
        "coherence": result.subjective.coherence,
        "fluency": result.subjective.fluency,
    }


def _summarize_group(technique: str, group: pd.DataFrame) -> TechniqueReport:
    n = len(group)
    exact_match_rate = int(group["exact_match"].sum()) / n
    recall_values = [float(v) for v in group["entity_recall"]]

    metrics = TechniqueMetrics(
        avg_tokens=float(group["input_tokens"].mean()),
        avg_latency_ms=float(group["latency_ms"].mean()),
        exact_match_rate=exact_match_rate,
        avg_entity_recall=float(group["entity_recall"].mean()),
        avg_coherence=float(group["coherence"].mean()),
        avg_fluency=float(group["fluency"].mean()),
        ci95_exact_match_rate=proportion_ci(exact_match_rate, n),
        ci95_entity_recall=mean_ci(recall_values),
    )
    return TechniqueReport(technique=technique, n=n, metrics=metrics)


def aggregate_by_technique(results: Sequence[EvaluatedResult]) -> list[TechniqueReport]:
    """
    Aggregate scored trials per technique.

    Groups keep the order in which each technique first appears in ``results``.

    Args:
        results: Scored trial records

    Returns:
        list[TechniqueReport]: One report per distinct technique (empty for empty input)
    """
    if not results:
        return []

    df = pd.DataFrame([_to_row(r) for r in results])
    return [
        _summarize_group(technique, group)
        for technique, group in df.groupby("technique", sort=False)
    ]


def generate_report(
    results: Sequence[EvaluatedResult],
    experiment_id: str,
    cli: str,
    model: str | None = None,
    timestamp: str | None = None,
) -> ExperimentReport:
    """
    Build an ExperimentReport from scored trials.

    Args:
        results: Scored trial records
        experiment_id: Experiment ID
        cli: CLI the trials were run with
        model: Model name (optional)
        timestamp: Report timestamp (defaults to now, ISO 8601 UTC)

    Returns:
        ExperimentReport
    """
    return ExperimentReport(
        experiment_id=experiment_id,
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
        cli=cli,
        model=model,
        techniques=tuple(aggregate_by_technique(results)),
    )


def reports_to_dataframe(report: ExperimentReport) -> pd.DataFrame:
    """Flatten technique reports into one row per technique (for CSV output)"""
    rows = []
    for t in report.techniques:
        m = t.metrics
        rows.append({
            "experiment_id": report.experiment_id,
            "technique": t.technique,
            "n": t.n,
            "exact_match_rate": m.exact_match_rate,
            "exact_match_ci_lower": m.ci95_exact_match_rate.lower,
            "exact_match_ci_upper": m.ci95_exact_match_rate.upper,
            "avg_entity_recall": m.avg_entity_recall,
            "entity_recall_ci_lower": m.ci95_entity_recall.lower,
            "entity_recall_ci_upper": m.ci95_entity_recall.upper,
            "avg_coherence": m.avg_coherence,
            "avg_fluency": m.avg_fluency,
            "avg_tokens": m.avg_tokens,
            "avg_latency_ms": m.avg_latency_ms,
        })
    return pd.DataFrame(rows)
