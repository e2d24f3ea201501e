"""
Tests for result aggregation

Grouping order, point estimates, confidence intervals, and report metadata.
"""

import pytest

from hippocampus_lab.domain.entities import EvaluatedResult, ExecutionResult
from hippocampus_lab.domain.value_objects import ObjectiveScores, SubjectiveScores
from hippocampus_lab.use_cases.aggregation import (
    aggregate_by_technique,
    generate_report,
    reports_to_dataframe,
)


def make_result(
    technique: str,
    exact_match: bool,
    entity_recall: float,
    coherence: float = 4,
    fluency: float = 4,
    input_tokens: int | None = 100,
    latency_ms: float = 500,
) -> EvaluatedResult:
    execution = ExecutionResult(
        experiment_id="test",
        timestamp="2026-01-01T00:00:00+00:00",
        technique=technique,
        cli="claude",
        conversation_id="conv-1",
        question_index=0,
        prompt="test prompt",
        response="test response",
        latency_ms=latency_ms,
        input_tokens=input_tokens,
        output_tokens=20,
    )
    return EvaluatedResult(
        execution=execution,
        objective=ObjectiveScores(exact_match=exact_match, entity_recall=entity_recall),
        subjective=SubjectiveScores(coherence=coherence, fluency=fluency),
    )


class TestAggregateByTechnique:
    """Tests for aggregate_by_technique"""

    def test_empty_input(self):
        assert aggregate_by_technique([]) == []

    def test_groups_by_technique(self):
        results = [
            make_result("baseline-full", True, 1.0),
            make_result("baseline-full", False, 0.5),
            make_result("baseline-none", False, 0.0),
        ]
        reports = aggregate_by_technique(results)
        assert [(r.technique, r.n) for r in reports] == [("baseline-full", 2), ("baseline-none", 1)]

    def test_first_seen_order(self):
        results = [
            make_result("zeta", True, 1.0),
            make_result("alpha", True, 1.0),
            make_result("zeta", False, 0.0),
            make_result("mid", True, 1.0),
            make_result("alpha", False, 0.0),
        ]
        assert [r.technique for r in aggregate_by_technique(results)] == ["zeta", "alpha", "mid"]

    def test_exact_string_grouping(self):
        results = [make_result("Recency", True, 1.0), make_result("recency", True, 1.0)]
        assert len(aggregate_by_technique(results)) == 2

    def test_point_estimates(self):
        results = [
            make_result("A", True, 1.0, coherence=5, fluency=4),
            make_result("A", True, 0.8, coherence=4, fluency=5),
            make_result("A", False, 0.6, coherence=3, fluency=3),
        ]
        m = aggregate_by_technique(results)[0].metrics
        assert m.exact_match_rate == pytest.approx(2 / 3)
        assert m.avg_entity_recall == pytest.approx(0.8)
        assert m.avg_coherence == pytest.approx(4.0)
        assert m.avg_fluency == pytest.approx(4.0)
        assert m.avg_tokens == pytest.approx(100)
        assert m.avg_latency_ms == pytest.approx(500)

    def test_missing_tokens_count_as_zero(self):
        results = [
            make_result("A", True, 1.0, input_tokens=None),
            make_result("A", True, 1.0, input_tokens=300),
        ]
        assert aggregate_by_technique(results)[0].metrics.avg_tokens == pytest.approx(150)

    def test_all_missing_tokens(self):
        results = [make_result("A", True, 1.0, input_tokens=None)]
        assert aggregate_by_technique(results)[0].metrics.avg_tokens == 0.0

    @pytest.mark.parametrize("outcome", [True, False])
    def test_identical_outcomes_zero_width_ci(self, outcome):
        results = [make_result("A", outcome, 0.5) for _ in range(5)]
        m = aggregate_by_technique(results)[0].metrics
        assert m.exact_match_rate == (1.0 if outcome else 0.0)
        assert m.ci95_exact_match_rate.lower == m.ci95_exact_match_rate.upper
        assert m.ci95_entity_recall.lower == pytest.approx(0.5)
        assert m.ci95_entity_recall.upper == pytest.approx(0.5)

    def test_single_trial_collapses_recall_ci(self):
        m = aggregate_by_technique([make_result("A", True, 0.7)])[0].metrics
        assert m.ci95_entity_recall.lower == pytest.approx(0.7)
        assert m.ci95_entity_recall.upper == pytest.approx(0.7)

    def test_confidence_intervals_ordered_and_bounded(self):
        results = [
            make_result("A", True, 1.0),
            make_result("A", True, 0.9),
            make_result("A", False, 0.1),
            make_result("B", False, 0.0),
            make_result("B", True, 1.0),
        ]
        for report in aggregate_by_technique(results):
            for ci in (report.metrics.ci95_exact_match_rate, report.metrics.ci95_entity_recall):
                assert 0.0 <= ci.lower <= ci.upper <= 1.0

    def test_ci_contains_point_estimate(self):
        results = [make_result("A", i % 3 == 0, i / 10) for i in range(10)]
        m = aggregate_by_technique(results)[0].metrics
        assert m.ci95_exact_match_rate.lower <= m.exact_match_rate <= m.ci95_exact_match_rate.upper
        assert m.ci95_entity_recall.lower <= m.avg_entity_recall <= m.ci95_entity_recall.upper


class TestGenerateReport:
    """Tests for generate_report"""

    def test_metadata(self):
        report = generate_report([make_result("baseline-full", True, 1.0)], "exp-123", "claude", "opus")
        assert report.experiment_id == "exp-123"
        assert report.cli == "claude"
        assert report.model == "opus"
        assert report.timestamp
        assert len(report.techniques) == 1

    def test_empty_results(self):
        report = generate_report([], "exp-empty", "gemini")
        assert report.techniques == ()
        assert report.model is None

    def test_to_dict_shape(self):
        report = generate_report(
            [make_result("A", True, 1.0)], "exp", "claude", timestamp="2026-01-01T00:00:00+00:00"
        )
        data = report.to_dict()
        assert data["timestamp"] == "2026-01-01T00:00:00+00:00"
        metrics = data["techniques"][0]["metrics"]
        assert set(metrics["ci95"]) == {"exactMatchRate", "entityRecall"}
        assert "model" not in data


class TestReportsToDataframe:
    def test_one_row_per_technique(self):
        results = [make_result("A", True, 1.0), make_result("B", False, 0.0)]
        df = reports_to_dataframe(generate_report(results, "exp", "claude"))
        assert list(df["technique"]) == ["A", "B"]
        assert list(df["n"]) == [1, 1]
        assert "exact_match_ci_lower" in df.columns
