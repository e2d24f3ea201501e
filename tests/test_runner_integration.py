"""
Integration test for the CLI pipeline (dry-run and mocked executors).

Verifies the three phases work end-to-end on the sample datasets:
1. run: execute every technique on every recall question
2. evaluate: attach objective and subjective scores
3. report: aggregate into markdown and CSV
"""

import json
import random
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pandas as pd
import pytest

from hippocampus_lab.domain.value_objects import ExecutionResponse
from hippocampus_lab.harness_config import ExecutorConfig, HarnessConfig, RunConfig
from hippocampus_lab.infrastructure.jsonl import read_json_lines
from hippocampus_lab.runner import (
    evaluate_results,
    generate_experiment_id,
    generate_report_file,
    main,
    parse_args,
    run_experiments,
    validate_datasets,
)

SAMPLES_DIR = Path(__file__).resolve().parents[1] / "datasets" / "samples"


def _config(tmp_path, dry_run=True, techniques=None) -> HarnessConfig:
    run = RunConfig(datasets_dir=str(SAMPLES_DIR), output_dir=str(tmp_path / "results"), seed=1)
    if techniques is not None:
        run = replace(run, techniques=techniques)
    return HarnessConfig(executor=ExecutorConfig(dry_run=dry_run), run=run)


def _expected_trials(techniques: int) -> int:
    total = 0
    for path in SAMPLES_DIR.glob("*.json"):
        total += len(json.loads(path.read_text(encoding="utf-8"))["recallQuestions"])
    return total * techniques


class TestExperimentId:

    def test_format(self):
        now = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        experiment_id = generate_experiment_id(now)
        date, suffix = experiment_id.rsplit("-", 1)
        assert date == "2026-01-15"
        assert int(suffix, 36) == int(now.timestamp() * 1000)


class TestDryRunPipeline:

    def test_run_evaluate_report(self, tmp_path):
        config = _config(tmp_path)
        rng = random.Random(config.run.seed)

        raw_path = run_experiments(config, rng)
        raw = read_json_lines(raw_path)
        assert len(raw) == _expected_trials(4)
        assert raw_path.parent.name == "raw"
        assert all(r["response"].startswith("[DRY RUN]") for r in raw)
        assert {r["technique"] for r in raw} == {
            "baseline-full", "baseline-none", "baseline-random", "baseline-recency",
        }

        scored_path = evaluate_results(raw_path, config, rng)
        scored = read_json_lines(scored_path)
        assert len(scored) == len(raw)
        assert scored_path.name == raw_path.name
        for record in scored:
            assert record["subjective"]["reasoning"] == "[DRY RUN] Mock evaluation"
            assert 3 <= record["subjective"]["coherence"] <= 5

        report_path = generate_report_file(scored_path, config)
        markdown = report_path.read_text(encoding="utf-8")
        assert markdown.startswith("# Experiment Report")
        assert "## Confidence Intervals (95%)" in markdown

        summary = pd.read_csv(report_path.with_suffix(".csv"))
        assert list(summary["technique"]) == [
            "baseline-full", "baseline-none", "baseline-random", "baseline-recency",
        ]
        assert (summary["exact_match_ci_lower"] <= summary["exact_match_ci_upper"]).all()

    def test_technique_selection(self, tmp_path):
        config = _config(tmp_path, techniques=["baseline-none"])
        raw = read_json_lines(run_experiments(config, random.Random(0)))
        assert len(raw) == _expected_trials(1)
        # no history means the prompt is the system instruction plus the question
        assert all(r["prompt"].count("\n\n") == 1 for r in raw)

    def test_missing_datasets_dir(self, tmp_path):
        config = _config(tmp_path)
        config = replace(config, run=replace(config.run, datasets_dir=str(tmp_path / "none")))
        raw_path = run_experiments(config, random.Random(0))
        assert not raw_path.exists()


class TestMockedExecutors:

    def test_failed_trials_are_skipped(self, tmp_path):
        from hippocampus_lab.domain.errors import HarnessError

        config = _config(tmp_path, dry_run=False, techniques=["baseline-full"])
        executor = MagicMock()
        executor.execute.side_effect = [
            HarnessError.execution("CLI exited with code 1", exit_code=1),
            ExecutionResponse(response="You live in Lisbon.", latency_ms=10.0),
        ] + [ExecutionResponse(response="I don't know.", latency_ms=10.0)] * 50

        raw = read_json_lines(run_experiments(config, random.Random(0), executor=executor))
        assert len(raw) == _expected_trials(1) - 1

    def test_judge_scores_and_parse_errors(self, tmp_path):
        config = _config(tmp_path, dry_run=True, techniques=["baseline-full"])
        raw_path = run_experiments(config, random.Random(0))
        trials = len(read_json_lines(raw_path))

        judge_executor = MagicMock()
        judge_executor.execute.side_effect = [
            ExecutionResponse(response="not json at all", latency_ms=1.0),
        ] + [
            ExecutionResponse(
                response='Sure: {"coherence": 4, "fluency": 5, "reasoning": "clear"}',
                latency_ms=1.0,
            )
        ] * 50

        live = replace(config, executor=replace(config.executor, dry_run=False))
        scored = read_json_lines(evaluate_results(raw_path, live, random.Random(0), judge_executor))
        assert len(scored) == trials - 1
        assert all(r["subjective"] == {"coherence": 4, "fluency": 5, "reasoning": "clear"} for r in scored)

    def test_unknown_conversation_skipped(self, tmp_path):
        config = _config(tmp_path)
        raw_path = tmp_path / "raw.jsonl"
        raw_path.write_text(json.dumps({
            "experimentId": "x", "timestamp": "t", "technique": "baseline-full", "cli": "claude",
            "conversationId": "missing", "questionIndex": 0, "prompt": "p", "response": "r",
            "latencyMs": 1,
        }) + "\n", encoding="utf-8")
        scored_path = evaluate_results(raw_path, config, random.Random(0))
        assert not scored_path.exists()


class TestCommandLine:

    def test_parse_run_args(self):
        args = parse_args(["run", "--dry-run", "--techniques", "baseline-full,baseline-none", "--seed", "3"])
        assert args.command == "run"
        assert args.dry_run is True
        assert args.techniques == "baseline-full,baseline-none"
        assert args.seed == 3

    def test_evaluate_requires_input(self):
        with pytest.raises(SystemExit):
            parse_args(["evaluate"])

    def test_validate(self, capsys):
        assert validate_datasets(str(SAMPLES_DIR)) >= 1
        assert "datasets successfully" in capsys.readouterr().out

    def test_main_unknown_technique_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([
                "run", "--dry-run", "--techniques", "baseline-magic",
                "--datasets", str(SAMPLES_DIR), "--output", str(tmp_path),
            ])
        assert excinfo.value.code == 1
        assert "Unknown technique: baseline-magic" in capsys.readouterr().out

    def test_main_invalid_dataset_exits(self, tmp_path, capsys):
        (tmp_path / "bad.json").write_text('{"id": ""}', encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main(["validate", "--datasets", str(tmp_path)])
        assert excinfo.value.code == 1
        assert "ERROR (validation)" in capsys.readouterr().out
