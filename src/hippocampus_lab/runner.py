"""
hippocampus-lab CLI Runner

Orchestrates the three-phase benchmark pipeline:

    Phase 1 (run):      execute trials      -> <output>/raw/<experiment_id>.jsonl
    Phase 2 (evaluate): score trials        -> <output>/scored/<experiment_id>.jsonl
    Phase 3 (report):   aggregate and print -> <output>/reports/<experiment_id>.md (+ .csv)

Usage:
    python -m hippocampus_lab.runner run --dry-run
    python -m hippocampus_lab.runner run --techniques baseline-full,baseline-none --cli gemini
    python -m hippocampus_lab.runner evaluate --input results/raw/2026-01-15-abc.jsonl
    python -m hippocampus_lab.runner report --input results/scored/2026-01-15-abc.jsonl
    python -m hippocampus_lab.runner validate --datasets datasets/samples
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
import time
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

from hippocampus_lab.dataset_loader import load_all_datasets
from hippocampus_lab.domain.constants import CLIType
from hippocampus_lab.domain.entities import EvaluatedResult, ExecutionResult
from hippocampus_lab.domain.errors import ErrorKind, HarnessError
from hippocampus_lab.harness_config import HarnessConfig, load_config
from hippocampus_lab.infrastructure.executors.base import ModelExecutor
from hippocampus_lab.infrastructure.executors.factory import create_executor
from hippocampus_lab.infrastructure.jsonl import append_json_line, iter_json_lines
from hippocampus_lab.reporting import format_report_markdown
from hippocampus_lab.scoring.judge import SubjectiveJudge
from hippocampus_lab.techniques import get_techniques
from hippocampus_lab.use_cases.aggregation import generate_report, reports_to_dataframe
from hippocampus_lab.use_cases.evaluation import evaluate_result, execute_trial

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 10

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_experiment_id(now: datetime | None = None) -> str:
    """Experiment ID: ISO date plus base-36 epoch milliseconds"""
    now = now or datetime.now(timezone.utc)
    return f"{now.date().isoformat()}-{_to_base36(int(now.timestamp() * 1000))}"


# === Phase 1: Execute Experiments ===

def run_experiments(
    config: HarnessConfig,
    rng: random.Random,
    executor: ModelExecutor | None = None,
) -> Path:
    """
    Run every technique on every recall question of every dataset.

    Trials that fail after retries are logged and skipped.

    Returns:
        Path to the raw results JSONL file
    """
    experiment_id = generate_experiment_id()
    output_path = Path(config.run.output_dir) / "raw" / f"{experiment_id}.jsonl"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    techniques = get_techniques(config.run.techniques)
    dry_label = " (dry run)" if config.executor.dry_run else ""

    print(f"\n=== Starting experiment: {experiment_id} ===\n")
    print(f"  Techniques: {', '.join(t.name for t in techniques)}")
    print(f"  CLI: {config.executor.cli}{dry_label}")
    print(f"  Output: {output_path}")

    datasets = load_all_datasets(config.run.datasets_dir)
    print(f"  Datasets: {len(datasets)}")
    print()

    if not datasets:
        print(f"No datasets found. Create some in {config.run.datasets_dir}")
        return output_path

    if executor is None:
        executor = create_executor(config.executor, rng)

    total = sum(len(d.recall_questions) for d in datasets) * len(techniques)
    count = 0

    for dataset in datasets:
        for q_idx in range(len(dataset.recall_questions)):
            for technique in techniques:
                try:
                    result = execute_trial(
                        technique,
                        dataset,
                        q_idx,
                        executor,
                        experiment_id=experiment_id,
                        cli=config.executor.cli,
                        config=config.technique,
                        rng=rng,
                        model=config.executor.model,
                    )
                except HarnessError as e:
                    if e.kind not in (ErrorKind.EXECUTION, ErrorKind.TIMEOUT):
                        raise
                    logger.error("Error running %s on %s q%d: %s", technique.name, dataset.id, q_idx, e)
                    continue

                append_json_line(output_path, result.to_dict())
                count += 1
                if count % PROGRESS_INTERVAL == 0 or count == total:
                    print(f"  Progress: {count}/{total}")

    print(f"\nCompleted {count} executions")
    return output_path


# === Phase 2: Evaluate Results ===

def evaluate_results(
    input_path: str | Path,
    config: HarnessConfig,
    rng: random.Random,
    judge_executor: ModelExecutor | None = None,
) -> Path:
    """
    Score every raw trial with objective metrics and the subjective judge.

    The mock judge is used in dry-run mode or when the judge is disabled.
    Trials whose dataset or question cannot be found are skipped with a warning.

    Returns:
        Path to the scored results JSONL file
    """
    input_path = Path(input_path)
    experiment_id = input_path.stem
    output_path = Path(config.run.output_dir) / "scored" / f"{experiment_id}.jsonl"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"\n=== Evaluating: {input_path} ===\n")
    print(f"  Output: {output_path}")

    datasets = {d.id: d for d in load_all_datasets(config.run.datasets_dir)}

    judge = None
    if config.judge.enabled and not config.executor.dry_run:
        if judge_executor is None:
            judge_executor = create_executor(replace(config.executor, cli=config.judge.cli), rng)
        judge = SubjectiveJudge(judge_executor)

    count = 0
    for record in iter_json_lines(input_path):
        result = ExecutionResult.from_dict(record)
        dataset = datasets.get(result.conversation_id)
        if dataset is None:
            logger.warning("Dataset not found: %s", result.conversation_id)
            continue
        if not 0 <= result.question_index < len(dataset.recall_questions):
            logger.warning("Question not found: %s[%d]", result.conversation_id, result.question_index)
            continue

        try:
            evaluated = evaluate_result(result, dataset, judge=judge, rng=rng)
        except HarnessError as e:
            skippable = e.kind in (ErrorKind.EXECUTION, ErrorKind.TIMEOUT) or (
                e.kind == ErrorKind.PARSE and config.judge.skip_on_parse_error
            )
            if not skippable:
                raise
            logger.error(
                "Skipping %s on %s q%d: %s",
                result.technique, result.conversation_id, result.question_index, e,
            )
            continue

        append_json_line(output_path, evaluated.to_dict())
        count += 1
        if count % PROGRESS_INTERVAL == 0:
            print(f"  Evaluated: {count}")

    print(f"\nCompleted {count} evaluations")
    return output_path


# === Phase 3: Generate Report ===

def generate_report_file(input_path: str | Path, config: HarnessConfig) -> Path:
    """
    Aggregate scored trials and write the markdown report and summary CSV.

    Returns:
        Path to the markdown report
    """
    input_path = Path(input_path)
    experiment_id = input_path.stem
    reports_dir = Path(config.run.output_dir) / "reports"
    reports_dir.mkdir(parents=True, exist_ok=True)
    output_path = reports_dir / f"{experiment_id}.md"
    summary_path = reports_dir / f"{experiment_id}.csv"

    print(f"\n=== Generating report: {input_path} ===\n")

    results = [EvaluatedResult.from_dict(r) for r in iter_json_lines(input_path)]
    model = config.executor.model or next(
        (r.execution.model for r in results if r.execution.model), None
    )
    report = generate_report(results, experiment_id, config.executor.cli, model=model)

    output_path.write_text(format_report_markdown(report), encoding="utf-8")
    reports_to_dataframe(report).to_csv(summary_path, index=False)

    print(f"  Report generated with {len(report.techniques)} techniques")
    print(f"  Markdown: {output_path}")
    print(f"  Summary:  {summary_path}")
    return output_path


# === Dataset validation ===

def validate_datasets(datasets_dir: str) -> int:
    """Validate every dataset in a directory; returns the number validated"""
    datasets = load_all_datasets(datasets_dir)
    print(f"Validated {len(datasets)} datasets successfully")
    for ds in datasets:
        print(f"  - {ds.id}: {len(ds.turns)} turns, {len(ds.recall_questions)} questions")
    return len(datasets)


# === CLI Entry Point ===

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hippocampus-lab",
        description="hippocampus-lab: Benchmark conversation-memory techniques for LLM assistants",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--datasets",
        default=None,
        help="Path to datasets directory (default: HIPPO_DATASETS_DIR or datasets/samples)",
    )
    common.add_argument(
        "--output",
        default=None,
        help="Output directory (default: HIPPO_OUTPUT_DIR or results)",
    )
    common.add_argument(
        "--cli",
        choices=[c.value for c in CLIType],
        default=None,
        help="CLI to use (default: HIPPO_CLI or claude)",
    )
    common.add_argument(
        "--model",
        default=None,
        help="Model name recorded on results and used by the api backend",
    )
    common.add_argument(
        "--backend",
        choices=["cli", "api"],
        default=None,
        help="How to call the model (default: HIPPO_BACKEND or cli)",
    )
    common.add_argument("--dry-run", action="store_true", help="Run without making actual model calls")
    common.add_argument("--seed", type=int, default=None, help="Random seed for sampling and mock scores")

    run_parser = subparsers.add_parser("run", parents=[common], help="Run experiments (Phase 1)")
    run_parser.add_argument(
        "--techniques",
        default=None,
        help="Comma-separated technique names (default: all baselines)",
    )

    for name, help_text in (("evaluate", "Evaluate results (Phase 2)"), ("report", "Generate report (Phase 3)")):
        sub = subparsers.add_parser(name, parents=[common], help=help_text)
        sub.add_argument("--input", required=True, help="Input JSONL file")

    subparsers.add_parser("validate", parents=[common], help="Validate datasets")

    return parser.parse_args(argv)


def _apply_args(config: HarnessConfig, args: argparse.Namespace) -> HarnessConfig:
    """Overlay command-line arguments on the environment-derived config"""
    run = config.run
    if args.datasets:
        run = replace(run, datasets_dir=args.datasets)
    if args.output:
        run = replace(run, output_dir=args.output)
    if getattr(args, "techniques", None):
        run = replace(run, techniques=[t.strip() for t in args.techniques.split(",") if t.strip()])
    if args.seed is not None:
        run = replace(run, seed=args.seed)

    executor = config.executor
    if args.cli:
        executor = replace(executor, cli=args.cli)
    if args.model:
        executor = replace(executor, model=args.model)
    if args.backend:
        executor = replace(executor, backend=args.backend)
    if args.dry_run:
        executor = replace(executor, dry_run=True)

    return replace(config, run=run, executor=executor)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = _apply_args(load_config(), args)
    rng = random.Random(config.run.seed)

    try:
        if args.command == "run":
            started = time.time()
            output_path = run_experiments(config, rng)
            print(f"  Output: {output_path} ({time.time() - started:.1f}s)")
        elif args.command == "evaluate":
            evaluate_results(args.input, config, rng)
        elif args.command == "report":
            generate_report_file(args.input, config)
        elif args.command == "validate":
            validate_datasets(config.run.datasets_dir)
    except HarnessError as e:
        if e.kind in (ErrorKind.VALIDATION, ErrorKind.UNKNOWN_TECHNIQUE, ErrorKind.CONFIGURATION):
            print(f"ERROR ({e.kind.value}): {e}")
            sys.exit(1)
        raise


if __name__ == "__main__":
    main()
