"""
Report Formatting

Renders an ExperimentReport as a markdown document.
"""

from hippocampus_lab.domain.entities import ExperimentReport
from hippocampus_lab.domain.value_objects import ConfidenceInterval


def _format_ci(ci: ConfidenceInterval) -> str:
    return f"[{ci.lower:.3f}, {ci.upper:.3f}]"


def format_report_markdown(report: ExperimentReport) -> str:
    """
    Render a report as markdown

    Sections: title, metadata, results table (one row per technique), and a
    separate confidence interval table.

    Args:
        report: ExperimentReport

    Returns:
        Markdown text
    """
    lines = [
        "# Experiment Report",
        "",
        f"- **Experiment ID:** {report.experiment_id}",
        f"- **Timestamp:** {report.timestamp}",
        f"- **CLI:** {report.cli}",
    ]
    if report.model:
        lines.append(f"- **Model:** {report.model}")

    lines.extend([
        "",
        "## Results",
        "",
        "| Technique | n | Exact Match | Entity Recall | Coherence | Fluency | Avg Tokens | Avg Latency (ms) |",
        "|-----------|---|-------------|---------------|-----------|---------|------------|------------------|",
    ])
    for t in report.techniques:
        m = t.metrics
        lines.append(
            f"| {t.technique} | {t.n} "
            f"| {m.exact_match_rate * 100:.1f}% "
            f"| {m.avg_entity_recall * 100:.1f}% "
            f"| {m.avg_coherence:.2f} "
            f"| {m.avg_fluency:.2f} "
            f"| {m.avg_tokens:.0f} "
            f"| {m.avg_latency_ms:.0f} |"
        )

    lines.extend([
        "",
        "## Confidence Intervals (95%)",
        "",
        "| Technique | Exact Match CI | Entity Recall CI |",
        "|-----------|----------------|------------------|",
    ])
    for t in report.techniques:
        lines.append(
            f"| {t.technique} "
            f"| {_format_ci(t.metrics.ci95_exact_match_rate)} "
            f"| {_format_ci(t.metrics.ci95_entity_recall)} |"
        )

    lines.append("")
    return "\n".join(lines)
