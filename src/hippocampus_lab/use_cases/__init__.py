"""
Use Cases Layer

Aggregates business logic and provides use cases called from the runner.
"""

from hippocampus_lab.use_cases.aggregation import (
    aggregate_by_technique,
    generate_report,
    reports_to_dataframe,
)
from hippocampus_lab.use_cases.evaluation import (
    evaluate_result,
    execute_trial,
)

__all__ = [
    # aggregation
    "aggregate_by_technique",
    "generate_report",
    "reports_to_dataframe",
    # evaluation
    "evaluate_result",
    "execute_trial",
]
