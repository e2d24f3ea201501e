"""
Domain Layer

Defines constants, entities, value objects, and errors that form the core of the
benchmark. Has no dependencies on external libraries.
"""

from hippocampus_lab.domain.constants import (
    DEFAULT_TECHNIQUES,
    CLIType,
    TechniqueName,
    Z_95,
)
from hippocampus_lab.domain.entities import (
    ConversationTurn,
    EvaluatedResult,
    ExecutionResult,
    ExperimentReport,
    RecallQuestion,
    TechniqueReport,
    TestConversation,
    TurnMetadata,
)
from hippocampus_lab.domain.errors import ErrorKind, HarnessError
from hippocampus_lab.domain.value_objects import (
    ConfidenceInterval,
    ExecutionResponse,
    ObjectiveScores,
    SubjectiveScores,
    TechniqueMetrics,
)

__all__ = [
    # constants
    "DEFAULT_TECHNIQUES",
    "CLIType",
    "TechniqueName",
    "Z_95",
    # entities
    "ConversationTurn",
    "EvaluatedResult",
    "ExecutionResult",
    "ExperimentReport",
    "RecallQuestion",
    "TechniqueReport",
    "TestConversation",
    "TurnMetadata",
    # errors
    "ErrorKind",
    "HarnessError",
    # value objects
    "ConfidenceInterval",
    "ExecutionResponse",
    "ObjectiveScores",
    "SubjectiveScores",
    "TechniqueMetrics",
]
