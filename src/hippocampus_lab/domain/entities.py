"""
Domain Entities

Defines the primary data structures used across the benchmark pipeline:
conversations and recall questions (input), trial records (execution and
evaluation), and technique-level reports (aggregation).

Records serialize to camelCase dictionaries so that JSONL files keep one
stable wire format across phases.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from hippocampus_lab.domain.value_objects import (
    ObjectiveScores,
    SubjectiveScores,
    TechniqueMetrics,
)


@dataclass(frozen=True)
class TurnMetadata:
    """Annotation describing whether a turn carries information to recall"""
    contains_key_info: bool
    key_info_type: str | None = None     # identity / preference / fact / instruction
    salience_level: str | None = None    # high / medium / low
    semantic_category: str | None = None


@dataclass(frozen=True)
class ConversationTurn:
    """Single conversation turn"""
    role: str       # user / assistant
    content: str
    metadata: TurnMetadata | None = None


@dataclass(frozen=True)
class RecallQuestion:
    """Question whose answer was stated earlier in the conversation"""
    question: str
    expected_answer: str
    expected_entities: tuple[str, ...]
    info_location: str      # early / middle / recent
    salience_level: str     # high / medium / low


@dataclass(frozen=True)
class TestConversation:
    """A conversation plus the questions asked about it"""
    __test__ = False  # not a pytest test class

    id: str
    turns: tuple[ConversationTurn, ...]
    recall_questions: tuple[RecallQuestion, ...]


@dataclass(frozen=True)
class ExecutionResult:
    """Result of one trial (technique x conversation x question) before scoring"""
    experiment_id: str
    timestamp: str
    technique: str
    cli: str
    conversation_id: str
    question_index: int
    prompt: str
    response: str
    latency_ms: float
    model: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None

    def to_dict(self) -> dict:
        data = {
            "experimentId": self.experiment_id,
            "timestamp": self.timestamp,
            "technique": self.technique,
            "cli": self.cli,
            "conversationId": self.conversation_id,
            "questionIndex": self.question_index,
            "prompt": self.prompt,
            "response": self.response,
            "latencyMs": self.latency_ms,
        }
        if self.model is not None:
            data["model"] = self.model
        if self.input_tokens is not None:
            data["inputTokens"] = self.input_tokens
        if self.output_tokens is not None:
            data["outputTokens"] = self.output_tokens
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ExecutionResult":
        return cls(
            experiment_id=data["experimentId"],
            timestamp=data["timestamp"],
            technique=data["technique"],
            cli=data["cli"],
            conversation_id=data["conversationId"],
            question_index=int(data["questionIndex"]),
            prompt=data["prompt"],
            response=data["response"],
            latency_ms=float(data["latencyMs"]),
            model=data.get("model"),
            input_tokens=data.get("inputTokens"),
            output_tokens=data.get("outputTokens"),
        )


@dataclass(frozen=True)
class EvaluatedResult:
    """An ExecutionResult with objective and subjective scores attached"""
    execution: ExecutionResult
    objective: ObjectiveScores
    subjective: SubjectiveScores

    @property
    def technique(self) -> str:
        return self.execution.technique

    @property
    def input_tokens(self) -> int | None:
        return self.execution.input_tokens

    @property
    def latency_ms(self) -> float:
        return self.execution.latency_ms

    def to_dict(self) -> dict:
        data = self.execution.to_dict()
        data["objective"] = self.objective.to_dict()
        data["subjective"] = self.subjective.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "EvaluatedResult":
        return cls(
            execution=ExecutionResult.from_dict(data),
            objective=ObjectiveScores.from_dict(data["objective"]),
            subjective=SubjectiveScores.from_dict(data["subjective"]),
        )


@dataclass(frozen=True)
class TechniqueReport:
    """Aggregated metrics for one technique"""
    technique: str
    n: int
    metrics: TechniqueMetrics

    def to_dict(self) -> dict:
        return {"technique": self.technique, "n": self.n, "metrics": self.metrics.to_dict()}


@dataclass(frozen=True)
class ExperimentReport:
    """Technique reports for one experiment, in first-seen technique order"""
    experiment_id: str
    timestamp: str
    cli: str
    techniques: tuple[TechniqueReport, ...] = field(default_factory=tuple)
    model: str | None = None

    def to_dict(self) -> dict:
        data = {
            "experimentId": self.experiment_id,
            "timestamp": self.timestamp,
            "cli": self.cli,
            "techniques": [t.to_dict() for t in self.techniques],
        }
        if self.model is not None:
            data["model"] = self.model
        return data
