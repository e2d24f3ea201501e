"""
Domain Value Objects

Defines immutable data structures representing values such as scores,
confidence intervals, and executor responses.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ObjectiveScores:
    """Deterministic scores computed without model judgment"""
    exact_match: bool
    entity_recall: float

    def to_dict(self) -> dict:
        return {"exactMatch": self.exact_match, "entityRecall": self.entity_recall}

    @classmethod
    def from_dict(cls, data: dict) -> "ObjectiveScores":
        return cls(
            exact_match=bool(data["exactMatch"]),
            entity_recall=float(data["entityRecall"]),
        )


@dataclass(frozen=True)
class SubjectiveScores:
    """Judge-model scores (1-5 scale)"""
    coherence: float
    fluency: float
    reasoning: str = ""

    def to_dict(self) -> dict:
        return {
            "coherence": self.coherence,
            "fluency": self.fluency,
            "reasoning": self.reasoning,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SubjectiveScores":
        reasoning = data.get("reasoning")
        return cls(
            coherence=float(data["coherence"]),
            fluency=float(data["fluency"]),
            reasoning=reasoning if isinstance(reasoning, str) else "",
        )


@dataclass(frozen=True)
class ConfidenceInterval:
    """Closed interval [lower, upper]"""
    lower: float
    upper: float

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def to_dict(self) -> dict:
        return {"lower": self.lower, "upper": self.upper}


@dataclass(frozen=True)
class TechniqueMetrics:
    """Point estimates and 95% confidence intervals for one technique"""
    avg_tokens: float
    avg_latency_ms: float
    exact_match_rate: float
    avg_entity_recall: float
    avg_coherence: float
    avg_fluency: float
    ci95_exact_match_rate: ConfidenceInterval
    ci95_entity_recall: ConfidenceInterval

    def to_dict(self) -> dict:
        return {
            "avgTokens": self.avg_tokens,
            "avgLatencyMs": self.avg_latency_ms,
            "exactMatchRate": self.exact_match_rate,
            "avgEntityRecall": self.avg_entity_recall,
            "avgCoherence": self.avg_coherence,
            "avgFluency": self.avg_fluency,
            "ci95": {
                "exactMatchRate": self.ci95_exact_match_rate.to_dict(),
                "entityRecall": self.ci95_entity_recall.to_dict(),
            },
        }


@dataclass(frozen=True)
class ExecutionResponse:
    """Response returned by an LLM executor"""
    response: str
    latency_ms: float
    input_tokens: int | None = None
    output_tokens: int | None = None
    model_name: str | None = field(default=None, compare=False)
