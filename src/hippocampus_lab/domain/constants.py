"""
Domain Constants

Centrally manages constants shared across the benchmark harness.
"""

from enum import Enum


class TechniqueName(str, Enum):
    """Context-selection technique identifier."""
    FULL_CONTEXT = "baseline-full"
    NO_CONTEXT = "baseline-none"
    RANDOM_SUBSET = "baseline-random"
    RECENCY = "baseline-recency"


class CLIType(str, Enum):
    """External LLM command-line tool."""
    CLAUDE = "claude"
    GEMINI = "gemini"
    CODEX = "codex"


# Default technique order for a run
DEFAULT_TECHNIQUES = [t.value for t in TechniqueName]

# Valid enumeration values for dataset fields
VALID_ROLES = ("user", "assistant")
VALID_KEY_INFO_TYPES = ("identity", "preference", "fact", "instruction")
VALID_SALIENCE_LEVELS = ("high", "medium", "low")
VALID_INFO_LOCATIONS = ("early", "middle", "recent")

# Subset technique defaults: k = min(floor(n * ratio), cap)
DEFAULT_MAX_TURNS = 20
DEFAULT_CONTEXT_RATIO = 0.5
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. Answer based on the conversation history provided."
)

# Two-sided 95% normal quantile
Z_95 = 1.96

# Judge score bounds (inclusive)
JUDGE_SCORE_MIN = 1
JUDGE_SCORE_MAX = 5

# Default model per CLI when the API backend is used
DEFAULT_API_MODELS = {
    CLIType.CLAUDE.value: "claude-haiku-4-5-20251001",
    CLIType.GEMINI.value: "gemini-2.5-flash",
    CLIType.CODEX.value: "gpt-4.1-mini",
}
