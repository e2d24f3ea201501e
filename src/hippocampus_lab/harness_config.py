"""
Benchmark Harness Configuration

Manages loading from environment variables and default values.
"""

import os
from dataclasses import dataclass, field, asdict

from hippocampus_lab.domain.constants import (
    DEFAULT_CONTEXT_RATIO,
    DEFAULT_MAX_TURNS,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TECHNIQUES,
    CLIType,
)


def _env_bool(key: str, default: bool) -> bool:
    """Convert an environment variable to bool"""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_optional_int(key: str) -> int | None:
    """Convert an environment variable to int, or None when unset"""
    if os.environ.get(key) is None:
        return None
    return _env_int(key, 0)


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_str(key: str, default: str) -> str:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


def _env_str_list(key: str, default: list[str]) -> list[str]:
    """Convert an environment variable to a comma-separated list of strings"""
    val = os.environ.get(key)
    if val is None:
        return list(default)
    return [x.strip() for x in val.split(",") if x.strip()]


def _env_cli(key: str, default: str) -> str:
    """Get an environment variable naming a supported CLI"""
    val = _env_str(key, default)
    valid = [c.value for c in CLIType]
    if val not in valid:
        raise ValueError(f"The value '{val}' of environment variable '{key}' must be one of: {', '.join(valid)}.")
    return val


@dataclass
class TechniqueConfig:
    """Context-selection configuration shared by all techniques"""
    max_turns: int = DEFAULT_MAX_TURNS
    context_ratio: float = DEFAULT_CONTEXT_RATIO
    system_prompt: str = DEFAULT_SYSTEM_PROMPT


@dataclass
class ExecutorConfig:
    """LLM invocation configuration"""
    cli: str = CLIType.CLAUDE.value
    backend: str = "cli"  # cli / api
    model: str | None = None
    temperature: float = 0.0
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    timeout_seconds: int = 30
    dry_run: bool = False


@dataclass
class JudgeConfig:
    """LLM-as-judge configuration"""
    enabled: bool = True
    cli: str = CLIType.CLAUDE.value
    skip_on_parse_error: bool = True


@dataclass
class RunConfig:
    """Pipeline paths and selection"""
    datasets_dir: str = "datasets/samples"
    output_dir: str = "results"
    techniques: list[str] = field(default_factory=lambda: list(DEFAULT_TECHNIQUES))
    seed: int | None = None


@dataclass
class HarnessConfig:
    """Overall benchmark harness configuration"""
    technique: TechniqueConfig = field(default_factory=TechniqueConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    judge: JudgeConfig = field(default_factory=JudgeConfig)
    run: RunConfig = field(default_factory=RunConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {"harness_config": asdict(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "HarnessConfig":
        """Create from dictionary (handles presence/absence of harness_config key)"""
        config_data = data.get("harness_config", data)
        return cls(
            technique=TechniqueConfig(**config_data.get("technique", {})),
            executor=ExecutorConfig(**config_data.get("executor", {})),
            judge=JudgeConfig(**config_data.get("judge", {})),
            run=RunConfig(**config_data.get("run", {})),
        )


def load_config() -> HarnessConfig:
    """
    Load configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        HarnessConfig

    Raises:
        ValueError: When an environment variable holds a malformed value
    """
    technique = TechniqueConfig(
        max_turns=_env_int("HIPPO_MAX_TURNS", DEFAULT_MAX_TURNS),
        context_ratio=_env_float("HIPPO_CONTEXT_RATIO", DEFAULT_CONTEXT_RATIO),
        system_prompt=_env_str("HIPPO_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
    )
    executor = ExecutorConfig(
        cli=_env_cli("HIPPO_CLI", CLIType.CLAUDE.value),
        backend=_env_str("HIPPO_BACKEND", "cli"),
        model=os.environ.get("HIPPO_MODEL") or None,
        temperature=_env_float("HIPPO_TEMPERATURE", 0.0),
        max_retries=_env_int("HIPPO_MAX_RETRIES", 3),
        retry_delay_seconds=_env_float("HIPPO_RETRY_DELAY_SECONDS", 1.0),
        timeout_seconds=_env_int("HIPPO_TIMEOUT_SECONDS", 30),
        dry_run=_env_bool("HIPPO_DRY_RUN", False),
    )
    judge = JudgeConfig(
        enabled=_env_bool("HIPPO_JUDGE_ENABLED", True),
        cli=_env_cli("HIPPO_JUDGE_CLI", executor.cli),
        skip_on_parse_error=_env_bool("HIPPO_JUDGE_SKIP_ON_PARSE_ERROR", True),
    )
    run = RunConfig(
        datasets_dir=_env_str("HIPPO_DATASETS_DIR", "datasets/samples"),
        output_dir=_env_str("HIPPO_OUTPUT_DIR", "results"),
        techniques=_env_str_list("HIPPO_TECHNIQUES", DEFAULT_TECHNIQUES),
        seed=_env_optional_int("HIPPO_SEED"),
    )
    return HarnessConfig(technique=technique, executor=executor, judge=judge, run=run)
