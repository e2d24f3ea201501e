"""
Executor factory

Creates the appropriate executor from the executor configuration.
"""

from __future__ import annotations

import random

from hippocampus_lab.domain.constants import DEFAULT_API_MODELS, CLIType
from hippocampus_lab.domain.errors import HarnessError
from hippocampus_lab.harness_config import ExecutorConfig
from hippocampus_lab.infrastructure.executors.base import ModelExecutor
from hippocampus_lab.infrastructure.executors.cli import CLIExecutor
from hippocampus_lab.infrastructure.executors.dry_run import DryRunExecutor


def create_executor(config: ExecutorConfig, rng: random.Random | None = None) -> ModelExecutor:
    """
    Create the executor described by the configuration

    Args:
        config: ExecutorConfig
        rng: Random source for the dry-run executor

    Returns:
        ModelExecutor: Dry-run, subprocess CLI, or SDK-backed executor

    Raises:
        HarnessError: (kind CONFIGURATION) for an unknown backend or CLI
    """
    if config.dry_run:
        return DryRunExecutor(rng)

    retries = config.max_retries
    retry_delay = config.retry_delay_seconds

    if config.backend == "cli":
        return CLIExecutor(
            config.cli,
            timeout_seconds=config.timeout_seconds,
            max_retries=retries,
            retry_delay_seconds=retry_delay,
        )
    if config.backend != "api":
        raise HarnessError.configuration(f"Unknown executor backend: {config.backend} (available: cli, api)")

    model_name = config.model or DEFAULT_API_MODELS.get(config.cli)
    # SDK imports are deferred so the CLI backend works without them configured
    if config.cli == CLIType.CLAUDE.value:
        from hippocampus_lab.infrastructure.executors.claude_api import ClaudeAPIExecutor
        return ClaudeAPIExecutor(
            model_name, temperature=config.temperature,
            max_retries=retries, retry_delay_seconds=retry_delay,
        )
    if config.cli == CLIType.GEMINI.value:
        from hippocampus_lab.infrastructure.executors.gemini_api import GeminiAPIExecutor
        return GeminiAPIExecutor(
            model_name, temperature=config.temperature, timeout_seconds=config.timeout_seconds,
            max_retries=retries, retry_delay_seconds=retry_delay,
        )
    if config.cli == CLIType.CODEX.value:
        from hippocampus_lab.infrastructure.executors.codex_api import CodexAPIExecutor
        return CodexAPIExecutor(
            model_name, temperature=config.temperature, timeout_seconds=config.timeout_seconds,
            max_retries=retries, retry_delay_seconds=retry_delay,
        )
    raise HarnessError.configuration(f"Unsupported CLI: {config.cli}")
