"""
Executor package

Provides a unified interface for sending prompts to an LLM.
"""

from hippocampus_lab.infrastructure.executors.base import ModelExecutor
from hippocampus_lab.infrastructure.executors.factory import create_executor
from hippocampus_lab.domain.value_objects import ExecutionResponse

__all__ = ["ModelExecutor", "ExecutionResponse", "create_executor"]
