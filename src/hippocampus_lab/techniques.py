"""
Technique Prompt Builders

Each technique selects which conversation turns enter the prompt; everything
else (system instruction, turn formatting, trailing question) is shared.

Turn selection per technique:
- baseline-full: all turns
- baseline-none: no turns
- baseline-random: k turns sampled without replacement, rendered in chronological order
- baseline-recency: the last k turns

where k = min(floor(total_turns * context_ratio), max_turns).
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Sequence, TypeVar

from hippocampus_lab.domain.constants import TechniqueName
from hippocampus_lab.domain.entities import ConversationTurn, RecallQuestion, TestConversation
from hippocampus_lab.domain.errors import HarnessError
from hippocampus_lab.harness_config import TechniqueConfig

T = TypeVar("T")

TurnSelector = Callable[[Sequence[ConversationTurn], int, random.Random], list[ConversationTurn]]


def calculate_k(total_turns: int, config: TechniqueConfig | None = None) -> int:
    """
    Number of turns to include for subset techniques

    Uses min(context_ratio of the conversation, max_turns) to balance coverage with cost.

    Args:
        total_turns: Number of turns in the conversation
        config: TechniqueConfig (defaults: ratio 0.5, cap 20)

    Returns:
        Turn budget k
    """
    if config is None:
        config = TechniqueConfig()
    return min(math.floor(total_turns * config.context_ratio), config.max_turns)


def format_turns(turns: Sequence[ConversationTurn]) -> str:
    """Render turns as "role: content" blocks separated by a blank line"""
    return "\n\n".join(f"{t.role}: {t.content}" for t in turns)


def random_sample(items: Sequence[T], k: int, rng: random.Random) -> list[T]:
    """
    Sample k items without replacement

    Never mutates ``items``. Returns min(k, len(items)) elements; all of them when
    k >= len(items).
    """
    if k >= len(items):
        return list(items)
    if k <= 0:
        return []
    return rng.sample(list(items), k)


def _select_all(turns: Sequence[ConversationTurn], k: int, rng: random.Random) -> list[ConversationTurn]:
    return list(turns)


def _select_none(turns: Sequence[ConversationTurn], k: int, rng: random.Random) -> list[ConversationTurn]:
    return []


def _select_random(turns: Sequence[ConversationTurn], k: int, rng: random.Random) -> list[ConversationTurn]:
    # Sample positions, then restore chronological order
    positions = sorted(random_sample(range(len(turns)), k, rng))
    return [turns[i] for i in positions]


def _select_recent(turns: Sequence[ConversationTurn], k: int, rng: random.Random) -> list[ConversationTurn]:
    if k <= 0:
        return []
    return list(turns[-k:])


def format_prompt(system_prompt: str, history: str, question: str) -> str:
    """Wrap conversation history and the question with the system instruction"""
    if not history:
        return f"{system_prompt}\n\nUser: {question}"
    return f"{system_prompt}\n\n{history}\n\nUser: {question}"


@dataclass(frozen=True)
class Technique:
    """A named turn-selection policy"""
    name: str
    select_turns: TurnSelector

    def build_prompt(
        self,
        conversation: TestConversation,
        question: RecallQuestion,
        config: TechniqueConfig | None = None,
        rng: random.Random | None = None,
    ) -> str:
        """
        Build the prompt sent to the model for one recall question

        Args:
            conversation: Conversation whose turns are candidates for the history
            question: Recall question appended as the final user turn
            config: TechniqueConfig (defaults if not provided)
            rng: Random source for sampling techniques (a fresh unseeded one if not provided)

        Returns:
            Prompt text
        """
        if config is None:
            config = TechniqueConfig()
        if rng is None:
            rng = random.Random()
        k = calculate_k(len(conversation.turns), config)
        selected = self.select_turns(conversation.turns, k, rng)
        return format_prompt(config.system_prompt, format_turns(selected), question.question)


TECHNIQUES: Mapping[str, Technique] = MappingProxyType({
    TechniqueName.FULL_CONTEXT.value: Technique(TechniqueName.FULL_CONTEXT.value, _select_all),
    TechniqueName.NO_CONTEXT.value: Technique(TechniqueName.NO_CONTEXT.value, _select_none),
    TechniqueName.RANDOM_SUBSET.value: Technique(TechniqueName.RANDOM_SUBSET.value, _select_random),
    TechniqueName.RECENCY.value: Technique(TechniqueName.RECENCY.value, _select_recent),
})


def get_technique(name: str, registry: Mapping[str, Technique] = TECHNIQUES) -> Technique:
    """
    Look up a technique by name

    Raises:
        HarnessError: (kind UNKNOWN_TECHNIQUE) listing the available names
    """
    technique = registry.get(name)
    if technique is None:
        raise HarnessError.unknown_technique(name, list(registry.keys()))
    return technique


def get_techniques(names: Sequence[str], registry: Mapping[str, Technique] = TECHNIQUES) -> list[Technique]:
    """Look up several techniques, preserving the requested order"""
    return [get_technique(name, registry) for name in names]
