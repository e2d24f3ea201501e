"""
Unit tests for techniques.py
"""

import random

import pytest

from hippocampus_lab.domain.constants import DEFAULT_SYSTEM_PROMPT, TechniqueName
from hippocampus_lab.domain.entities import ConversationTurn, RecallQuestion, TestConversation
from hippocampus_lab.domain.errors import ErrorKind, HarnessError
from hippocampus_lab.harness_config import TechniqueConfig
from hippocampus_lab.techniques import (
    TECHNIQUES,
    calculate_k,
    format_prompt,
    format_turns,
    get_technique,
    get_techniques,
    random_sample,
)


def _conversation(n_turns: int) -> TestConversation:
    turns = tuple(
        ConversationTurn(role="user" if i % 2 == 0 else "assistant", content=f"turn-{i:02d}")
        for i in range(n_turns)
    )
    question = RecallQuestion(
        question="What did I say first?",
        expected_answer="turn-00",
        expected_entities=("turn-00",),
        info_location="early",
        salience_level="high",
    )
    return TestConversation(id="conv", turns=turns, recall_questions=(question,))


def _history_turns(prompt: str) -> list[str]:
    """Extract turn contents rendered in a prompt"""
    return [line.split(": ", 1)[1] for line in prompt.split("\n") if line.startswith(("user: ", "assistant: "))]


class TestCalculateK:
    """Tests for calculate_k"""

    def test_half_of_turns_under_cap(self):
        assert calculate_k(10) == 5
        assert calculate_k(20) == 10

    def test_cap(self):
        assert calculate_k(40) == 20
        assert calculate_k(50) == 20
        assert calculate_k(100) == 20

    def test_small_conversations(self):
        assert calculate_k(2) == 1
        assert calculate_k(1) == 0
        assert calculate_k(0) == 0

    def test_custom_config(self):
        config = TechniqueConfig(max_turns=3, context_ratio=0.25)
        assert calculate_k(8, config) == 2
        assert calculate_k(100, config) == 3


class TestFormatTurns:
    """Tests for format_turns"""

    def test_empty(self):
        assert format_turns([]) == ""

    def test_single_turn(self):
        assert format_turns([ConversationTurn(role="user", content="Hi")]) == "user: Hi"

    def test_blank_line_between_turns(self):
        turns = [
            ConversationTurn(role="user", content="Hello"),
            ConversationTurn(role="assistant", content="Hi there"),
        ]
        assert format_turns(turns) == "user: Hello\n\nassistant: Hi there"


class TestRandomSample:
    """Tests for random_sample"""

    def test_returns_k_items_from_input(self):
        arr = list(range(1, 11))
        sample = random_sample(arr, 3, random.Random(0))
        assert len(sample) == 3
        assert all(item in arr for item in sample)
        assert len(set(sample)) == 3

    def test_does_not_mutate_input(self):
        arr = list(range(10))
        original = list(arr)
        random_sample(arr, 4, random.Random(0))
        assert arr == original

    def test_k_at_least_length_returns_all(self):
        arr = [1, 2, 3]
        assert sorted(random_sample(arr, 5, random.Random(0))) == arr
        assert sorted(random_sample(arr, 3, random.Random(0))) == arr

    def test_empty_input(self):
        assert random_sample([], 5, random.Random(0)) == []

    def test_zero_k(self):
        assert random_sample([1, 2, 3], 0, random.Random(0)) == []

    def test_seeded_is_deterministic(self):
        arr = list(range(50))
        assert random_sample(arr, 10, random.Random(42)) == random_sample(arr, 10, random.Random(42))


class TestFormatPrompt:
    def test_without_history(self):
        assert format_prompt("SYS", "", "Q?") == "SYS\n\nUser: Q?"

    def test_with_history(self):
        assert format_prompt("SYS", "user: hi", "Q?") == "SYS\n\nuser: hi\n\nUser: Q?"


class TestTechniquePrompts:
    """Turn selection per technique"""

    def _build(self, name: str, n_turns: int, seed: int = 0) -> str:
        conversation = _conversation(n_turns)
        technique = get_technique(name)
        return technique.build_prompt(conversation, conversation.recall_questions[0], rng=random.Random(seed))

    def test_all_prompts_wrap_system_and_question(self):
        for name in TECHNIQUES:
            prompt = self._build(name, 10)
            assert prompt.startswith(DEFAULT_SYSTEM_PROMPT)
            assert prompt.endswith("User: What did I say first?")

    def test_full_context_includes_all_turns_in_order(self):
        prompt = self._build(TechniqueName.FULL_CONTEXT.value, 10)
        assert _history_turns(prompt) == [f"turn-{i:02d}" for i in range(10)]

    def test_no_context_has_no_history(self):
        prompt = self._build(TechniqueName.NO_CONTEXT.value, 10)
        assert prompt == f"{DEFAULT_SYSTEM_PROMPT}\n\nUser: What did I say first?"

    def test_recency_includes_last_k(self):
        prompt = self._build(TechniqueName.RECENCY.value, 10)
        assert _history_turns(prompt) == [f"turn-{i:02d}" for i in range(5, 10)]

    def test_recency_capped(self):
        prompt = self._build(TechniqueName.RECENCY.value, 60)
        assert _history_turns(prompt) == [f"turn-{i:02d}" for i in range(40, 60)]

    def test_recency_with_zero_budget_has_no_history(self):
        prompt = self._build(TechniqueName.RECENCY.value, 1)
        assert _history_turns(prompt) == []

    def test_random_subset_size_and_chronological_order(self):
        for seed in range(20):
            turns = _history_turns(self._build(TechniqueName.RANDOM_SUBSET.value, 30, seed=seed))
            assert len(turns) == 15
            assert turns == sorted(turns)
            assert len(set(turns)) == 15

    def test_random_subset_seeded(self):
        a = self._build(TechniqueName.RANDOM_SUBSET.value, 30, seed=3)
        b = self._build(TechniqueName.RANDOM_SUBSET.value, 30, seed=3)
        assert a == b

    def test_random_subset_varies_across_seeds(self):
        prompts = {self._build(TechniqueName.RANDOM_SUBSET.value, 30, seed=s) for s in range(10)}
        assert len(prompts) > 1

    def test_custom_system_prompt(self):
        conversation = _conversation(4)
        config = TechniqueConfig(system_prompt="Remember everything.")
        prompt = get_technique(TechniqueName.FULL_CONTEXT.value).build_prompt(
            conversation, conversation.recall_questions[0], config=config
        )
        assert prompt.startswith("Remember everything.\n\n")


class TestRegistry:
    """Technique registry lookup"""

    def test_registry_has_four_techniques(self):
        assert set(TECHNIQUES) == {t.value for t in TechniqueName}

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            TECHNIQUES["extra"] = TECHNIQUES[TechniqueName.FULL_CONTEXT.value]

    def test_get_techniques_preserves_order(self):
        names = [TechniqueName.RECENCY.value, TechniqueName.NO_CONTEXT.value]
        assert [t.name for t in get_techniques(names)] == names

    def test_unknown_technique(self):
        with pytest.raises(HarnessError, match="Unknown technique: magic") as excinfo:
            get_technique("magic")
        assert excinfo.value.kind == ErrorKind.UNKNOWN_TECHNIQUE
        assert "baseline-full" in str(excinfo.value)
