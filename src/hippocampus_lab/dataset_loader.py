"""
Dataset Loader

Loads test conversations from JSON files and validates their shape.
One file holds one conversation; a directory holds any number of them.
"""

import json
import logging
from pathlib import Path

from hippocampus_lab.domain.constants import (
    VALID_INFO_LOCATIONS,
    VALID_KEY_INFO_TYPES,
    VALID_ROLES,
    VALID_SALIENCE_LEVELS,
)
from hippocampus_lab.domain.entities import (
    ConversationTurn,
    RecallQuestion,
    TestConversation,
    TurnMetadata,
)
from hippocampus_lab.domain.errors import HarnessError

logger = logging.getLogger(__name__)


def _require_one_of(value, valid: tuple[str, ...], field: str, path: str | None) -> None:
    if value not in valid:
        raise HarnessError.validation(f"{field} must be one of: {', '.join(valid)}", path)


def _parse_metadata(data, field: str, path: str | None) -> TurnMetadata:
    if not isinstance(data, dict):
        raise HarnessError.validation(f"{field} must be an object", path)
    if not isinstance(data.get("containsKeyInfo"), bool):
        raise HarnessError.validation(f"{field}.containsKeyInfo must be a boolean", path)

    key_info_type = data.get("keyInfoType")
    if key_info_type is not None:
        _require_one_of(key_info_type, VALID_KEY_INFO_TYPES, f"{field}.keyInfoType", path)
    salience_level = data.get("salienceLevel")
    if salience_level is not None:
        _require_one_of(salience_level, VALID_SALIENCE_LEVELS, f"{field}.salienceLevel", path)
    semantic_category = data.get("semanticCategory")
    if semantic_category is not None and not isinstance(semantic_category, str):
        raise HarnessError.validation(f"{field}.semanticCategory must be a string", path)

    return TurnMetadata(
        contains_key_info=data["containsKeyInfo"],
        key_info_type=key_info_type,
        salience_level=salience_level,
        semantic_category=semantic_category,
    )


def _parse_turn(data, field: str, path: str | None) -> ConversationTurn:
    if not isinstance(data, dict):
        raise HarnessError.validation(f"{field} must be an object", path)
    if data.get("role") not in VALID_ROLES:
        raise HarnessError.validation(f'{field}.role must be "user" or "assistant"', path)
    if not isinstance(data.get("content"), str):
        raise HarnessError.validation(f"{field}.content must be a string", path)

    metadata = None
    if data.get("metadata") is not None:
        metadata = _parse_metadata(data["metadata"], f"{field}.metadata", path)

    return ConversationTurn(role=data["role"], content=data["content"], metadata=metadata)


def _parse_question(data, field: str, path: str | None) -> RecallQuestion:
    if not isinstance(data, dict):
        raise HarnessError.validation(f"{field} must be an object", path)
    if not isinstance(data.get("question"), str):
        raise HarnessError.validation(f"{field}.question must be a string", path)
    if not isinstance(data.get("expectedAnswer"), str):
        raise HarnessError.validation(f"{field}.expectedAnswer must be a string", path)

    entities = data.get("expectedEntities")
    if not isinstance(entities, list):
        raise HarnessError.validation(f"{field}.expectedEntities must be an array", path)
    if not all(isinstance(e, str) and e for e in entities):
        raise HarnessError.validation(f"{field}.expectedEntities must contain only non-empty strings", path)

    _require_one_of(data.get("infoLocation"), VALID_INFO_LOCATIONS, f"{field}.infoLocation", path)
    _require_one_of(data.get("salienceLevel"), VALID_SALIENCE_LEVELS, f"{field}.salienceLevel", path)

    return RecallQuestion(
        question=data["question"],
        expected_answer=data["expectedAnswer"],
        expected_entities=tuple(entities),
        info_location=data["infoLocation"],
        salience_level=data["salienceLevel"],
    )


def parse_dataset(data, path: str | None = None) -> TestConversation:
    """
    Validate raw JSON data and convert it to a TestConversation

    Args:
        data: Decoded JSON value
        path: Source file path (included in error messages)

    Returns:
        TestConversation

    Raises:
        HarnessError: (kind VALIDATION) naming the first offending field
    """
    if not isinstance(data, dict):
        raise HarnessError.validation("Dataset must be an object", path)
    if not isinstance(data.get("id"), str) or not data["id"]:
        raise HarnessError.validation('Dataset must have a non-empty string "id"', path)
    if not isinstance(data.get("turns"), list):
        raise HarnessError.validation('Dataset must have an array "turns"', path)
    if not isinstance(data.get("recallQuestions"), list):
        raise HarnessError.validation('Dataset must have an array "recallQuestions"', path)

    turns = tuple(
        _parse_turn(turn, f"turns[{i}]", path)
        for i, turn in enumerate(data["turns"])
    )
    questions = tuple(
        _parse_question(q, f"recallQuestions[{i}]", path)
        for i, q in enumerate(data["recallQuestions"])
    )
    return TestConversation(id=data["id"], turns=turns, recall_questions=questions)


def load_dataset(file_path: str) -> TestConversation:
    """
    Load a single dataset JSON file

    Raises:
        FileNotFoundError: If the file does not exist
        HarnessError: (kind VALIDATION) if the file is not valid JSON or has the wrong shape
    """
    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise HarnessError.validation(f"Invalid JSON: {e}", str(file_path)) from e
    return parse_dataset(data, str(file_path))


def load_all_datasets(datasets_dir: str) -> list[TestConversation]:
    """
    Load every *.json dataset in a directory, in file name order

    Returns an empty list (with a warning) when the directory does not exist.
    """
    dir_path = Path(datasets_dir)
    if not dir_path.exists():
        logger.warning("Datasets directory does not exist: %s", datasets_dir)
        return []

    return [load_dataset(str(p)) for p in sorted(dir_path.glob("*.json"))]
