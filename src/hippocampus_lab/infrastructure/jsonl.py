"""
JSON Lines persistence

Each pipeline phase appends one JSON object per line; later phases read them
back in file order.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator


def append_json_line(path: str | Path, record: dict) -> None:
    """Append one record as a JSON line, creating parent directories as needed"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")


def iter_json_lines(path: str | Path) -> Iterator[dict]:
    """
    Yield records from a JSON Lines file in order

    Blank lines are skipped.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If a line is not valid JSON
    """
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                yield json.loads(line)


def read_json_lines(path: str | Path) -> list[dict]:
    """Read every record from a JSON Lines file"""
    return list(iter_json_lines(path))
