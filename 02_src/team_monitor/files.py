"""Reading record files from the watched directories."""

import json
from pathlib import Path
from typing import Any

from .config import RECORD_SUFFIX
from .models import Message, RecordParseError, Task, TeamConfig, parse_inbox


def read_json(path: Path) -> Any:
    """Read and decode a JSON file.

    Raises:
        OSError: the file is missing or unreadable.
        RecordParseError: the content is not valid JSON.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except UnicodeDecodeError as e:
        raise RecordParseError(f"not UTF-8 text: {e}", str(path)) from e
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise RecordParseError(f"invalid JSON: {e}", str(path)) from e


def _with_path(path: Path, error: RecordParseError) -> RecordParseError:
    if error.path is not None:
        return error
    return RecordParseError(str(error), str(path))


def load_team_config(path: Path) -> TeamConfig:
    data = read_json(path)
    try:
        return TeamConfig.from_dict(data)
    except RecordParseError as e:
        raise _with_path(path, e) from e


def load_inbox(path: Path) -> list[Message]:
    data = read_json(path)
    try:
        return parse_inbox(data)
    except RecordParseError as e:
        raise _with_path(path, e) from e


def load_task(path: Path) -> Task:
    """Load a task file; the id is always the file stem."""
    data = read_json(path)
    try:
        return Task.from_dict(data, task_id=record_stem(path))
    except RecordParseError as e:
        raise _with_path(path, e) from e


def record_stem(path: Path) -> str:
    """File name with the record extension stripped."""
    name = path.name
    return name[: -len(RECORD_SUFFIX)] if name.endswith(RECORD_SUFFIX) else name


def is_record_file(path: Path) -> bool:
    return path.name.endswith(RECORD_SUFFIX) and not path.name.startswith(".")
