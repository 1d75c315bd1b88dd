from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Iterable, Optional

from todolist.adapters.system.id_provider_uuid import UuidIdProvider
from todolist.domain.errors import LoadError, TaskValidationError
from todolist.domain.task import Task, TaskId
from todolist.ports.id_provider import IdProvider

logger = logging.getLogger(__name__)


### COMMENTS
# ==========================================================
# JSON codec for the task file (adapters/jsonfile/task_codec.py).
# ==========================================================
# Document: one JSON array of objects, keys in a fixed order:
#   [{"id":"...","title":"...","description":"...","dueDate":"YYYY-MM-DD"|null,"completed":true|false}]
#
# Reading is tolerant per record:
# - a broken document (not JSON, not an array) -> LoadError, nothing is loaded,
# - a broken record (no title, bad dueDate, not an object) -> skipped with a warning,
# - missing `completed` -> False, missing `id` -> fresh id, missing `description` -> "".


def _encode_task(task: Task) -> dict:
    return {
        "id": str(task.task_id),
        "title": task.title,
        "description": task.description or "",
        "dueDate": task.due_date.isoformat() if task.due_date else None,
        "completed": bool(task.completed),
    }


def encode(tasks: Iterable[Task]) -> str:
    """Serializes tasks into the compact file format, preserving their order."""
    return json.dumps([_encode_task(t) for t in tasks], ensure_ascii=False, separators=(",", ":"))


def is_empty_document(text: Optional[str]) -> bool:
    """True for a missing/blank document or an empty array (any spelling): nothing to load."""
    if text is None or not text.strip():
        return True
    if not text.lstrip().startswith("["):
        return False
    try:
        return json.loads(text) == []
    except json.JSONDecodeError:
        return False


def _text_field(record: dict, key: str) -> Optional[str]:
    value = record.get(key)
    return value if isinstance(value, str) else None


def _parse_due(raw: Any) -> date | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValueError(f"dueDate must be a string, got {type(raw).__name__}")
    if not raw.strip() or raw.strip().lower() == "null":
        return None
    return date.fromisoformat(raw.strip())


def _decode_task(record: dict, ids: IdProvider) -> Task:
    raw_id = _text_field(record, "id")
    task_id = TaskId(raw_id) if raw_id and raw_id.strip() else ids.new_id()

    completed = record.get("completed")
    return Task(
        task_id=task_id,
        title=_text_field(record, "title"),
        description=_text_field(record, "description") or "",
        due_date=_parse_due(record.get("dueDate")),
        completed=completed if isinstance(completed, bool) else False,
    )


def decode(text: Optional[str], ids: IdProvider | None = None, *, location: str = "<text>") -> list[Task]:
    """Parses a task document into tasks, in document order.

    :param text: The document; `None` or blank means "nothing stored".
    :param ids: Provider for records that carry no id (UUID4 by default).
    :param location: Shown in errors and log lines.
    :raises LoadError: The document is not a JSON array.
    :return: Every record that could be decoded; broken records are skipped.
    """
    if is_empty_document(text):
        return []
    ids = ids or UuidIdProvider()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(location, f"invalid JSON: {e}")
    if not isinstance(data, list):
        raise LoadError(location, f"expected a JSON array, got {type(data).__name__}")

    tasks: list[Task] = []
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            logger.warning("%s: record %d skipped: not an object", location, index)
            continue
        try:
            tasks.append(_decode_task(record, ids))
        except TaskValidationError as e:
            logger.warning("%s: record %d skipped: %s", location, index, e)
        except ValueError as e:
            logger.warning("%s: record %d skipped: bad dueDate: %s", location, index, e)
    return tasks
