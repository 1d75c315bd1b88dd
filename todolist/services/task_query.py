from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from todolist.domain.enums import TaskFilter
from todolist.domain.task import Task


def search(tasks: Iterable[Task], text: Optional[str]) -> list[Task]:
    """Case-insensitive substring match on the title; blank text matches everything."""
    if text is None or not text.strip():
        return list(tasks)
    needle = text.casefold()
    return [t for t in tasks if needle in (t.title or "").casefold()]


def matches(task: Task, task_filter: TaskFilter, today: date) -> bool:
    match task_filter:
        case TaskFilter.TODAY:
            return task.is_due_on(today)
        case TaskFilter.OVERDUE:
            return task.is_overdue(today)
        case TaskFilter.COMPLETED:
            return task.completed
        case _:
            return True


def apply_filter(tasks: Iterable[Task], task_filter: Optional[TaskFilter], today: date) -> list[Task]:
    """Keeps the tasks accepted by `task_filter`, in their input order (never reorders)."""
    if task_filter is None or task_filter == TaskFilter.ALL:
        return list(tasks)
    return [t for t in tasks if matches(t, task_filter, today)]


def query(tasks: Iterable[Task], text: Optional[str], task_filter: Optional[TaskFilter], today: date) -> list[Task]:
    return apply_filter(search(tasks, text), task_filter, today)
