from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import date

from todolist.domain.errors import TaskValidationError


@dataclass(frozen=True)
class TaskId:
    """Opaque, immutable task identifier; equal and hashed by its string value."""
    value: str

    @classmethod
    def new(cls) -> TaskId:
        return cls(str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.value


def normalize_title(title: str | None) -> str:
    """Form used for uniqueness checks only: trimmed and case-folded."""
    return (title or "").strip().casefold()


@dataclass(frozen=True)
class Task:
    """
    Domain model of a single task; immutable. Editing or toggling produces a new
    Task sharing the same `task_id`.
    """
    task_id: TaskId
    title: str
    description: str = ""
    due_date: date | None = None
    completed: bool = False

    def __post_init__(self) -> None:
        if self.title is None or not str(self.title).strip():
            raise TaskValidationError("title", "Title must not be empty")
        if self.description is None:
            object.__setattr__(self, "description", "")

    @property
    def normalized_title(self) -> str:
        return normalize_title(self.title)

    def same_task(self, other: Task) -> bool:
        """Identity check: two tasks are the same task iff their ids match."""
        return self.task_id == other.task_id

    def with_completed(self, completed: bool) -> Task:
        return replace(self, completed=completed)

    def toggled(self) -> Task:
        return self.with_completed(not self.completed)

    def is_due_on(self, day: date) -> bool:
        return self.due_date is not None and self.due_date == day

    def is_overdue(self, today: date) -> bool:
        return self.due_date is not None and self.due_date < today and not self.completed

    def __str__(self) -> str:
        base = ("[x] " if self.completed else "[ ] ") + self.title
        return base if self.due_date is None else f"{base} ({self.due_date.isoformat()})"



### COMMENTS
# ======================================
# Task vs. TaskId equality
# ======================================
# TaskId is a frozen dataclass, so equality and hashing come from `value`.
# That makes it a safe dict key for the store.
#
# Task keeps dataclass value equality (all fields compared). This is what tests
# and round trips want ("same data"). "Same task" (same identity, possibly
# different title) is the explicit `same_task()` check.

# ======================================
# Validation in __post_init__
# ======================================
# A blank title fails at construction, so a half-built Task can never exist.
# `description=None` is normalised to "" (the file format always carries a
# string), which keeps encode/decode round trips equal.
