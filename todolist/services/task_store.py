from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from todolist.adapters.jsonfile import task_codec
from todolist.adapters.system.clock_system import SystemClock
from todolist.adapters.system.id_provider_uuid import UuidIdProvider
from todolist.domain.enums import TaskFilter
from todolist.domain.errors import DuplicateTitleError, LoadError, PersistenceError, ReentrantMutationError
from todolist.domain.task import Task, TaskId, normalize_title
from todolist.ports.clock import Clock
from todolist.ports.id_provider import IdProvider
from todolist.ports.task_observer import TaskObserver
from todolist.ports.task_storage import TaskStorage
from todolist.services import task_query
from todolist.services.notifier import ChangeNotifier

logger = logging.getLogger(__name__)


### COMMENTS
# ==========================================================
# Task store (services/task_store.py) — the single authority over tasks.
# ==========================================================
# Role:
# - Owns the in-memory collection (dict in insertion order), the observer
#   registry and the storage the snapshot is mirrored to.
# - Enforces normalized-title uniqueness on add/update.
# - Answers queries (search + filter) with fresh snapshot lists.
#
# Rules:
# - Every mutation runs under one lock: apply in memory -> notify -> persist.
# - Memory first, best-effort durable: a failed write is logged and reported
#   by `save()` returning False, never raised to the mutating caller.
# - Observers may re-query (the lock is re-entrant) but not mutate.
# - One store per process, built by the caller and passed around explicitly.


class TaskStore:
    """
    In-memory task collection with change notification and file mirroring.

    :param storage: Where the encoded snapshot is written (TaskStorage port).
    :param clock: Source of "today" for date filters.
    :param ids: Id provider for records loaded without an id.
    :param notifier: Observer registry; a fresh one by default.
    """
    def __init__(
        self,
        storage: TaskStorage,
        clock: Clock | None = None,
        ids: IdProvider | None = None,
        notifier: ChangeNotifier | None = None,
    ) -> None:
        self.storage = storage
        self.clock = clock or SystemClock()
        self.ids = ids or UuidIdProvider()
        self.notifier = notifier or ChangeNotifier()
        self._tasks: dict[TaskId, Task] = {}
        self._lock = threading.RLock()
        self._notifying = False

    # ---- observers ----

    def subscribe(self, observer: TaskObserver) -> None:
        with self._lock:
            self.notifier.subscribe(observer)

    def unsubscribe(self, observer: TaskObserver) -> None:
        with self._lock:
            self.notifier.unsubscribe(observer)

    # ---- mutations ----

    def add(self, task: Task) -> Task:
        """
            Adds a new task.

            - Rejects the task if any stored task has the same normalized title.
            - On success: insert, notify observers, persist.

            :raises DuplicateTitleError: On a title collision (nothing changes).
            :return: The stored task.
        """
        with self._mutation():
            if self._title_taken(task.title):
                raise DuplicateTitleError(task.title)
            self._tasks[task.task_id] = task
            self._commit()
            return task

    def remove(self, task_id: TaskId) -> None:
        """
            Removes the task with `task_id` if present.

            Idempotent. Observers are notified and the snapshot is persisted
            even when nothing was removed.
        """
        with self._mutation():
            removed = self._tasks.pop(task_id, None)
            if removed is None:
                logger.debug("remove: no task with id %s", task_id)
            self._commit()

    def toggle_completed(self, task_id: TaskId) -> Optional[Task]:
        """
            Flips the completed flag of the task with `task_id`.

            Unknown id: no-op, no notification, no persist.

            :return: The new task value, or None if the id is unknown.
        """
        with self._mutation():
            current = self._tasks.get(task_id)
            if current is None:
                return None
            toggled = current.toggled()
            self._tasks[task_id] = toggled
            self._commit()
            return toggled

    def update(self, task: Task) -> Optional[Task]:
        """
            Replaces the stored task with the same id (full replacement, no merge).

            Unknown id: no-op, returns None.

            :raises DuplicateTitleError: When another task already uses the
            normalized title (nothing changes).
            :return: The stored task.
        """
        with self._mutation():
            if task.task_id not in self._tasks:
                return None
            if self._title_taken(task.title, exclude=task.task_id):
                raise DuplicateTitleError(task.title)
            self._tasks[task.task_id] = task
            self._commit()
            return task

    # ---- queries ----

    def get(self, task_id: TaskId) -> Optional[Task]:
        with self._lock:
            return self._tasks.get(task_id)

    def exists(self, task_id: TaskId) -> bool:
        with self._lock:
            return task_id in self._tasks

    def count(self) -> int:
        with self._lock:
            return len(self._tasks)

    def all(self) -> list[Task]:
        """Snapshot of every task in insertion order."""
        with self._lock:
            return list(self._tasks.values())

    def search(self, text: Optional[str]) -> list[Task]:
        with self._lock:
            return task_query.search(self._tasks.values(), text)

    def query(self, text: Optional[str] = None, task_filter: Optional[TaskFilter] = TaskFilter.ALL) -> list[Task]:
        """Text search followed by `task_filter`; the result keeps insertion order."""
        with self._lock:
            return task_query.query(self._tasks.values(), text, task_filter, self.clock.today())

    # ---- persistence ----

    def to_json(self) -> str:
        with self._lock:
            return task_codec.encode(self._tasks.values())

    def save(self) -> bool:
        """
            Writes a consistent snapshot to storage.

            Never raises on write failure: the error is logged and False returned.
        """
        with self._lock:
            text = task_codec.encode(self._tasks.values())
            try:
                self.storage.write_text(text)
            except PersistenceError as e:
                logger.error("Auto-save failed: %s", e)
                return False
            logger.debug("Saved %d task(s) to %s", len(self._tasks), self.storage.location)
            return True

    def load(self) -> bool:
        """
            Replaces the collection with the tasks stored in `storage`.

            - Nothing stored (missing, blank, `[]`): state kept, no notification.
            - Decoded tasks replace the collection; one notification, no write.
            - LoadError (I/O or broken document): logged, state kept, returns False.
        """
        with self._mutation():
            try:
                text = self.storage.read_text()
                if task_codec.is_empty_document(text):
                    logger.info("Nothing to load from %s", self.storage.location)
                    return True
                loaded = task_codec.decode(text, self.ids, location=self.storage.location)
            except LoadError as e:
                logger.error("Load failed: %s", e)
                return False

            self._tasks = {t.task_id: t for t in loaded}
            logger.info("Loaded %d task(s) from %s", len(self._tasks), self.storage.location)
            self._notify()
            return True

    # ---- internals ----

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        with self._lock:
            if self._notifying:
                raise ReentrantMutationError()
            yield

    def _notify(self) -> None:
        self._notifying = True
        try:
            self.notifier.notify_all()
        finally:
            self._notifying = False

    def _commit(self) -> None:
        self._notify()
        self.save()

    def _title_taken(self, title: str, exclude: TaskId | None = None) -> bool:
        wanted = normalize_title(title)
        return any(
            t.normalized_title == wanted
            for t in self._tasks.values()
            if t.task_id != exclude
        )
