from __future__ import annotations

import logging

from todolist.ports.task_observer import TaskObserver

logger = logging.getLogger(__name__)


class ChangeNotifier:
    """
    Publish/subscribe registry for "the task list changed" signals.

    Observers are kept in registration order and de-duplicated by identity.
    Delivery is synchronous; the store calls `notify_all()` while holding its lock.
    """
    def __init__(self) -> None:
        self._observers: list[TaskObserver] = []

    def subscribe(self, observer: TaskObserver) -> None:
        """Registers `observer`; registering the same object twice is a no-op."""
        if observer is None:
            return
        if any(o is observer for o in self._observers):
            return
        self._observers.append(observer)

    def unsubscribe(self, observer: TaskObserver) -> None:
        """Removes `observer` if registered; otherwise does nothing."""
        self._observers = [o for o in self._observers if o is not observer]

    @property
    def observers(self) -> list[TaskObserver]:
        return list(self._observers)

    def notify_all(self) -> None:
        """
        Calls `on_tasks_changed()` on every observer, in registration order.

        A failing observer is logged and skipped; the rest are still notified.
        """
        for observer in list(self._observers):
            try:
                observer.on_tasks_changed()
            except Exception:
                logger.exception("Observer %r failed while handling a change", observer)

    def __len__(self) -> int:
        return len(self._observers)
