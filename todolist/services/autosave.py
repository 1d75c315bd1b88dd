from __future__ import annotations

import logging
import threading

from todolist.services.task_store import TaskStore

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 2.0
DEFAULT_INITIAL_DELAY = 2.0


class AutoSaver:
    """
    Periodically mirrors the store to storage from a daemon thread.

    `start()` schedules `store.save()` every `interval` seconds, the first run
    after `initial_delay`. `stop()` cancels the loop, waits for it and performs
    one final save. Saves go through the store lock, so a snapshot never
    interleaves with a mutation.
    """
    def __init__(
        self,
        store: TaskStore,
        interval: float = DEFAULT_INTERVAL,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.store = store
        self.interval = interval
        self.initial_delay = max(0.0, initial_delay)
        self.runs = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="todolist-autosave", daemon=True)
        self._thread.start()
        logger.info("Autosave started interval=%.1fs storage=%s", self.interval, self.store.storage.location)

    def _run(self) -> None:
        if self._stop.wait(self.initial_delay):
            return
        while True:
            self.store.save()
            self.runs += 1
            if self._stop.wait(self.interval):
                return

    def stop(self, final_save: bool = True) -> bool:
        """Stops the loop; returns the result of the final save (True if skipped)."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=max(self.interval, 1.0) * 2)
            self._thread = None
        logger.info("Autosave stopped")
        if final_save:
            return self.store.save()
        return True

    def __enter__(self) -> AutoSaver:
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
