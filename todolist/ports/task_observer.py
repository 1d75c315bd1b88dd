from typing import Protocol

class TaskObserver(Protocol):
    """Anything that wants to know the task list changed.

    The callback carries no payload; re-query the store for the current state.
    It runs synchronously on the mutating thread, so it must not change tasks.
    """
    def on_tasks_changed(self) -> None:
        pass
