from todolist.services.task_store import TaskStore
from todolist.domain.task import Task, TaskId
from todolist.domain.errors import TaskValidationError, TaskNotFoundError
from todolist.domain.enums import TaskFilter
from todolist.ports.id_provider import IdProvider
from todolist.adapters.system.id_provider_uuid import UuidIdProvider
from dataclasses import replace
from datetime import date
from typing import Optional


### COMMENTS
# ==========================================================
# Service layer (services/task_service.py) — use cases.
# ==========================================================
# Role:
# - The "controller" between the UI and the TaskStore.
# - Validates user input (title, id prefixes).
# - Builds domain objects (Task) from raw input; the store only stores them.
#
# Rules:
# - The service talks to the store only; it never touches storage adapters.
# - Domain errors:
#     * Validation (blank title, ambiguous prefix) -> `TaskValidationError`.
#     * Missing task for a "hard" lookup/edit/toggle -> `TaskNotFoundError`.
#     * Title collisions come from the store -> `DuplicateTitleError`.
# - Tasks are immutable (`frozen=True`): a change = new instance + `store.update`.


class TaskService:
    """
    Use-case service for tasks.

    :param store: The process-wide TaskStore.
    :param ids: Id provider for new tasks (UUID4 by default).
    """
    def __init__(self, store: TaskStore, ids: IdProvider | None = None) -> None:
        self.store = store
        self.ids = ids or UuidIdProvider()

    def create_task(self, title: str, description: Optional[str] = None, due_date: Optional[date] = None) -> Task:
        """
            Creates a new task and adds it to the store.

            - The title is trimmed; blank -> `TaskValidationError("title", ...)`.
            - `task_id` comes from the id provider; the task starts not completed.

            :raises TaskValidationError: When `title` is blank.
            :raises DuplicateTitleError: When the title is already used.
            :return: The created task.
        """
        if not title or not title.strip():
            raise TaskValidationError("title", "Title is required")

        task = Task(task_id=self.ids.new_id(), title=title.strip(), description=description or "", due_date=due_date)
        return self.store.add(task)

    def edit_task(
        self,
        task_id: TaskId,
        title: Optional[str] = None,
        description: Optional[str] = None,
        due_date: Optional[date] = None,
        clear_due: bool = False,
    ) -> Task:
        """
            Edits an existing task; fields left as None keep their value.

            :param clear_due: Remove the due date (wins over `due_date`).
            :raises TaskNotFoundError: If no task with the given ID exists.
            :raises TaskValidationError: If the new title is blank.
            :raises DuplicateTitleError: If the new title is taken by another task.
            :return: The stored replacement.
        """
        task = self.get_task(task_id)
        changes: dict = {}
        if title is not None:
            if not title.strip():
                raise TaskValidationError("title", "Title is required")
            changes["title"] = title.strip()
        if description is not None:
            changes["description"] = description
        if clear_due:
            changes["due_date"] = None
        elif due_date is not None:
            changes["due_date"] = due_date

        updated = replace(task, **changes)
        if self.store.update(updated) is None:
            raise TaskNotFoundError(task_id)
        return updated

    def toggle_task(self, task_id: TaskId) -> Task:
        """
            Flips the completed flag of an existing task.

            :raises TaskNotFoundError: If no task with the given ID exists.
            :return: The updated task.
        """
        toggled = self.store.toggle_completed(task_id)
        if toggled is None:
            raise TaskNotFoundError(task_id)
        return toggled

    def remove_task(self, task_id: TaskId) -> None:
        """
            Removes a task. Delegates to `store.remove`, which is idempotent.
        """
        self.store.remove(task_id)

    def get_task(self, task_id: TaskId) -> Task:
        """
            Returns the task with the given id.

            :raises TaskNotFoundError: If not found.
        """
        task = self.store.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def find_task(self, prefix: str) -> Task:
        """
            Resolves a full id or a unique id prefix (the CLI shows 8 characters).

            :raises TaskValidationError: Blank prefix, or it matches several tasks.
            :raises TaskNotFoundError: Nothing matches.
        """
        prefix = (prefix or "").strip()
        if not prefix:
            raise TaskValidationError("id", "Task ID is required")

        exact = self.store.get(TaskId(prefix))
        if exact is not None:
            return exact

        found = [t for t in self.store.all() if str(t.task_id).startswith(prefix)]
        if not found:
            raise TaskNotFoundError(prefix)
        if len(found) > 1:
            raise TaskValidationError("id", f"'{prefix}' matches {len(found)} tasks, use more characters")
        return found[0]

    def list_tasks(self, text: Optional[str] = None, task_filter: TaskFilter = TaskFilter.ALL) -> list[Task]:
        """Returns tasks matching `text` and `task_filter`, in insertion order."""
        return self.store.query(text, task_filter)
