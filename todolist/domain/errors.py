### COMMENTS
# ============================================
# Domain error conventions used across the project
# ============================================
# - Domain (Task construction) and services:
#     * validate user input and raise TaskValidationError
#     * a "hard" lookup that finds nothing raises TaskNotFoundError
#
# - Store:
#     * rejects title collisions with DuplicateTitleError (no state change)
#     * catches PersistenceError / LoadError, logs them and reports a bool
#
# - Adapters (storage, codec):
#     * map technical errors (OSError, JSONDecodeError) onto PersistenceError / LoadError
#
# - UI (CLI):
#     * catches DomainError (or a concrete subclass) and prints a friendly panel
#     * everything else is a technical error and propagates


class DomainError(Exception):
    """Base class for domain errors.
    Common parent of every business exception in the system, so the UI can tell
    domain failures apart from technical ones (I/O, bugs).
    Not raised directly; use a subclass.
    """


class TaskValidationError(DomainError, ValueError):
    """Raised when input does not satisfy the rules for a task.
    Examples:
    - the title is empty or whitespace only,
    - a short id prefix matches more than one task.
    Carries the offending field name so the UI can point at it.
    """
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(self.__str__())
    def __str__(self):
        return f"Invalid field '{self.field}': {self.message}"


class DuplicateTitleError(DomainError):
    """Raised by the store when add/update would leave two tasks with the same
    normalized title (trimmed, case-folded). The collection is left untouched.
    """
    def __init__(self, title: str):
        self.title = title
        super().__init__(self.__str__())
    def __str__(self):
        return f"A task titled '{self.title.strip()}' already exists."


class TaskNotFoundError(DomainError):
    """Raised when an operation needs an existing task and there is none.
    Used by the service (`get_task`, `edit_task`, `toggle_task`); the store
    itself treats unknown ids as a no-op.
    """
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(self.__str__())
    def __str__(self):
        return f"Task with ID {self.task_id} does not exist."


class PersistenceError(DomainError):
    """Writing the snapshot to storage failed."""
    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(self.__str__())
    def __str__(self):
        return f"Could not save tasks to {self.location}: {self.reason}"


class LoadError(DomainError):
    """Reading or decoding the stored tasks failed (I/O or broken document)."""
    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(self.__str__())
    def __str__(self):
        return f"Could not load tasks from {self.location}: {self.reason}"


class ReentrantMutationError(DomainError):
    """An observer tried to mutate the store while being notified."""
    def __str__(self):
        return "Tasks cannot be changed from inside a change notification."
