from todolist.domain.errors import LoadError, PersistenceError
from typing import Optional

### COMMENTS
# ==========================================================
# In-memory storage adapter (adapters/memory/task_storage.py).
# ==========================================================
# Implements the `TaskStorage` port without touching the disk.
#
# - Used by tests and by the `demo` command.
# - Keeps the last written document in `text`; `writes` counts successful writes.
# - `fail_writes` / `fail_reads` make the adapter raise the same domain errors
#   the file adapter raises, so failure paths can be exercised.


class InMemoryTaskStorage:
    """
        Storage kept in a string attribute.
        :param initial: Document the storage starts with (None = nothing stored yet).
    """
    def __init__(self, initial: Optional[str] = None) -> None:
        self.location = "<memory>"
        self.text = initial
        self.writes = 0
        self.fail_writes = False
        self.fail_reads = False

    def read_text(self) -> Optional[str]:
        """
            Returns the stored document, or None if nothing was written yet.

            :raises LoadError: When `fail_reads` is set.
        """
        if self.fail_reads:
            raise LoadError(self.location, "simulated read failure")
        return self.text

    def write_text(self, text: str) -> None:
        """
            Replaces the stored document.

            :raises PersistenceError: When `fail_writes` is set; the previous
            document is kept.
        """
        if self.fail_writes:
            raise PersistenceError(self.location, "simulated write failure")
        self.text = text
        self.writes += 1
