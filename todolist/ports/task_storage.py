from typing import Optional, Protocol


### COMMENTS
# ==========================================================
# Task storage contract (ports/task_storage.py).
# ==========================================================
# The store keeps tasks in memory; storage only holds the encoded snapshot.
# - Technology-independent: a file on disk, or memory in tests.
# - Adapters map technical errors onto domain errors
#   (write OSError -> PersistenceError, read OSError -> LoadError).
# - Storage knows nothing about tasks; encoding lives in the codec.


class TaskStorage(Protocol):
    """Interface of the place where the encoded task snapshot lives.

    Adapters must:
    - replace the whole document on every write (no appends, no merges),
    - report a missing document as `None`, not as an error,
    - map technical errors onto domain errors.
    """

    location: str

    def read_text(self) -> Optional[str]:
        """Returns the stored document.

        Returns:
            Optional[str]: The text, or `None` if nothing was stored yet.

        Domain errors:
            LoadError: The document exists but cannot be read.
        """

    def write_text(self, text: str) -> None:
        """Overwrites the stored document with `text`.

        Domain errors:
            PersistenceError: The write failed. The previous document should
            stay intact where the technology allows it.
        """
