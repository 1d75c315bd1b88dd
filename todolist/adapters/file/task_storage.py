from todolist.ports.task_storage import TaskStorage
from todolist.domain.errors import LoadError, PersistenceError
from pathlib import Path
from typing import Optional
import os

DEFAULT_PATH = Path("tasks.json")


class FileTaskStorage(TaskStorage):
    def __init__(self, path: Path | str = DEFAULT_PATH) -> None:
        """Initializes file storage.
        Nothing touches the disk until the first read or write."""
        self.path = Path(path)
        self.location = str(self.path)

    def read_text(self) -> Optional[str]:
        """Returns the file content, or None if the file does not exist.
        Raises LoadError when the file exists but cannot be read."""
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(self.location, str(e))

    def write_text(self, text: str) -> None:
        """Overwrites the whole file.
        Writes to a swap file first and swaps it in, so a failed write leaves
        the previous file intact. Raises PersistenceError on any OSError."""
        tmp = self.path.with_suffix(self.path.suffix + ".swap")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8", newline="\n") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            try:
                if tmp.exists():
                    tmp.unlink()
            except OSError:
                pass
            raise PersistenceError(self.location, str(e))
