from typing import Protocol
from todolist.domain.task import TaskId

class IdProvider(Protocol):
    """Port responsible for generating unique task identifiers."""
    def new_id(self) -> TaskId:
        pass
