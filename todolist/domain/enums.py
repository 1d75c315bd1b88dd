from enum import Enum

class TaskFilter(str, Enum):
    ALL = "all"
    TODAY = "today"
    OVERDUE = "overdue"
    COMPLETED = "completed"

    def __str__(self):
        return self.value
