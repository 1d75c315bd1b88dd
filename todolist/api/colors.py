from enum import Enum

class TaskColor(Enum):
    RED = "[red]"
    YELLOW = "[yellow]"
    GREEN = "[green]"
    DIM = "[dim]"
    RESET = "[/]"

    def __str__(self):
        return self.value
