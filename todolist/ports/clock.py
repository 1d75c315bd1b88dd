from typing import Protocol
from datetime import date

class Clock(Protocol):
    """Source of the current calendar date (local time)."""
    def today(self) -> date:
        pass
