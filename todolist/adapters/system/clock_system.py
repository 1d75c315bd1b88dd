from todolist.ports.clock import Clock
from datetime import date

class SystemClock(Clock):
    """System adapter returning today's local calendar date."""

    def today(self) -> date:
        """Returns the current local date."""
        return date.today()
