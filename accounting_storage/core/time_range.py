"""Time range module."""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AccountTimeRange:
    """
    The period during which an account is open.

    The range is half-open: it starts at the opening time included and ends
    at the closing time excluded. An account without a closing time is open
    ended.
    """

    opened: datetime
    closed: datetime | None = None

    @property
    def is_open_ended(self) -> bool:
        """Return True if the range has no closing time."""
        return self.closed is None

    def is_valid(self) -> bool:
        """Check that the closing time, if any, is not before the opening time."""
        return self.closed is None or self.closed >= self.opened

    def contains(self, moment: datetime) -> bool:
        """Check if the moment is within the time range."""
        if moment < self.opened:
            return False
        return self.closed is None or moment < self.closed

    def __str__(self) -> str:
        end = self.closed.isoformat() if self.closed is not None else "..."
        return f"[{self.opened.isoformat()}, {end})"
