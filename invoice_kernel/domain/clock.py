"""
Clock -- Deterministic date abstraction.

Responsibility:
    Provides an injectable clock so that report code never calls
    ``date.today()`` directly.  Aging and reminder reports take an explicit
    ``as_of`` date; when the caller omits it, the service asks its Clock.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned I/O boundary for time).

Failure modes:
    None.  ``DeterministicClock`` never raises.
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, timedelta


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Services that need the current date receive a Clock instance via
        constructor injection.

    Guarantees:
        - ``now()`` returns a timezone-aware UTC ``datetime``.
        - ``today()`` returns the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...

    def today(self) -> date:
        """Get the current calendar date (UTC)."""
        return self.now().date()


class SystemClock(Clock):
    """
    Production clock that returns actual system time.

    Non-goals:
        Not suitable for deterministic tests.
    """

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    Guarantees:
        - ``now()`` returns the same value on repeated calls until
          ``advance_days()`` or ``set_date()`` is called.
    """

    def __init__(self, fixed_date: date | None = None):
        """
        Initialize with an optional fixed date.

        Args:
            fixed_date: The date the clock reports.  Defaults to 2025-01-01.
        """
        self._fixed = datetime.combine(
            fixed_date or date(2025, 1, 1), datetime.min.time(), tzinfo=UTC
        ) + timedelta(hours=12)

    def now(self) -> datetime:
        return self._fixed

    def set_date(self, value: date) -> None:
        """Set the clock to a specific date (noon UTC)."""
        self._fixed = datetime.combine(value, datetime.min.time(), tzinfo=UTC) + timedelta(hours=12)

    def advance_days(self, days: int = 1) -> date:
        """Advance the clock by ``days`` and return the new date."""
        self._fixed += timedelta(days=days)
        return self.today()
