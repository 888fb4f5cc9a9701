"""Injectable time source.

Everything that depends on "now" or "today" (cache TTL checks, the forecast
window, rest-gap calculation, training week lookup) takes a Clock so tests
can pin time.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Protocol

from runcast.config.settings import settings
from runcast.utils.timezone import get_zone, to_utc


class Clock(Protocol):
    """Source of the current instant and the local calendar day."""

    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Wall clock. `now()` is UTC, `today()` is the local date in the configured zone."""

    def __init__(self, tz: str | None = None) -> None:
        self._zone = get_zone(tz or settings.timezone)

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return datetime.now(self._zone).date()


class FixedClock:
    """Clock pinned to a given instant; advance it explicitly."""

    def __init__(self, current: datetime, tz: str = "UTC") -> None:
        self._current = to_utc(current)
        self._zone = get_zone(tz)

    def now(self) -> datetime:
        return self._current

    def today(self) -> date:
        return self._current.astimezone(self._zone).date()

    def advance(self, delta: timedelta) -> None:
        self._current = self._current + delta
