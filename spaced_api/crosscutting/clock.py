"""
Name: Clock (time source for date/hour gating)

Responsibilities:
  - Provide "now" as an aware datetime in the configured lottery time zone
  - Derive the calendar keys the lottery uses (date key, hour, year bounds)
  - Allow tests to pin "now" deterministically

Collaborators:
  - application/usecases/lottery/*: hour gate, deadline match, priority year
  - application/usecases/volunteer/*: registration deadline checks
  - container.py: builds SystemClock from settings
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of the current instant, always timezone-aware."""

    @property
    def tz(self) -> ZoneInfo: ...

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in a fixed zone."""

    def __init__(self, tz: ZoneInfo | str):
        self._tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock:
    """Pinned clock for tests and dry runs; `advance()` moves it forward."""

    def __init__(self, instant: datetime, tz: ZoneInfo | str = "Asia/Seoul"):
        self._tz = ZoneInfo(tz) if isinstance(tz, str) else tz
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self._tz)
        self._instant = instant.astimezone(self._tz)

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self._tz)
        self._instant = instant.astimezone(self._tz)

    def advance(self, **kwargs) -> None:
        self._instant = self._instant + timedelta(**kwargs)


def date_key(moment: datetime | date) -> str:
    """YYYY-MM-DD calendar key (matches the `deadline` column format)."""
    return moment.strftime("%Y-%m-%d")


def today(clock: Clock) -> date:
    return clock.now().date()


def year_bounds(clock: Clock, year: int | None = None) -> tuple[datetime, datetime]:
    """
    [start, end) of a calendar year in the clock's zone.

    Defaults to the current year of the clock.
    """
    tz = clock.tz
    y = year if year is not None else clock.now().year
    start = datetime(y, 1, 1, tzinfo=tz)
    end = datetime(y + 1, 1, 1, tzinfo=tz)
    return start, end
