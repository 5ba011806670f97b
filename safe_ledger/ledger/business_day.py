"""The one business-day rule every ledger component shares.

Business day ``D`` runs from ``D cutoff:00`` to ``D+1 cutoff:00`` in the
business timezone. Windows are half-open and returned as naive UTC bounds,
matching how timestamps are stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from safe_ledger.core.clock import to_storage
from safe_ledger.core.config import Settings, settings as default_settings


@dataclass(frozen=True)
class Window:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= to_storage(moment) < self.end


class BusinessCalendar:
    def __init__(self, timezone_name: str = "UTC", cutoff_hour: int = 0):
        self.zone = ZoneInfo(timezone_name)
        self.cutoff_hour = cutoff_hour

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "BusinessCalendar":
        config = config or default_settings
        return cls(config.business_timezone, config.business_day_cutoff_hour)

    def _day_start(self, day: date) -> datetime:
        local = datetime.combine(day, time(hour=self.cutoff_hour), tzinfo=self.zone)
        return local.astimezone(timezone.utc).replace(tzinfo=None)

    def day_window(self, day: date) -> Window:
        return Window(self._day_start(day), self._day_start(day + timedelta(days=1)))

    def range_window(self, first: date, last: date) -> Window:
        """Window covering business days ``first`` through ``last`` inclusive."""
        return Window(self._day_start(first), self._day_start(last + timedelta(days=1)))

    def business_date(self, moment: datetime) -> date:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        local = moment.astimezone(self.zone)
        if local.hour < self.cutoff_hour:
            return local.date() - timedelta(days=1)
        return local.date()

    def bounded_window(self, first: date | None, last: date | None) -> Window | None:
        """Like ``range_window`` but either end may be left open; ``None`` when both are."""
        if first is None and last is None:
            return None
        start = self._day_start(first) if first is not None else datetime.min
        end = self._day_start(last + timedelta(days=1)) if last is not None else datetime.max
        return Window(start, end)
