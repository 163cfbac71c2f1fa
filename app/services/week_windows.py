from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List
from app.utils.dates import as_utc


@dataclass(frozen=True)
class WeekWindow:
    week: int   # month-relative ordinal, starts at 1
    start: date  # always a Sunday
    end: date    # start + 6 days, inclusive

    def contains(self, moment: datetime) -> bool:
        return self.start <= as_utc(moment).date() <= self.end


def month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def month_week_windows(year: int, month: int) -> List[WeekWindow]:
    """
    Sunday-to-Saturday windows overlapping the given month (1-12).
    A window that straddles two months belongs to both when listed per
    month, but within one month's list every day appears exactly once.
    """
    first_day, last_day = month_bounds(year, month)

    # isoweekday(): Monday=1 .. Sunday=7, so Sunday maps to an offset of 0
    start = first_day - timedelta(days=first_day.isoweekday() % 7)

    windows = []
    week = 1
    while start <= last_day:
        end = start + timedelta(days=6)
        if end >= first_day:
            windows.append(WeekWindow(week=week, start=start, end=end))
            week += 1
        start += timedelta(days=7)
    return windows
