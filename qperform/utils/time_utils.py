"""
Calendar-week utilities for month-based performance reporting.

Key concepts:
  - Calendar weeks run Sunday → Saturday.
  - Week-to-month attribution ("majority of days"): a week that straddles
    two months counts for the month holding more of its seven days, i.e.
    four or more; the side with three or fewer days never wins.
    Example: the week of 09/28/25 - 10/04/25 has 3 days in September and
    4 in October, so it is an October week.
  - Attribution always compares full (month, year) pairs, so weeks crossing
    December → January resolve to the right year.

Months are 1-based (1 = January) throughout.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

DateLike = Union[date, datetime]

_WEEK_RANGE_FORMATS = ("%m/%d/%y", "%m/%d/%Y", "%Y-%m-%d")


@dataclass(frozen=True)
class MonthRef:
    """A (month, year) pair."""

    month: int
    year:  int

    @property
    def name(self) -> str:
        return month_name(self.month)


@dataclass(frozen=True)
class WeekSpan:
    """A Sunday-to-Saturday calendar week."""

    start: date
    end:   date

    @property
    def label(self) -> str:
        return format_week_range(self.start, self.end)


def _as_date(value: DateLike) -> date:
    # datetime is a date subclass, so check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def week_start(value: DateLike) -> date:
    """Return the Sunday on or before ``value``.

    Datetimes are truncated to their calendar date (i.e. normalised to
    midnight) before the weekday is taken.
    """
    d = _as_date(value)
    days_since_sunday = (d.weekday() + 1) % 7
    return d - timedelta(days=days_since_sunday)


def week_end(value: DateLike) -> date:
    """Return the Saturday ending the calendar week that contains ``value``."""
    return week_start(value) + timedelta(days=6)


def date_range(start: date, end: date, step_days: int = 1) -> list[date]:
    """Generate a list of dates from ``start`` to ``end`` (inclusive).

    An empty list is returned when ``end < start``.

    Raises:
        ValueError: If ``step_days < 1``.
    """
    if step_days < 1:
        raise ValueError(f"step_days must be >= 1, got {step_days}.")

    result: list[date] = []
    current = start
    while current <= end:
        result.append(current)
        current += timedelta(days=step_days)
    return result


def days_in_month(
    week_start_date: DateLike,
    week_end_date: DateLike,
    month: int,
    year: int,
) -> int:
    """Count the days in ``[week_start_date, week_end_date]`` that fall in ``month``/``year``."""
    return sum(
        1
        for d in date_range(_as_date(week_start_date), _as_date(week_end_date))
        if d.month == month and d.year == year
    )


def attribute_week(week_start_date: DateLike, week_end_date: DateLike) -> MonthRef:
    """Decide which month a week counts for.

    Rules, in order:
      1. Both boundaries in the same month/year → that month.
      2. The start month holds strictly more of the days → start month.
      3. Otherwise → end month (ties included; a full 7-day week cannot tie).

    Args:
        week_start_date: First day of the week.
        week_end_date: Last day of the week.

    Returns:
        ``MonthRef`` the week is attributed to.
    """
    start = _as_date(week_start_date)
    end = _as_date(week_end_date)
    start_ref = MonthRef(start.month, start.year)
    end_ref = MonthRef(end.month, end.year)

    if start_ref == end_ref:
        return start_ref

    start_days = days_in_month(start, end, start_ref.month, start_ref.year)
    end_days = days_in_month(start, end, end_ref.month, end_ref.year)

    return start_ref if start_days > end_days else end_ref


def last_day_of_month(month: int, year: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def weeks_for_month(month: int, year: int) -> list[WeekSpan]:
    """Return every calendar week attributed to ``month``/``year``, oldest first.

    Iteration starts at the Sunday on or before the 1st and steps 7 days at a
    time until the week start passes the last day of the month. Weeks that
    the majority rule assigns to a neighbouring month are skipped.

    Raises:
        ValueError: If ``month`` is not in 1..12.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in [1, 12], got {month}.")

    target = MonthRef(month, year)
    last_day = last_day_of_month(month, year)

    weeks: list[WeekSpan] = []
    current = week_start(date(year, month, 1))
    while current <= last_day:
        end = current + timedelta(days=6)
        if attribute_week(current, end) == target:
            weeks.append(WeekSpan(start=current, end=end))
        current += timedelta(days=7)
    return weeks


def week_number_in_month(week_start_date: DateLike, month: int, year: int) -> int:
    """1-based position of a week within its month, or 0 if it is not one of them."""
    start = _as_date(week_start_date)
    for i, span in enumerate(weeks_for_month(month, year), start=1):
        if span.start == start:
            return i
    return 0


def is_date_in_week(value: DateLike, week_start_date: DateLike, week_end_date: DateLike) -> bool:
    """``True`` if ``value`` falls on any day from week start to week end inclusive."""
    return _as_date(week_start_date) <= _as_date(value) <= _as_date(week_end_date)


def format_week_range(week_start_date: DateLike, week_end_date: DateLike) -> str:
    """Format a week as ``"MM/DD/YY - MM/DD/YY"``."""
    return (
        f"{_as_date(week_start_date).strftime('%m/%d/%y')} - "
        f"{_as_date(week_end_date).strftime('%m/%d/%y')}"
    )


def parse_week_range(text: Optional[str]) -> Optional[WeekSpan]:
    """Parse ``"MM/DD/YY - MM/DD/YY"`` back into a ``WeekSpan``.

    Four-digit years and ISO dates are accepted on either side.

    Returns:
        ``WeekSpan``, or ``None`` when the string is empty or malformed.
    """
    if not text:
        return None
    parts = text.split(" - ")
    if len(parts) != 2:
        return None

    start = _parse_loose_date(parts[0])
    end = _parse_loose_date(parts[1])
    if start is None or end is None:
        return None
    return WeekSpan(start=start, end=end)


def _parse_loose_date(text: str) -> Optional[date]:
    text = text.strip()
    for fmt in _WEEK_RANGE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def month_name(month: int) -> str:
    """English month name for a 1-based month number."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in [1, 12], got {month}.")
    return calendar.month_name[month]


def month_number(name: str) -> Optional[int]:
    """1-based month number for an English month name (case-insensitive), or ``None``."""
    wanted = name.strip().lower()
    for i in range(1, 13):
        if calendar.month_name[i].lower() == wanted:
            return i
    return None


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def today() -> date:
    """Current UTC calendar date."""
    return utcnow().date()
