import re
from datetime import date, datetime, timedelta
from typing import Iterable

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")  # YYYY-MM-DD

WEEKEND = (5, 6)  # Sat, Sun (Mon=0)


class InvalidRange(ValueError):
    """Raised by the strict counter when a bound is unparseable or the range is inverted."""

    def __init__(self, start, end, reason: str):
        super().__init__(f"Invalid date range {start!r} → {end!r}: {reason}")
        self.start = start
        self.end = end
        self.reason = reason


# -----------------------
# Helpers
# -----------------------
def parse_calendar_date(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not DATE_RE.match(s):
        return None
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        return None


def is_weekend(d: date) -> bool:
    return d.weekday() in WEEKEND


def is_business_day(d: date, holidays: Iterable = ()) -> bool:
    return not is_weekend(d) and d not in _holiday_dates(holidays)


def _holiday_dates(holidays: Iterable) -> frozenset[date]:
    out = set()
    for h in holidays or ():
        d = parse_calendar_date(h)
        if d is not None:
            out.add(d)
    return frozenset(out)


def _weekdays_between(start: date, end: date) -> int:
    total = (end - start).days + 1
    full_weeks, rest = divmod(total, 7)
    count = full_weeks * 5
    cur = start
    for _ in range(rest):
        if not is_weekend(cur):
            count += 1
        cur += timedelta(days=1)
    return count


# -----------------------
# Counting
# -----------------------
def business_days_between(start, end, holidays: Iterable = ()) -> int:
    """Count Mon-Fri days in [start, end] inclusive that are not holidays.

    Bounds may be ISO ``YYYY-MM-DD`` strings or dates. Raises InvalidRange
    when a bound does not parse or when end is before start.
    """
    s = parse_calendar_date(start)
    e = parse_calendar_date(end)
    if s is None:
        raise InvalidRange(start, end, "start is not a valid date")
    if e is None:
        raise InvalidRange(start, end, "end is not a valid date")
    if e < s:
        raise InvalidRange(start, end, "end is before start")

    off = sum(1 for h in _holiday_dates(holidays) if s <= h <= e and not is_weekend(h))
    return _weekdays_between(s, e) - off


def count_business_days(start, end, holidays: Iterable = ()) -> int:
    # Invalid or inverted ranges count as zero days.
    try:
        return business_days_between(start, end, holidays)
    except InvalidRange:
        return 0
