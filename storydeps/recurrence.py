"""Due-date arithmetic for recurring work items."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from .errors import InvalidRecurrenceError
from .models import RecurrencePattern


def _js_weekday(day: date) -> int:
    # Patterns number weekdays from Sunday = 0.
    return (day.weekday() + 1) % 7


def _add_months(day: date, months: int, day_of_month: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day_of_month, last_day))


def _next_weekly(day: date, pattern: RecurrencePattern) -> date:
    if not pattern.days_of_week:
        return day + timedelta(days=7 * pattern.interval)

    current = _js_weekday(day)
    days = sorted(set(pattern.days_of_week))
    later = [d for d in days if d > current]
    if later:
        offset = later[0] - current
    else:
        offset = 7 - current + days[0]
    return day + timedelta(days=offset)


def next_due_date(from_date: date, pattern: RecurrencePattern) -> date:
    """Return the next due date after ``from_date`` for ``pattern``.

    A ``datetime`` is reduced to its date. Dates past ``pattern.end_date``
    collapse to the end date.
    """
    pattern.ensure_valid()
    if isinstance(from_date, datetime):
        from_date = from_date.date()

    if pattern.frequency in ("daily", "custom"):
        result = from_date + timedelta(days=pattern.interval)
    elif pattern.frequency == "weekly":
        result = _next_weekly(from_date, pattern)
    elif pattern.frequency == "monthly":
        result = _add_months(from_date, pattern.interval, pattern.day_of_month or from_date.day)
    elif pattern.frequency == "yearly":
        result = _add_months(from_date, 12 * pattern.interval, from_date.day)
    else:
        raise InvalidRecurrenceError(f"Invalid frequency: {pattern.frequency}")

    if pattern.end_date is not None and result > pattern.end_date:
        return pattern.end_date
    return result
