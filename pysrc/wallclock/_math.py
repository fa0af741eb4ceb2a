"""Calendar and time arithmetic helpers.

All carry arithmetic uses Python's floored ``divmod``, so remainders
always fall in the range of the smaller unit, whatever the sign of the delta.
"""

from datetime import date as _date, datetime as _datetime

# Type alias for the result of a wall-clock difference. Consists of:
# 1. The sign (-1 if the end lies before the start, 1 otherwise)
# 2. Absolute years, months, days, hours, minutes and seconds
# 3. The absolute number of whole days
_Breakdown = tuple[int, int, int, int, int, int, int, int]


def is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


# 1-indexed days per month
_MONTHDAYS = [0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


def days_in_month(year: int, month: int) -> int:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    return _MONTHDAYS[month] + (month == 2 and is_leap(year))


def add_months(year: int, month: int, months: int) -> tuple[int, int]:
    year_delta, month0_new = divmod(month - 1 + months, 12)
    return year + year_delta, month0_new + 1


def add_days(d: _date, days: int) -> _date:
    if not days:
        return d
    try:
        return _date.fromordinal(d.toordinal() + days)
    except (OverflowError, ValueError):
        raise ValueError("Date out of range")


def shift_date(
    d: _date, years: int = 0, months: int = 0, days: int = 0
) -> _date:
    """Shift a date by years, then months, then days.

    The day of the month is clamped once, after the year and month steps,
    so that e.g. Jan 31 + 1 month gives the last day of February.
    """
    year, month = add_months(d.year + years, d.month, months)
    if not 1 <= year <= 9999:
        raise ValueError("Date out of range")
    shifted = _date(year, month, min(d.day, days_in_month(year, month)))
    return add_days(shifted, days)


def carry_time(
    hour: int,
    minute: int,
    second: int,
    hours: int = 0,
    minutes: int = 0,
    seconds: int = 0,
) -> tuple[int, int, int, int]:
    """Add deltas to a time of day, carrying seconds into minutes,
    minutes into hours and hours into days.

    Returns the day carry along with the new hour, minute and second.
    """
    minute_carry, second_new = divmod(second + seconds, 60)
    hour_carry, minute_new = divmod(minute + minutes + minute_carry, 60)
    day_carry, hour_new = divmod(hour + hours + hour_carry, 24)
    return day_carry, hour_new, minute_new, second_new


def _add_months_clamped(d: _datetime, months: int) -> _datetime:
    year, month = add_months(d.year, d.month, months)
    return d.replace(
        year=year, month=month, day=min(d.day, days_in_month(year, month))
    )


def months_between(start: _datetime, end: _datetime) -> int:
    """Signed number of whole months from ``start`` to ``end``.

    Both are naive wall-clock datetimes.
    """
    diff = (end.year - start.year) * 12 + (end.month - start.month)
    if diff == 0:
        return 0
    try:
        shift = _add_months_clamped(start, diff)
    except ValueError:  # pragma: no cover
        raise ValueError("Date out of range")
    # Check if we overshot
    if (diff > 0 and shift > end) or (diff < 0 and shift < end):
        diff -= 1 if diff > 0 else -1
    return diff


def breakdown(start: _datetime, end: _datetime) -> _Breakdown:
    sign = -1 if end < start else 1
    lo, hi = (end, start) if sign < 0 else (start, end)
    months_total = abs(months_between(lo, hi))
    rest = hi - _add_months_clamped(lo, months_total)
    hours, secs = divmod(rest.seconds, 3600)
    mins, secs = divmod(secs, 60)
    years, months = divmod(months_total, 12)
    return (
        sign,
        years,
        months,
        rest.days,
        hours,
        mins,
        secs,
        (hi - lo).days,
    )
