from datetime import (
    datetime as _datetime,
    timedelta as _timedelta,
    timezone as _timezone,
    tzinfo as _tzinfo,
)
from functools import lru_cache

UTC = _timezone.utc
SECS_PER_DAY = 86_400
_MINUTE = _timedelta(minutes=1)
Minutes = int  # signed offset from UTC, in whole minutes


# We cache fixed-offset tzinfo objects to avoid creating multiple identical ones.
# It's very common to only have whole-hour offsets, so this helps a lot.
@lru_cache
def mk_fixed_tzinfo(minutes: Minutes, /) -> _timezone:
    if minutes == 0:
        return UTC
    if not -1440 < minutes < 1440:
        raise ValueError("offset must be strictly between -24 and 24 hours")
    return _timezone(_timedelta(minutes=minutes))


def offset_minutes(dt: _datetime) -> Minutes:
    # Sub-minute offsets (local mean time) are truncated toward zero
    # NOTE: mypy doesn't know utcoffset() can never return None here
    return int(dt.utcoffset() / _MINUTE)  # type: ignore[operator]


def format_offset(minutes: Minutes) -> str:
    sign = "-" if minutes < 0 else "+"
    hrs, mins = divmod(abs(minutes), 60)
    return f"{sign}{hrs:02}:{mins:02}"


def iso_offset(dt: _datetime) -> str:
    """The exact UTC offset as ``±HH:MM``, or ``±HH:MM:SS`` if it
    doesn't fall on a whole minute"""
    total = int(dt.utcoffset().total_seconds())  # type: ignore[union-attr]
    sign = "-" if total < 0 else "+"
    hrs, rest = divmod(abs(total), 3600)
    mins, secs = divmod(rest, 60)
    text = f"{sign}{hrs:02}:{mins:02}"
    return f"{text}:{secs:02}" if secs else text


def tz_display_name(tz: _tzinfo) -> str:
    key = getattr(tz, "key", None)
    if key is not None:
        return key
    elif tz is UTC:
        return "UTC"
    elif isinstance(tz, _timezone):
        return iso_offset(_datetime(2000, 1, 1, tzinfo=tz))
    return "local"


def check_utc_bounds(dt: _datetime) -> _datetime:
    try:
        dt.astimezone(UTC)
    except (OverflowError, ValueError):
        raise ValueError("Instant out of range")
    return dt


def truncate_seconds(dt: _datetime) -> _datetime:
    return dt.replace(microsecond=0) if dt.microsecond else dt
