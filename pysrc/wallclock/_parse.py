import logging
import re
from datetime import (
    date as _date,
    datetime as _datetime,
    time as _time,
    timedelta as _timedelta,
    timezone as _timezone,
    tzinfo as _tzinfo,
)
from typing import NoReturn, Optional

from ._common import UTC, mk_fixed_tzinfo

logger = logging.getLogger(__name__)


class ParseError(ValueError):
    """A value could not be interpreted as a date-time"""


def _parse_err(s: str) -> NoReturn:
    raise ParseError(f"Invalid format: {s!r}") from None


# A '+' in a query string decodes to a space, so '10:14:47+02:00' arrives
# as '10:14:47 02:00'. Only a space between a time and a trailing HH:MM
# qualifies; the date/time separator never matches.
_LOST_PLUS = re.compile(
    r"(\d{2}:\d{2}(?::\d{2}(?:[.,]\d{1,9})?)?) (\d{2}:\d{2})$"
)

_match_iso = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})"
    r"(?:[Tt ](\d{2}):(\d{2})(?::(\d{2})(?:[.,]\d{1,9})?)?"
    r"(?:([Zz])|([+-])(\d{2})(?::?(\d{2})(?::(\d{2}))?)?)?)?"
).fullmatch


def repair_offset_sign(s: str) -> str:
    repaired = _LOST_PLUS.sub(r"\1+\2", s, count=1)
    if repaired != s:
        logger.debug("Read space as '+' offset sign in %r", s)
    return repaired


def _offset_from_iso(
    sign: str, hh: str, mm: Optional[str], ss: Optional[str]
) -> _tzinfo:
    if int(mm or 0) > 59 or int(ss or 0) > 59:
        raise ValueError("Invalid offset minutes or seconds")
    minutes = int(hh) * 60 + int(mm or 0)
    if ss is None or ss == "00":
        return mk_fixed_tzinfo(-minutes if sign == "-" else minutes)
    # Sub-minute offsets (local mean time) bypass the cache
    delta = _timedelta(minutes=minutes, seconds=int(ss))
    return _timezone(-delta if sign == "-" else delta)


def datetime_from_iso(s: str) -> tuple[_datetime, Optional[_tzinfo]]:
    """Parse a lenient ISO 8601 date or date-time.

    Returns the naive wall-clock datetime and the offset found in the
    string (or ``None`` if there was none). Fractional seconds are
    accepted but dropped.
    """
    if not s.isascii() or not (m := _match_iso(repair_offset_sign(s.strip()))):
        _parse_err(s)
    year, month, day, hour, minute, second = m.groups()[:6]
    zulu, sign, off_h, off_m, off_s = m.groups()[6:]
    try:
        date = _date(int(year), int(month), int(day))
        time = (
            _time()
            if hour is None
            else _time(int(hour), int(minute), int(second or 0))
        )
        if zulu:
            tz: Optional[_tzinfo] = UTC
        elif sign:
            tz = _offset_from_iso(sign, off_h, off_m, off_s)
        else:
            tz = None
    except ValueError:
        _parse_err(s)
    return _datetime.combine(date, time), tz
