# The MIT License (MIT)
#
# Copyright (c) Arie Bovenberg
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Maintainer's notes:
#
# - Values are immutable. "Modifying" operations return a new instance.
# - Arithmetic works on wall-clock fields. Afterwards, the result is placed
#   back in its timezone. For named zones, this may change the offset,
#   and times skipped by a DST transition are pushed forward by the gap.
# - Anything that needs "the default timezone" takes a ``context=``
#   argument. Without one, the cached system timezone is used.
from __future__ import annotations

__version__ = "0.3.0"

import logging
from datetime import (
    date as _date,
    datetime as _datetime,
    timedelta as _timedelta,
    timezone as _timezone,
    tzinfo as _tzinfo,
)
from typing import TYPE_CHECKING, Optional, Union, no_type_check

from ._common import (
    UTC,
    check_utc_bounds,
    format_offset,
    iso_offset,
    mk_fixed_tzinfo,
    offset_minutes,
    truncate_seconds,
    tz_display_name,
)
from ._math import (
    add_days,
    breakdown,
    carry_time,
    days_in_month,
    is_leap,
    shift_date,
)
from ._parse import ParseError, datetime_from_iso
from ._tz import TimezoneContext, get_system_context, load_zone

__all__ = [
    # Values
    "CalendarDateTime",
    "TimeInterval",
    "TimezoneContext",
    # Operations
    "resolve",
    "check_timezone_default",
    # Exceptions
    "ParseError",
    "TimezoneMismatch",
    "TimezoneConfigError",
]

logger = logging.getLogger(__name__)

TzLike = Union[str, _tzinfo, int]
Resolvable = Union["CalendarDateTime", _datetime, _date, str, int]

_object_new = object.__new__
_EPOCH = _datetime(1970, 1, 1, tzinfo=UTC)
_SECOND = _timedelta(seconds=1)


class _ImmutableBase:
    __slots__ = ()

    # Immutable classes don't need to be copied
    @no_type_check
    def __copy__(self):
        return self

    @no_type_check
    def __deepcopy__(self, _):
        return self


if TYPE_CHECKING:
    from typing import final
else:

    def final(cls):

        def init_subclass_not_allowed(cls, **kwargs):  # pragma: no cover
            raise TypeError("Subclassing not allowed")

        cls.__init_subclass__ = init_subclass_not_allowed
        return cls


class TimezoneMismatch(ValueError):
    """Two values with different UTC offsets were compared,
    and reconciling them was not allowed"""

    @classmethod
    def for_offsets(cls, a: _tzinfo, b: _tzinfo) -> TimezoneMismatch:
        return cls(
            f"Timezones differ: {tz_display_name(a)} and "
            f"{tz_display_name(b)}. Pass allow_unequal_timezones=True "
            "to normalize the deviating value"
        )


class TimezoneConfigError(Exception):
    """The default timezone is not equivalent to the required one"""


@final
class TimeInterval(_ImmutableBase):
    """The interval between two :class:`CalendarDateTime` values,
    as returned by :meth:`CalendarDateTime.diff_constant`.

    The component fields (``years`` through ``seconds``) are absolute.
    ``invert`` tells whether the interval runs backwards.
    The ``total_*`` properties carry the sign.

    Example
    -------
    >>> a = CalendarDateTime(2019, 2, 1, tz="UTC")
    >>> b = CalendarDateTime(2019, 3, 4, 5, tz="UTC")
    >>> a.diff_constant(b)
    TimeInterval(P1M3DT5H)
    >>> a.diff_constant(b).total_months
    1
    >>> a.diff_constant(b).total_hours
    749
    """

    __slots__ = (
        "_years",
        "_months",
        "_days",
        "_hours",
        "_minutes",
        "_seconds",
        "_invert",
        "_whole_days",
    )

    def __init__(
        self,
        *,
        years: int = 0,
        months: int = 0,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        invert: bool = False,
        total_days: Optional[int] = None,
    ) -> None:
        if min(years, months, days, hours, minutes, seconds) < 0:
            raise ValueError("Interval components must not be negative")
        if months > 11 or hours > 23 or minutes > 59 or seconds > 59:
            raise ValueError("Interval components must not overflow")
        if total_days is None:
            if years or months:
                raise ValueError(
                    "total_days is required for intervals spanning months"
                )
            total_days = days
        elif abs(total_days) < days or (
            not (years or months) and abs(total_days) != days
        ):
            raise ValueError(
                f"total_days={total_days} contradicts days={days}"
            )
        self._years = years
        self._months = months
        self._days = days
        self._hours = hours
        self._minutes = minutes
        self._seconds = seconds
        self._invert = invert
        self._whole_days = abs(total_days)

    @classmethod
    def _between(cls, start: _datetime, end: _datetime) -> TimeInterval:
        sign, yrs, mos, dys, hrs, mins, secs, whole_days = breakdown(
            start, end
        )
        self = _object_new(cls)
        self._years = yrs
        self._months = mos
        self._days = dys
        self._hours = hrs
        self._minutes = mins
        self._seconds = secs
        self._invert = sign < 0
        self._whole_days = whole_days
        return self

    @property
    def years(self) -> int:
        return self._years

    @property
    def months(self) -> int:
        return self._months

    @property
    def days(self) -> int:
        return self._days

    @property
    def hours(self) -> int:
        return self._hours

    @property
    def minutes(self) -> int:
        return self._minutes

    @property
    def seconds(self) -> int:
        return self._seconds

    @property
    def invert(self) -> bool:
        return self._invert

    @property
    def _sign(self) -> int:
        return -1 if self._invert else 1

    @property
    def total_months(self) -> int:
        return self._sign * (self._years * 12 + self._months)

    @property
    def total_days(self) -> int:
        return self._sign * self._whole_days

    @property
    def total_hours(self) -> int:
        return self._sign * (self._whole_days * 24 + self._hours)

    @property
    def total_minutes(self) -> int:
        return self._sign * (
            (self._whole_days * 24 + self._hours) * 60 + self._minutes
        )

    @property
    def total_seconds(self) -> int:
        return self._sign * (
            ((self._whole_days * 24 + self._hours) * 60 + self._minutes) * 60
            + self._seconds
        )

    def as_tuple(self) -> tuple[int, int, int, int, int, int]:
        """The signed components as a tuple

        Example
        -------
        >>> TimeInterval(months=1, days=2, total_days=30, invert=True).as_tuple()
        (0, -1, -2, 0, 0, 0)
        """
        s = self._sign
        return (
            s * self._years,
            s * self._months,
            s * self._days,
            s * self._hours,
            s * self._minutes,
            s * self._seconds,
        )

    def format(self) -> str:
        """Format as an ISO 8601 duration

        Example
        -------
        >>> TimeInterval(years=1, days=3, minutes=5, total_days=368).format()
        'P1Y3DT5M'
        """
        date_part = "".join(
            f"{v}{u}"
            for v, u in (
                (self._years, "Y"),
                (self._months, "M"),
                (self._days, "D"),
            )
            if v
        )
        time_part = "".join(
            f"{v}{u}"
            for v, u in (
                (self._hours, "H"),
                (self._minutes, "M"),
                (self._seconds, "S"),
            )
            if v
        )
        if not (date_part or time_part):
            return "PT0S"
        return (
            ("-" if self._invert else "")
            + "P"
            + date_part
            + (f"T{time_part}" if time_part else "")
        )

    __str__ = format

    def __repr__(self) -> str:
        return f"TimeInterval({self.format()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeInterval):
            return NotImplemented
        return self.as_tuple() == other.as_tuple() and (
            self.total_days == other.total_days
        )

    def __hash__(self) -> int:
        return hash((self.as_tuple(), self.total_days))

    def __bool__(self) -> bool:
        return bool(self.total_seconds)


@final
class CalendarDateTime(_ImmutableBase):
    """A wall-clock date and time, with second precision,
    in a named timezone or at a fixed UTC offset.

    Example
    -------
    >>> d = CalendarDateTime(2018, 1, 31, 15, 37, tz="Europe/Copenhagen")
    CalendarDateTime(2018-01-31 15:37:00+01:00[Europe/Copenhagen])
    >>> d.modify_date(0, 1)
    CalendarDateTime(2018-02-28 15:37:00+01:00[Europe/Copenhagen])

    The ``tz`` argument accepts an IANA timezone key, a
    :class:`~datetime.tzinfo`, or a fixed offset in minutes.
    If omitted, the default timezone of the ``context`` is used
    (the system timezone, if no context is given).

    Note
    ----
    Wall-clock times skipped by a DST transition are shifted forward
    by the length of the gap. Repeated times resolve to the earlier one.
    """

    __slots__ = ("_py_dt",)
    _py_dt: _datetime

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        tz: Optional[TzLike] = None,
        context: Optional[TimezoneContext] = None,
    ) -> None:
        self._py_dt = _localize(
            _datetime(year, month, day, hour, minute, second),
            _zone_or_default(tz, context),
        )

    # --- construction ------------------------------------------------------

    @classmethod
    def now(
        cls, *, context: Optional[TimezoneContext] = None
    ) -> CalendarDateTime:
        """The current time in the default timezone, in whole seconds"""
        ctx = context or get_system_context()
        return cls._from_py_unchecked(truncate_seconds(_datetime.now(ctx.tz)))

    @classmethod
    def from_timestamp(
        cls,
        i: int,
        /,
        *,
        tz: Optional[TzLike] = None,
        context: Optional[TimezoneContext] = None,
    ) -> CalendarDateTime:
        """Create from a UNIX timestamp in whole seconds

        Example
        -------
        >>> CalendarDateTime.from_timestamp(-1, tz="UTC")
        CalendarDateTime(1969-12-31 23:59:59+00:00)
        """
        if isinstance(i, bool) or not isinstance(i, int):
            raise TypeError(f"timestamp must be an integer, got {i!r}")
        zone = _zone_or_default(tz, context)
        try:
            return cls._from_py_unchecked(
                (_EPOCH + i * _SECOND).astimezone(zone)
            )
        except OverflowError:
            raise ValueError("Instant out of range")

    @classmethod
    def from_py_datetime(
        cls, d: _datetime, /, *, context: Optional[TimezoneContext] = None
    ) -> CalendarDateTime:
        """Create from a :class:`~datetime.datetime`.

        Naive datetimes are taken as wall-clock time in the default timezone.
        Aware datetimes keep their timezone.
        Microseconds are dropped.
        """
        if d.tzinfo is None or d.utcoffset() is None:
            return cls._from_py_unchecked(
                _localize(
                    truncate_seconds(d).replace(tzinfo=None, fold=0),
                    _zone_or_default(None, context),
                )
            )
        return cls._from_py_unchecked(check_utc_bounds(truncate_seconds(d)))

    @classmethod
    def parse(
        cls, s: str, /, *, context: Optional[TimezoneContext] = None
    ) -> CalendarDateTime:
        """Parse a date or date-time string.

        Accepted are lenient ISO 8601 forms (``T`` or space separator,
        optional seconds and fraction, optional ``Z`` or ``±HH:MM`` offset),
        ``@<timestamp>`` and ``now``.
        A space where the ``+`` of the offset should be, which is what
        URL-decoding does to it, is read as ``+``.

        Strings without an offset are placed in the default timezone.
        Strings with an offset keep it.

        Example
        -------
        >>> CalendarDateTime.parse("2019-04-05T10:14:47 02:00")
        CalendarDateTime(2019-04-05 10:14:47+02:00)

        Raises
        ------
        ParseError
            If the string can't be interpreted as a date-time
        """
        if not isinstance(s, str):
            raise TypeError(f"Expected a string, got {s!r}")
        stripped = s.strip()
        if stripped.lower() == "now":
            return cls.now(context=context)
        elif stripped.startswith("@"):
            try:
                return cls.from_timestamp(int(stripped[1:]), tz=UTC)
            except ValueError:
                raise ParseError(f"Invalid timestamp: {s!r}") from None

        naive, tz = datetime_from_iso(stripped)
        try:
            return cls._from_py_unchecked(
                _localize(naive, tz or _zone_or_default(None, context))
            )
        except ValueError:
            raise ParseError(f"Out of range: {s!r}") from None

    @classmethod
    def resolve(
        cls,
        value: Resolvable,
        /,
        keep_foreign_timezone: bool = False,
        *,
        context: Optional[TimezoneContext] = None,
    ) -> CalendarDateTime:
        """Create a value from one of many representations.

        The result is in the default timezone, with all fields
        recomputed for that timezone.
        If ``keep_foreign_timezone`` is true,
        the timezone of the input is kept instead (if it has one).

        Accepted are:

        - :class:`CalendarDateTime`
        - :class:`~datetime.datetime` (naive means default timezone)
        - :class:`~datetime.date` (the start of that day)
        - :class:`int` UNIX timestamps (their own timezone is UTC)
        - :class:`str` in any format :meth:`parse` accepts

        Example
        -------
        >>> CalendarDateTime.resolve(0).to_iso_utc()
        '1970-01-01T00:00:00Z'
        >>> ctx = TimezoneContext.named("Europe/Copenhagen")
        >>> CalendarDateTime.resolve("2019-04-05T08:14:47Z", context=ctx)
        CalendarDateTime(2019-04-05 10:14:47+02:00[Europe/Copenhagen])

        Raises
        ------
        ParseError
            If a string can't be interpreted as a date-time
        TypeError
            If the type of the value isn't supported
        """
        ctx = context or get_system_context()
        if isinstance(value, CalendarDateTime):
            result = value
        elif isinstance(value, bool):
            raise TypeError("Cannot resolve a bool to a date-time")
        elif isinstance(value, int):
            result = cls.from_timestamp(value, tz=UTC)
        elif isinstance(value, str):
            result = cls.parse(value, context=ctx)
        elif isinstance(value, _datetime):
            result = cls.from_py_datetime(value, context=ctx)
        elif isinstance(value, _date):
            result = cls(value.year, value.month, value.day, context=ctx)
        else:
            raise TypeError(
                f"Cannot resolve {type(value).__name__} to a date-time"
            )
        if keep_foreign_timezone:
            return result
        return result.to_local(context=ctx)

    @classmethod
    def _from_py_unchecked(cls, d: _datetime, /) -> CalendarDateTime:
        self = _object_new(cls)
        self._py_dt = d
        return self

    # --- fields ------------------------------------------------------------

    @property
    def year(self) -> int:
        return self._py_dt.year

    @property
    def month(self) -> int:
        return self._py_dt.month

    @property
    def day(self) -> int:
        return self._py_dt.day

    @property
    def hour(self) -> int:
        return self._py_dt.hour

    @property
    def minute(self) -> int:
        return self._py_dt.minute

    @property
    def second(self) -> int:
        return self._py_dt.second

    @property
    def offset(self) -> int:
        """The UTC offset in whole minutes"""
        return offset_minutes(self._py_dt)

    @property
    def tz(self) -> _tzinfo:
        # never None, we always set it
        return self._py_dt.tzinfo  # type: ignore[return-value]

    @property
    def tz_name(self) -> str:
        """The timezone key, or the offset for fixed-offset values"""
        return tz_display_name(self.tz)

    def py_datetime(self) -> _datetime:
        """Get the underlying :class:`~datetime.datetime` object"""
        return self._py_dt

    def timestamp(self) -> int:
        """The UNIX timestamp in whole seconds"""
        return (self._py_dt - _EPOCH) // _SECOND

    def is_leap_year(self, year: Optional[int] = None) -> bool:
        return is_leap(self.year if year is None else year)

    def month_length_days(self, month: int, year: Optional[int] = None) -> int:
        """The number of days in the given month,
        of this value's year unless another is given.

        Raises ValueError if the month isn't 1 through 12.
        """
        return days_in_month(self.year if year is None else year, month)

    # --- arithmetic --------------------------------------------------------

    def modify_date(
        self, years: int, months: int = 0, days: int = 0
    ) -> CalendarDateTime:
        """Shift the date by years, months and days, in that order.

        If the day of the month doesn't exist after the year and month
        step, it becomes the last day of that month. Days are added after.

        Example
        -------
        >>> d = CalendarDateTime(2018, 1, 31, tz="UTC")
        >>> d.modify_date(0, 1).date_iso()
        '2018-02-28'
        >>> d.modify_date(2, 1).date_iso()
        '2020-02-29'
        >>> d.modify_date(0, 0, 50).date_iso()
        '2018-03-22'

        Note
        ----
        Shifting back by the same number of months does not restore
        a clamped day: Jan 31 + 1 month - 1 month is Jan 28.
        """
        if not (years or months or days):
            return self
        shifted = shift_date(self._py_dt.date(), years, months, days)
        return self._from_py_unchecked(
            _localize(_datetime.combine(shifted, self._py_dt.time()), self.tz)
        )

    def modify_time(
        self, hours: int, minutes: int = 0, seconds: int = 0
    ) -> CalendarDateTime:
        """Shift the time of day, carrying over into the date.

        Example
        -------
        >>> d = CalendarDateTime(2018, 1, 1, 15, 37, 13, tz="UTC")
        >>> d.modify_time(25, 1, 1).datetime_iso()
        '2018-01-02 16:38:14'
        >>> d.modify_time(-25, -1, -1).datetime_iso()
        '2017-12-31 14:36:12'
        """
        if not (hours or minutes or seconds):
            return self
        dt = self._py_dt
        day_carry, hour, minute, second = carry_time(
            dt.hour, dt.minute, dt.second, hours, minutes, seconds
        )
        d = add_days(dt.date(), day_carry)
        return self._from_py_unchecked(
            _localize(
                _datetime(d.year, d.month, d.day, hour, minute, second),
                self.tz,
            )
        )

    def add(
        self,
        *,
        years: int = 0,
        months: int = 0,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
    ) -> CalendarDateTime:
        """Add components, from largest to smallest.
        Equivalent to :meth:`modify_date` followed by :meth:`modify_time`.

        Example
        -------
        >>> d = CalendarDateTime(2020, 1, 31, 23, tz="UTC")
        >>> d.add(months=1, hours=2)
        CalendarDateTime(2020-03-01 01:00:00+00:00)
        """
        return self.modify_date(years, months, days).modify_time(
            hours, minutes, seconds
        )

    def subtract(
        self,
        *,
        years: int = 0,
        months: int = 0,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
    ) -> CalendarDateTime:
        """Subtract components, from largest to smallest.
        The inverse of :meth:`add`, except where days were clamped.
        """
        return self.add(
            years=-years,
            months=-months,
            days=-days,
            hours=-hours,
            minutes=-minutes,
            seconds=-seconds,
        )

    # --- setters -----------------------------------------------------------

    def replace(
        self,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        day: Optional[int] = None,
        hour: Optional[int] = None,
        minute: Optional[int] = None,
        second: Optional[int] = None,
        tz: Optional[TzLike] = None,
    ) -> CalendarDateTime:
        """Construct a new instance with the given fields replaced.

        Unlike :meth:`modify_date`, invalid dates are not clamped
        but raise ValueError.
        Replacing ``tz`` keeps the wall-clock fields.
        Use :meth:`with_timezone` to keep the moment in time instead.
        """
        dt = self._py_dt
        naive = _datetime(
            dt.year if year is None else year,
            dt.month if month is None else month,
            dt.day if day is None else day,
            dt.hour if hour is None else hour,
            dt.minute if minute is None else minute,
            dt.second if second is None else second,
        )
        return self._from_py_unchecked(
            _localize(naive, self.tz if tz is None else load_zone(tz))
        )

    def set_to_date_start(self) -> CalendarDateTime:
        return self.replace(hour=0, minute=0, second=0)

    def set_to_first_day_of_month(
        self, month: Optional[int] = None
    ) -> CalendarDateTime:
        return self.replace(month=_check_month(month, self.month), day=1)

    def set_to_last_day_of_month(
        self, month: Optional[int] = None
    ) -> CalendarDateTime:
        """Move to the last day of the month
        (of this value's month, or of another month in the same year).

        Example
        -------
        >>> CalendarDateTime(2020, 1, 15, tz="UTC").set_to_last_day_of_month(2)
        CalendarDateTime(2020-02-29 00:00:00+00:00)
        """
        mnth = _check_month(month, self.month)
        return self.replace(month=mnth, day=days_in_month(self.year, mnth))

    def with_timezone(self, tz: TzLike, /) -> CalendarDateTime:
        """The same moment in time, in another timezone.
        All fields are recomputed."""
        zone = load_zone(tz)
        try:
            return self._from_py_unchecked(self._py_dt.astimezone(zone))
        except OverflowError:
            raise ValueError("Instant out of range")

    def to_local(
        self, *, context: Optional[TimezoneContext] = None
    ) -> CalendarDateTime:
        """The same moment in time, in the default timezone"""
        ctx = context or get_system_context()
        if self.tz is ctx.tz:
            return self
        return self.with_timezone(ctx.tz)

    def offset_is_local(
        self, *, context: Optional[TimezoneContext] = None
    ) -> bool:
        """Whether the offset equals that of the default timezone
        at the same moment"""
        ctx = context or get_system_context()
        return self.offset == ctx.offset_at(self._py_dt)

    # --- difference --------------------------------------------------------

    def diff_constant(
        self,
        other: CalendarDateTime | _datetime,
        /,
        allow_unequal_timezones: bool = False,
        *,
        context: Optional[TimezoneContext] = None,
    ) -> TimeInterval:
        """The interval from this value (the baseline) to ``other``,
        counted in wall-clock fields.

        Both values must share a timezone or a UTC offset. If they don't,
        :class:`TimezoneMismatch` is raised, unless
        ``allow_unequal_timezones`` is true. In that case the deviating
        value is first moved to the offset of the other:

        - If one side is UTC, the other side is converted to UTC.
        - Otherwise, the side whose offset isn't that of the default
          timezone is converted (the deviant, if both or neither are).

        Example
        -------
        >>> a = CalendarDateTime(2019, 2, 1, tz="Europe/Copenhagen")
        >>> b = CalendarDateTime(2019, 3, 1, tz="Europe/Copenhagen")
        >>> a.diff_constant(b).total_months
        1
        >>> b.diff_constant(a).total_months
        -1
        """
        if isinstance(other, _datetime):
            other = CalendarDateTime.from_py_datetime(other, context=context)
        elif not isinstance(other, CalendarDateTime):
            raise TypeError(
                f"Cannot diff with {type(other).__name__}, "
                "expected CalendarDateTime or datetime"
            )
        baseline, deviant = self._py_dt, other._py_dt
        off_base, off_dev = offset_minutes(baseline), offset_minutes(deviant)
        if off_base != off_dev and not _same_zone(self.tz, other.tz):
            if not allow_unequal_timezones:
                raise TimezoneMismatch.for_offsets(self.tz, other.tz)
            if off_base == 0:
                deviant = deviant.astimezone(UTC)
                moved = "deviant"
            elif off_dev == 0:
                baseline = baseline.astimezone(UTC)
                moved = "baseline"
            else:
                ctx = context or get_system_context()
                if (
                    ctx.offset_at(baseline) != off_base
                    and ctx.offset_at(deviant) == off_dev
                ):
                    baseline = baseline.astimezone(mk_fixed_tzinfo(off_dev))
                    moved = "baseline"
                else:
                    deviant = deviant.astimezone(mk_fixed_tzinfo(off_base))
                    moved = "deviant"
            logger.debug(
                "Normalized %s to reconcile offsets %s and %s",
                moved,
                format_offset(off_base),
                format_offset(off_dev),
            )
        return TimeInterval._between(
            baseline.replace(tzinfo=None), deviant.replace(tzinfo=None)
        )

    # --- formatting --------------------------------------------------------

    def date_iso(self) -> str:
        """Format the date as ``YYYY-MM-DD``"""
        return f"{self.year:04}-{self.month:02}-{self.day:02}"

    def time_iso(self, no_seconds: bool = False) -> str:
        """Format the time of day as ``HH:MM:SS``, or ``HH:MM``"""
        if no_seconds:
            return f"{self.hour:02}:{self.minute:02}"
        return f"{self.hour:02}:{self.minute:02}:{self.second:02}"

    def datetime_iso(self, no_seconds: bool = False) -> str:
        """Format as ``YYYY-MM-DD HH:MM:SS``, without offset

        Example
        -------
        >>> CalendarDateTime(2018, 1, 1, 15, 37, 13).datetime_iso()
        '2018-01-01 15:37:13'
        """
        return f"{self.date_iso()} {self.time_iso(no_seconds)}"

    def to_date_iso_local(
        self, *, context: Optional[TimezoneContext] = None
    ) -> str:
        return self.to_local(context=context).date_iso()

    def to_time_iso_local(
        self,
        no_seconds: bool = False,
        *,
        context: Optional[TimezoneContext] = None,
    ) -> str:
        return self.to_local(context=context).time_iso(no_seconds)

    def to_datetime_iso_local(
        self,
        no_seconds: bool = False,
        *,
        context: Optional[TimezoneContext] = None,
    ) -> str:
        return self.to_local(context=context).datetime_iso(no_seconds)

    def to_iso_zonal(self) -> str:
        """Format as ISO 8601 with the UTC offset

        Example
        -------
        >>> CalendarDateTime(2019, 4, 5, 10, 14, 47, tz=120).to_iso_zonal()
        '2019-04-05T10:14:47+02:00'
        """
        return (
            f"{self.date_iso()}T{self.time_iso()}{iso_offset(self._py_dt)}"
        )

    def to_iso_utc(self) -> str:
        """Format as ISO 8601 in UTC, with a ``Z`` suffix

        Example
        -------
        >>> CalendarDateTime(2019, 4, 5, 10, 14, 47, tz=120).to_iso_utc()
        '2019-04-05T08:14:47Z'
        """
        utc = self.with_timezone(UTC)
        return f"{utc.date_iso()}T{utc.time_iso()}Z"

    __str__ = to_iso_zonal

    def __repr__(self) -> str:
        key = getattr(self.tz, "key", None)
        return (
            f"CalendarDateTime({self.datetime_iso()}"
            f"{iso_offset(self._py_dt)}{f'[{key}]' if key else ''})"
        )

    # --- comparison --------------------------------------------------------

    # Comparisons are by the moment in time, like aware datetimes
    if not TYPE_CHECKING:  # pragma: no branch

        def __eq__(self, other: object) -> bool:
            if not isinstance(other, CalendarDateTime):
                return NotImplemented
            return self.timestamp() == other.timestamp()

        def __hash__(self) -> int:
            return hash(self.timestamp())

    def __lt__(self, other: CalendarDateTime) -> bool:
        if not isinstance(other, CalendarDateTime):
            return NotImplemented
        return self.timestamp() < other.timestamp()

    def __le__(self, other: CalendarDateTime) -> bool:
        if not isinstance(other, CalendarDateTime):
            return NotImplemented
        return self.timestamp() <= other.timestamp()

    def __gt__(self, other: CalendarDateTime) -> bool:
        if not isinstance(other, CalendarDateTime):
            return NotImplemented
        return self.timestamp() > other.timestamp()

    def __ge__(self, other: CalendarDateTime) -> bool:
        if not isinstance(other, CalendarDateTime):
            return NotImplemented
        return self.timestamp() >= other.timestamp()

    def exact_eq(self, other: CalendarDateTime, /) -> bool:
        """Compare by fields and timezone, instead of by moment in time

        Example
        -------
        >>> a = CalendarDateTime(2020, 8, 15, 12, tz=60)
        >>> b = CalendarDateTime(2020, 8, 15, 13, tz=120)
        >>> a == b
        True
        >>> a.exact_eq(b)
        False
        """
        return (
            self._py_dt.replace(tzinfo=None)
            == other._py_dt.replace(tzinfo=None)
            and self.offset == other.offset
            and self.tz_name == other.tz_name
        )

    # a custom pickle implementation with a smaller payload
    def __reduce__(self) -> tuple[object, ...]:
        tz: TzLike = self.tz
        # Fixed offsets may have seconds; keyless zones are stored
        # as the offset in minutes at this moment.
        if not isinstance(tz, _timezone):
            tz = getattr(tz, "key", None) or self.offset
        return (
            _unpkl_cdt,
            self._py_dt.timetuple()[:6] + (tz, self._py_dt.fold),
        )


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
def _unpkl_cdt(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    tz: TzLike,
    fold: int = 0,
) -> CalendarDateTime:
    # fold=1 selects the later of two repeated wall-clock times
    naive = _datetime(year, month, day, hour, minute, second, fold=fold)
    return CalendarDateTime._from_py_unchecked(
        _localize(naive, load_zone(tz))
    )


def resolve(
    value: Resolvable,
    /,
    keep_foreign_timezone: bool = False,
    *,
    context: Optional[TimezoneContext] = None,
) -> CalendarDateTime:
    """Alias for :meth:`CalendarDateTime.resolve`"""
    return CalendarDateTime.resolve(
        value, keep_foreign_timezone, context=context
    )


def check_timezone_default(
    name: str,
    /,
    raise_on_mismatch: bool = False,
    *,
    context: Optional[TimezoneContext] = None,
) -> bool:
    """Check whether the default timezone currently has the same
    UTC offset as the named timezone.

    Example
    -------
    >>> ctx = TimezoneContext.named("Europe/Copenhagen")
    >>> check_timezone_default("Europe/Oslo", context=ctx)
    True
    >>> check_timezone_default("UTC", context=ctx)
    False
    >>> check_timezone_default("UTC", True, context=ctx)
    Traceback (most recent call last):
      ...
    TimezoneConfigError: Default timezone Europe/Copenhagen ...

    Raises
    ------
    TimezoneConfigError
        If the offsets differ and ``raise_on_mismatch`` is true
    ~zoneinfo.ZoneInfoNotFoundError
        If the timezone name is not found in the IANA database
    """
    ctx = context or get_system_context()
    allowed = TimezoneContext.named(name)
    now = _datetime.now(UTC)
    offset_default = ctx.offset_at(now)
    offset_allowed = allowed.offset_at(now)
    if offset_default != offset_allowed:
        if raise_on_mismatch:
            raise TimezoneConfigError(
                f"Default timezone {ctx.name} with offset "
                f"{format_offset(offset_default)} must be equivalent to "
                f"timezone {name} with offset {format_offset(offset_allowed)}"
            )
        return False
    return True


def _localize(naive: _datetime, tz: _tzinfo) -> _datetime:
    dt = check_utc_bounds(naive.replace(tzinfo=tz))
    if isinstance(tz, _timezone):
        return dt
    # Non-existent times don't survive a UTC roundtrip:
    # this shifts them forward by the length of the gap.
    return dt.astimezone(UTC).astimezone(tz)


def _zone_or_default(
    tz: Optional[TzLike], context: Optional[TimezoneContext]
) -> _tzinfo:
    if tz is not None:
        return load_zone(tz)
    return (context or get_system_context()).tz


def _same_zone(a: _tzinfo, b: _tzinfo) -> bool:
    if a is b:
        return True
    key = getattr(a, "key", None)
    return key is not None and key == getattr(b, "key", None)


def _check_month(month: Optional[int], default: int) -> int:
    if month is None:
        return default
    if not 1 <= month <= 12:
        raise ValueError(f"month must be None or 1 through 12, got {month}")
    return month
