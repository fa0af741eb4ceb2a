"""The default-timezone configuration value, and the cached system default."""

from __future__ import annotations

import logging
import os
import os.path
import platform
from dataclasses import dataclass
from datetime import datetime as _datetime, tzinfo as _tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .._common import UTC, mk_fixed_tzinfo, offset_minutes, tz_display_name

__all__ = [
    "TimezoneContext",
    "get_system_context",
    "reset_system_tz",
    "load_zone",
]

logger = logging.getLogger(__name__)

_LOCALTIME = "/etc/localtime"


def load_zone(tz: str | _tzinfo | int, /) -> _tzinfo:
    """Load a timezone from a key, an offset in minutes, or a tzinfo.

    Raises
    ------
    ~zoneinfo.ZoneInfoNotFoundError
        If the key is not found in the IANA database.
    """
    if isinstance(tz, _tzinfo):
        return tz
    elif isinstance(tz, bool):
        raise TypeError("timezone must be a key, offset or tzinfo, got bool")
    elif isinstance(tz, int):
        return mk_fixed_tzinfo(tz)
    elif isinstance(tz, str):
        if tz.upper() in ("UTC", "Z"):
            return UTC
        return ZoneInfo(tz)
    raise TypeError(f"timezone must be a key, offset or tzinfo, got {tz!r}")


@dataclass(frozen=True)
class TimezoneContext:
    """The timezone in which values are created and normalized
    when no other timezone is given.

    Pass one explicitly with ``context=`` to decouple a call from the
    system timezone.

    Example
    -------
    >>> ctx = TimezoneContext.named("Europe/Copenhagen")
    >>> CalendarDateTime.resolve("2019-04-05T08:14:47Z", context=ctx)
    CalendarDateTime(2019-04-05 10:14:47+02:00[Europe/Copenhagen])
    """

    tz: _tzinfo
    name: str

    @classmethod
    def named(cls, key: str, /) -> TimezoneContext:
        tz = load_zone(key)
        return cls(tz, tz_display_name(tz))

    @classmethod
    def fixed(cls, minutes: int, /) -> TimezoneContext:
        tz = mk_fixed_tzinfo(minutes)
        return cls(tz, tz_display_name(tz))

    @classmethod
    def system(cls) -> TimezoneContext:
        """A snapshot of the current system timezone"""
        tz = _read_system_tz()
        logger.debug("Read system timezone: %s", tz_display_name(tz))
        return cls(tz, tz_display_name(tz))

    def offset_at(self, dt: _datetime, /) -> int:
        """UTC offset in minutes of this timezone at the given instant"""
        return offset_minutes(dt.astimezone(self.tz))

    def __repr__(self) -> str:
        return f"TimezoneContext({self.name})"


def key_from_path(path: str) -> Optional[str]:
    """The zoneinfo key of a TZif file, judging by its location.

    >>> key_from_path("/usr/share/zoneinfo/Europe/Paris")
    'Europe/Paris'

    Files outside a ``zoneinfo`` directory (or its variants, such as
    ``zoneinfo.default``) have no key, and give None.
    """
    if (zi := path.rfind("zoneinfo")) == -1:
        return None
    if (index := path.find("/", zi)) == -1:
        return None
    return path[index + 1 :] or None


def _read_system_tz() -> _tzinfo:
    """The system timezone, as a tzinfo.

    The ``TZ`` environment variable takes precedence over the
    platform setting. Settings that can't be resolved fully
    fall back to something usable, with a warning.
    """
    try:
        setting = os.environ["TZ"]
    except KeyError:  # pragma: no cover
        return _platform_tz()
    return _zone_from_env(setting.removeprefix(":"))


def _zone_from_env(setting: str) -> _tzinfo:
    # An empty TZ means UTC according to POSIX
    if not setting:
        return UTC
    elif os.path.isabs(setting):
        return _zone_from_file(setting)
    try:
        return load_zone(setting)
    except (ZoneInfoNotFoundError, ValueError):
        # Keys without digits can't be POSIX TZ strings
        if not any(c.isdigit() for c in setting):
            raise
    # A POSIX TZ string. The C library already applies it,
    # but only as the offset in effect right now.
    tz = _datetime.now().astimezone().tzinfo
    logger.warning(
        "Cannot resolve TZ=%r to a zoneinfo key, "
        "using the current system offset %s",
        setting,
        tz,
    )
    assert tz is not None
    return tz


def _zone_from_file(path: str) -> _tzinfo:
    try:
        f = open(path, "rb")
    except FileNotFoundError:
        # The C library also falls back to UTC in this case
        logger.warning("Timezone file %s not found, using UTC", path)
        return UTC
    with f:
        return ZoneInfo.from_file(f, key=key_from_path(path))


# Unix-like systems point /etc/localtime at a file in the zoneinfo tree.
# Elsewhere, tzlocal knows where the platform keeps the setting.
if platform.system() in ("Linux", "Darwin"):  # pragma: no cover

    def _platform_tz() -> _tzinfo:
        path = os.path.realpath(_LOCALTIME)
        if (key := key_from_path(path)) is not None:
            return load_zone(key)
        return _zone_from_file(path)

else:  # pragma: no cover
    import tzlocal

    def _platform_tz() -> _tzinfo:
        return load_zone(tzlocal.get_localzone_name())


_CACHED_SYSTEM_CONTEXT: Optional[TimezoneContext] = None


def get_system_context() -> TimezoneContext:
    global _CACHED_SYSTEM_CONTEXT
    if _CACHED_SYSTEM_CONTEXT is None:
        _CACHED_SYSTEM_CONTEXT = TimezoneContext.system()
    return _CACHED_SYSTEM_CONTEXT


def reset_system_tz() -> None:
    """Resets the cached system timezone to the current system timezone.

    Call this after changing the ``TZ`` environment variable.
    """
    global _CACHED_SYSTEM_CONTEXT
    _CACHED_SYSTEM_CONTEXT = TimezoneContext.system()
