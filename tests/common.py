import os
from contextlib import contextmanager
from pathlib import Path
from typing import Optional
from unittest.mock import patch
from zoneinfo import TZPATH

from wallclock import TimezoneContext, reset_system_tz

# The POSIX TZ string for the Copenhagen timezone.
CPH_TZ_POSIX = "CET-1CEST,M3.5.0,M10.5.0/3"

CPH = TimezoneContext.named("Europe/Copenhagen")
NYC = TimezoneContext.named("America/New_York")
UTC_CTX = TimezoneContext.named("UTC")


@contextmanager
def system_tz(name):
    try:
        with patch.dict(os.environ, {"TZ": name}):
            reset_system_tz()
            yield
    finally:
        reset_system_tz()  # don't forget to reset the timezone after the patch!


@contextmanager
def system_tz_cph():
    with system_tz("Europe/Copenhagen"):
        yield


@contextmanager
def system_tz_utc():
    with system_tz("UTC"):
        yield


def find_tzif(key: str) -> Optional[Path]:
    """Path to the system's TZif file for a zone, if there is one"""
    for root in TZPATH:
        if (path := Path(root) / key).is_file():
            return path
    return None
