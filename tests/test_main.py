import logging
import sys

import pytest

import wallclock
from wallclock import (
    CalendarDateTime,
    ParseError,
    TimezoneConfigError,
    TimezoneMismatch,
)


def test_exceptions():
    assert issubclass(ParseError, ValueError)
    assert issubclass(TimezoneMismatch, ValueError)
    assert issubclass(TimezoneConfigError, Exception)
    assert not issubclass(TimezoneConfigError, ValueError)


def test_version():
    assert isinstance(wallclock.__version__, str)


def test_exports():
    for name in wallclock.__all__:
        assert hasattr(wallclock, name)
    assert "reset_system_tz" in wallclock.__all__


def test_silent_by_default():
    handlers = logging.getLogger("wallclock").handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)


@pytest.mark.skipif(
    sys.implementation.name == "pypy",
    reason="time-machine doesn't support PyPy",
)
def test_time_machine():
    import time_machine

    with time_machine.travel("1980-03-02 02:00 UTC", tick=False):
        assert CalendarDateTime.now() == CalendarDateTime(
            1980, 3, 2, 2, tz="UTC"
        )
