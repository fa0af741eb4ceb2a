import sys
from datetime import date as py_date, datetime as py_datetime, timezone

import pytest
from hypothesis import given
from hypothesis.strategies import integers

from wallclock import CalendarDateTime, ParseError, resolve

from .common import CPH, NYC, UTC_CTX, system_tz, system_tz_cph


class TestTimestamps:

    def test_epoch(self):
        d = resolve(0, context=CPH)
        assert d.to_iso_utc() == "1970-01-01T00:00:00Z"
        assert d.tz_name == "Europe/Copenhagen"
        assert d.datetime_iso() == "1970-01-01 01:00:00"

    def test_epoch_keep_foreign(self):
        d = resolve(0, True, context=CPH)
        assert d.to_iso_utc() == "1970-01-01T00:00:00Z"
        assert d.tz_name == "UTC"
        assert d.datetime_iso() == "1970-01-01 00:00:00"

    def test_negative(self):
        assert resolve(-1, context=CPH).to_iso_utc() == "1969-12-31T23:59:59Z"

    @given(integers(-(10**10), 10**10))
    def test_timestamp_roundtrip(self, ts):
        assert resolve(ts, context=NYC).timestamp() == ts

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="range"):
            resolve(10**20, context=CPH)


class TestStrings:

    def test_lost_plus_sign(self):
        d = resolve("2019-04-05T10:14:47 02:00", context=CPH)
        assert d.to_iso_zonal() == "2019-04-05T10:14:47+02:00"
        assert d.tz_name == "Europe/Copenhagen"

    def test_lost_plus_sign_keep_foreign(self):
        d = resolve("2019-04-05T10:14:47 02:00", True, context=CPH)
        assert d.to_iso_zonal() == "2019-04-05T10:14:47+02:00"
        assert d.tz_name == "+02:00"

    def test_lost_plus_sign_with_fraction(self):
        d = resolve("2019-04-05T10:14:47.123 02:00", True, context=CPH)
        assert d.to_iso_zonal() == "2019-04-05T10:14:47+02:00"

    def test_fields_recomputed(self):
        d = resolve("2019-04-05T10:14:47Z", context=CPH)
        assert d.datetime_iso() == "2019-04-05 12:14:47"
        assert d.offset == 120

    def test_keep_foreign_utc(self):
        d = resolve(
            "2019-04-05T10:14:47Z", keep_foreign_timezone=True, context=CPH
        )
        assert d.datetime_iso() == "2019-04-05 10:14:47"
        assert d.tz_name == "UTC"

    def test_naive_in_default_zone(self):
        d = resolve("2019-04-05 10:14", context=NYC)
        assert d.to_iso_zonal() == "2019-04-05T10:14:00-04:00"
        assert d.tz_name == "America/New_York"

    def test_date_only(self):
        d = resolve("2019-04-05", context=CPH)
        assert d.to_iso_zonal() == "2019-04-05T00:00:00+02:00"

    def test_at_timestamp(self):
        d = resolve("@1554459287", context=CPH)
        assert d.to_iso_zonal() == "2019-04-05T12:14:47+02:00"

    @pytest.mark.skipif(
        sys.implementation.name == "pypy",
        reason="time-machine doesn't support PyPy",
    )
    def test_now(self):
        import time_machine

        with time_machine.travel("2019-04-05 10:14:47 UTC", tick=False):
            d = resolve("now", context=CPH)
        assert d.to_iso_zonal() == "2019-04-05T12:14:47+02:00"

    @pytest.mark.parametrize(
        "s",
        [
            "not a date",
            "",
            "2018-02-30",
            "2018-02-28T10:14:47  02:00",
            "@abc",
            "@",
        ],
    )
    def test_invalid(self, s):
        with pytest.raises(ParseError):
            resolve(s, context=CPH)


class TestValues:

    def test_calendar_datetime_already_local(self):
        d = CalendarDateTime(2019, 4, 5, 10, tz="Europe/Copenhagen")
        assert resolve(d, context=CPH) is d

    def test_calendar_datetime_converted(self):
        d = CalendarDateTime(2019, 4, 5, 10, tz="UTC")
        resolved = resolve(d, context=CPH)
        assert resolved == d
        assert resolved.datetime_iso() == "2019-04-05 12:00:00"
        assert resolved.tz_name == "Europe/Copenhagen"

    def test_calendar_datetime_keep_foreign(self):
        d = CalendarDateTime(2019, 4, 5, 10, tz="UTC")
        assert resolve(d, True, context=CPH) is d

    def test_aware_datetime(self):
        d = resolve(
            py_datetime(2019, 4, 5, 10, tzinfo=timezone.utc), context=NYC
        )
        assert d.datetime_iso() == "2019-04-05 06:00:00"
        assert d.tz_name == "America/New_York"

    def test_aware_datetime_keep_foreign(self):
        d = resolve(
            py_datetime(2019, 4, 5, 10, tzinfo=timezone.utc), True, context=NYC
        )
        assert d.datetime_iso() == "2019-04-05 10:00:00"
        assert d.tz_name == "UTC"

    def test_naive_datetime(self):
        d = resolve(py_datetime(2019, 4, 5, 10, 14, 47), context=NYC)
        assert d.to_iso_zonal() == "2019-04-05T10:14:47-04:00"

    def test_date(self):
        d = resolve(py_date(2019, 4, 5), context=UTC_CTX)
        assert d.to_iso_zonal() == "2019-04-05T00:00:00+00:00"

    @pytest.mark.parametrize("value", [1.5, None, True, b"2019-04-05", [0]])
    def test_unsupported_type(self, value):
        with pytest.raises(TypeError):
            resolve(value, context=CPH)  # type: ignore[arg-type]


class TestSystemDefault:

    def test_system_default(self):
        with system_tz_cph():
            d = resolve(py_datetime(2019, 4, 5, 10, tzinfo=timezone.utc))
            assert d.tz_name == "Europe/Copenhagen"
            assert d.offset_is_local()
            assert d.datetime_iso() == "2019-04-05 12:00:00"

    def test_follows_system_change(self):
        with system_tz("Asia/Tokyo"):
            assert resolve(0).datetime_iso() == "1970-01-01 09:00:00"
        with system_tz("America/New_York"):
            assert resolve(0).datetime_iso() == "1969-12-31 19:00:00"


def test_function_matches_classmethod():
    for value in (0, "2019-04-05T10:14:47Z", py_date(2019, 4, 5)):
        assert resolve(value, context=CPH).exact_eq(
            CalendarDateTime.resolve(value, context=CPH)
        )
