"""
Tests for the sunrise approximation.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from sunboard_app.solar import compute_sunrise_utc, sunrise_minutes_utc

LONDON = (51.5074, -0.1278)


class TestSunriseValues:
    def test_london_midsummer(self):
        # Published: 04:43 BST = 03:43 UTC on 21 June 2024
        minutes = sunrise_minutes_utc(date(2024, 6, 21), *LONDON)
        assert minutes == pytest.approx(3 * 60 + 43, abs=5)

    def test_london_midwinter(self):
        # Published: 08:04 GMT on 21 December 2024
        minutes = sunrise_minutes_utc(date(2024, 12, 21), *LONDON)
        assert minutes == pytest.approx(8 * 60 + 4, abs=5)

    def test_equator_equinox_near_six(self):
        minutes = sunrise_minutes_utc(date(2024, 3, 20), 0.0, 0.0)
        assert minutes == pytest.approx(6 * 60, abs=15)

    def test_fifteen_degrees_east_is_one_hour_earlier(self):
        day = date(2024, 4, 1)
        west = sunrise_minutes_utc(day, 45.0, 0.0)
        east = sunrise_minutes_utc(day, 45.0, 15.0)
        assert west - east == pytest.approx(60.0)

    def test_result_is_utc_on_the_same_day(self):
        day = date(2024, 6, 21)
        # Tokyo's sunrise falls on the previous UTC evening; it wraps into this day
        sunrise = compute_sunrise_utc(day, 35.6762, 139.6503)
        assert sunrise.tzinfo == timezone.utc
        assert sunrise.date() == day

    def test_minutes_always_in_day_range(self):
        for lon in (-180.0, -90.0, 0.0, 90.0, 180.0):
            minutes = sunrise_minutes_utc(date(2024, 9, 1), 10.0, lon)
            assert 0 <= minutes < 1440


class TestDeterminism:
    def test_same_inputs_same_instant(self):
        a = compute_sunrise_utc(date(2024, 5, 5), 40.7, -74.0)
        b = compute_sunrise_utc(date(2024, 5, 5), 40.7, -74.0)
        assert a == b

    def test_aware_datetime_uses_utc_calendar_day(self):
        # 23:30 in New York on 21 June is already 22 June in UTC
        now = datetime(2024, 6, 21, 23, 30, tzinfo=ZoneInfo("America/New_York"))
        assert compute_sunrise_utc(now, *LONDON) == compute_sunrise_utc(date(2024, 6, 22), *LONDON)


class TestPolarDegeneracy:
    def test_polar_night_north(self):
        assert compute_sunrise_utc(date(2024, 12, 21), 85.0, 0.0) is None

    def test_polar_night_south(self):
        assert compute_sunrise_utc(date(2024, 6, 21), -85.0, 0.0) is None

    def test_midnight_sun(self):
        assert compute_sunrise_utc(date(2024, 6, 21), 80.0, 15.0) is None

    def test_poles_never_raise(self):
        for day in (date(2024, 3, 20), date(2024, 6, 21), date(2024, 9, 22), date(2024, 12, 21)):
            for lat in (-90.0, 90.0):
                result = compute_sunrise_utc(day, lat, 0.0)
                assert result is None or result.date() == day
