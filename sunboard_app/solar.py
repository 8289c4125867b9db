"""
sunboard_app/solar.py
Sunrise in UTC for any latitude/longitude and calendar day.

Simplified solar-position model (mean anomaly, equation of centre, fixed
obliquity, small equation-of-time term). Good to a few minutes, which is all
the board needs for ordering; it is not an ephemeris.

Public API
----------
compute_sunrise_utc(day, lat, lon)  -> datetime | None
sunrise_minutes_utc(day, lat, lon)  -> float | None
"""
from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone

OBLIQUITY_DEG = 23.4397
SUNRISE_ELEVATION_DEG = -0.833          # refraction + solar disk radius
PERIHELION_DEG = 102.9372
MINUTES_PER_DAY = 1440


def _utc_day(day: date | datetime) -> date:
    if isinstance(day, datetime):
        if day.tzinfo is not None:
            day = day.astimezone(timezone.utc)
        return day.date()
    return day


def sunrise_minutes_utc(day: date | datetime, latitude: float, longitude: float) -> float | None:
    """
    Minutes after UTC midnight of `day` at which the sun rises, in [0, 1440).

    Returns None when the sun does not cross the horizon that day
    (polar day or polar night).
    """
    d = _utc_day(day)
    n = d.timetuple().tm_yday

    m = math.radians((357.5291 + 0.98560028 * (n - 1)) % 360.0)
    c = math.radians(1.9148 * math.sin(m) + 0.0200 * math.sin(2 * m) + 0.0003 * math.sin(3 * m))
    lam = (m + c + math.radians(180.0 + PERIHELION_DEG)) % (2 * math.pi)

    sin_dec = math.sin(math.radians(OBLIQUITY_DEG)) * math.sin(lam)
    cos_dec = math.cos(math.asin(sin_dec))

    lat = math.radians(latitude)
    denom = math.cos(lat) * cos_dec
    if denom == 0.0:
        return None

    cos_h = (math.sin(math.radians(SUNRISE_ELEVATION_DEG)) - math.sin(lat) * sin_dec) / denom
    if cos_h < -1.0 or cos_h > 1.0:
        return None

    hour_angle_deg = math.degrees(math.acos(cos_h))

    # Equation of time, expressed as a fraction of a day
    eot_days = 0.0053 * math.sin(m) - 0.0069 * math.sin(2 * lam)
    transit = 720.0 - 4.0 * longitude + MINUTES_PER_DAY * eot_days

    return (transit - 4.0 * hour_angle_deg) % MINUTES_PER_DAY


def compute_sunrise_utc(day: date | datetime, latitude: float, longitude: float) -> datetime | None:
    """Sunrise on the UTC calendar day of `day` as an aware UTC datetime, or None."""
    minutes = sunrise_minutes_utc(day, latitude, longitude)
    if minutes is None:
        return None
    midnight = datetime.combine(_utc_day(day), time(0, 0), tzinfo=timezone.utc)
    # Whole seconds keep the result stable for equality checks and sorting
    return midnight + timedelta(seconds=int(minutes * 60))
