"""
sunboard_app/market_schedule.py
Market-hours logic — knows when each exchange is open.

Works from a parsed hours template (see templates.py), a workday spec, a list
of date exceptions and an IANA timezone (e.g. "Asia/Tokyo", "Europe/London").
The current instant is always passed in; nothing here reads the clock.

Public API
----------
market_status(schedule, tz, now, ...)  -> StatusRecord
resolve_sessions(schedule, tz, now, ...) -> (sessions, local_date, local_minute)
session_progress(minute, sessions)     -> int      (0–100)
fmt_duration(seconds)                  -> str      ("2h 15m", "45m", "30s")
fmt_countdown(record)                  -> str      ("Closes in 4h 00m")
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .templates import (
    MINUTES_PER_DAY,
    ParsedSchedule,
    Phase,
    Session,
    parse_template,
    parse_workdays,
    to_minutes,
)

OPENS = "Opens"
CLOSES = "Closes"


@dataclass(frozen=True)
class ExceptionRule:
    """A date-specific closure, replacement window or early close."""

    date: date
    closed: bool = False
    override_open: str | None = None
    override_close: str | None = None
    half_day_close: str | None = None

    @property
    def has_override(self) -> bool:
        # A lone open or close time is not an override
        return bool(self.override_open and self.override_close)


@dataclass(frozen=True)
class StatusRecord:
    is_open: bool
    phase: Phase
    next_event_label: str | None
    minutes_until_next_event: int
    sessions_today: tuple[Session, ...]
    local_minute: int | None = None
    local_date: date | None = None
    progress: int = 0
    diagnostic: str | None = None


def _closed(diagnostic: str | None = None, **kw) -> StatusRecord:
    return StatusRecord(
        is_open=False,
        phase=Phase.CLOSED,
        next_event_label=None,
        minutes_until_next_event=0,
        sessions_today=(),
        diagnostic=diagnostic,
        **kw,
    )


def _as_schedule(schedule: ParsedSchedule | str | None) -> ParsedSchedule:
    if isinstance(schedule, ParsedSchedule):
        return schedule
    return parse_template(schedule)


def _zone(tz: str) -> ZoneInfo | None:
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError, TypeError):
        return None


def _local_now(now: datetime, zone: ZoneInfo) -> datetime:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone)


def find_exception(exceptions: Iterable[ExceptionRule], day: date) -> ExceptionRule | None:
    """First rule for `day` wins."""
    for rule in exceptions:
        if rule.date == day:
            return rule
    return None


def _clip(sessions: Sequence[Session], cutoff: str) -> tuple[Session, ...]:
    try:
        cut = to_minutes(cutoff)
    except ValueError:
        return tuple(sessions)
    out = []
    for s in sessions:
        end = min(s.end_minute, cut)
        if end > s.start_minute:
            out.append(Session(s.start_minute, end, s.phase))
    return tuple(out)


def _override_window(rule: ExceptionRule) -> tuple[Session, ...] | None:
    try:
        start, end = to_minutes(rule.override_open), to_minutes(rule.override_close)
    except ValueError:
        return None
    if start >= end or start >= MINUTES_PER_DAY:
        return None
    return (Session(start, end, Phase.REG),)


def apply_exception(sessions: tuple[Session, ...], rule: ExceptionRule | None) -> tuple[Session, ...] | None:
    """
    Overlay a rule on today's sessions.

    Returns the replacement session tuple, or None when the rule changes nothing.
    """
    if rule is None:
        return None
    if rule.closed:
        return ()
    if rule.has_override:
        return _override_window(rule)
    return None


def resolve_sessions(
    schedule: ParsedSchedule | str | None,
    tz: str,
    now: datetime,
    workdays: str | None = None,
    exceptions: Iterable[ExceptionRule] = (),
    half_day_close: str | None = None,
) -> tuple[tuple[Session, ...], date, int]:
    """
    Sessions that apply on the zone-local day containing `now`.

    Raises ZoneInfoNotFoundError for an unknown timezone; market_status()
    turns that into a closed record.
    """
    zone = ZoneInfo(tz)
    local = _local_now(now, zone)
    local_date = local.date()
    minute = local.hour * 60 + local.minute

    parsed = _as_schedule(schedule)
    rule = find_exception(exceptions, local_date)

    sessions = parsed.sessions
    cutoff = half_day_close or (rule.half_day_close if rule is not None else None)
    if cutoff:
        sessions = _clip(sessions, cutoff)

    overlay = apply_exception(sessions, rule)
    if overlay is not None:
        # Closures and replacement hours take precedence over the workday gate
        return overlay, local_date, minute

    if local.weekday() not in parse_workdays(workdays):
        return (), local_date, minute

    return sessions, local_date, minute


def session_progress(minute: int, sessions: Sequence[Session]) -> int:
    """Percent (0–100) through the session containing `minute`; 0 when closed."""
    for s in sessions:
        if s.contains(minute):
            span = s.length
            if span <= 0:
                return 0
            return max(0, min(100, round((minute - s.start_minute) / span * 100)))
    return 0


def market_status(
    schedule: ParsedSchedule | str | None,
    tz: str,
    now: datetime,
    workdays: str | None = None,
    exceptions: Iterable[ExceptionRule] = (),
    half_day_close: str | None = None,
) -> StatusRecord:
    """
    Evaluate an exchange's state at `now`.

    Keys of the returned StatusRecord:
      is_open                  : bool
      phase                    : PRE | REG | POST | CLOSED
      next_event_label         : "Opens" | "Closes" | None (no sessions today)
      minutes_until_next_event : int
      sessions_today           : tuple[Session, ...]
    """
    if _zone(tz) is None:
        return _closed(f"unknown timezone {tz!r}")

    parsed = _as_schedule(schedule)
    sessions, local_date, minute = resolve_sessions(
        parsed, tz, now, workdays=workdays, exceptions=exceptions, half_day_close=half_day_close
    )

    if not sessions:
        return _closed(parsed.diagnostic, local_minute=minute, local_date=local_date)

    for s in sessions:
        if s.contains(minute):
            return StatusRecord(
                is_open=True,
                phase=s.phase,
                next_event_label=CLOSES,
                minutes_until_next_event=s.end_minute - minute,
                sessions_today=sessions,
                local_minute=minute,
                local_date=local_date,
                progress=session_progress(minute, sessions),
            )

    later = [s for s in sessions if s.start_minute > minute]
    if later:
        wait = later[0].start_minute - minute
    else:
        # Tomorrow's first window, assuming the same hours apply
        wait = MINUTES_PER_DAY - minute + sessions[0].start_minute

    return StatusRecord(
        is_open=False,
        phase=Phase.CLOSED,
        next_event_label=OPENS,
        minutes_until_next_event=wait,
        sessions_today=sessions,
        local_minute=minute,
        local_date=local_date,
    )


def fmt_duration(seconds: int) -> str:
    """Format seconds as human-readable duration, e.g. '2h 15m', '45m', '30s'."""
    seconds = max(0, int(seconds))
    h, rem = divmod(seconds, 3600)
    m, s   = divmod(rem, 60)
    if h > 0:
        return f"{h}h {m:02d}m"
    if m > 0:
        return f"{m}m"
    return f"{s}s"


def fmt_countdown(record: StatusRecord) -> str:
    """'Closes in 4h 00m', 'Opens in 45m' or '—' when there is no next event."""
    if record.next_event_label is None:
        return "—"
    return f"{record.next_event_label} in {fmt_duration(record.minutes_until_next_event * 60)}"
