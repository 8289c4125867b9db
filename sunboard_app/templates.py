"""
sunboard_app/templates.py
Schedule-template grammar — turns compact hour strings into trading sessions.

Three template shapes are understood:

  CONTINUOUS_09:30_16:00                                  one REG window
  SPLIT_09:00_11:30__12:30_15:00                          two REG windows (lunch gap)
  EXTENDED_PRE_04:00_09:30__REG_09:30_16:00__POST_16:00_20:00
                                                          any subset of PRE/REG/POST

Anything else parses to an empty session list (the exchange is always closed)
and carries a diagnostic string instead of raising.

Public API
----------
parse_template(tpl)        -> ParsedSchedule
parse_workdays(spec)       -> frozenset[int]   (0=Monday … 6=Sunday)
to_minutes("HH:MM")        -> int
minutes_to_hhmm(m)         -> str
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class Phase(Enum):
    PRE = "PRE"
    REG = "REG"
    POST = "POST"
    CLOSED = "CLOSED"


MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class Session:
    """A contiguous local-time window, [start_minute, end_minute)."""

    start_minute: int
    end_minute: int
    phase: Phase = Phase.REG

    def contains(self, minute: int) -> bool:
        return self.start_minute <= minute < self.end_minute

    @property
    def length(self) -> int:
        return self.end_minute - self.start_minute


# ── Tagged template variants ───────────────────────────────────────────────────
@dataclass(frozen=True)
class Window:
    start: int
    end: int


@dataclass(frozen=True)
class Continuous:
    window: Window

    def sessions(self) -> tuple[Session, ...]:
        return (Session(self.window.start, self.window.end, Phase.REG),)


@dataclass(frozen=True)
class Split:
    first: Window
    second: Window

    def sessions(self) -> tuple[Session, ...]:
        return (
            Session(self.first.start, self.first.end, Phase.REG),
            Session(self.second.start, self.second.end, Phase.REG),
        )


@dataclass(frozen=True)
class Extended:
    pre: Window | None = None
    reg: Window | None = None
    post: Window | None = None

    def sessions(self) -> tuple[Session, ...]:
        out = []
        for phase, w in ((Phase.PRE, self.pre), (Phase.REG, self.reg), (Phase.POST, self.post)):
            if w is not None:
                out.append(Session(w.start, w.end, phase))
        return tuple(out)


TemplateVariant = Union[Continuous, Split, Extended]


@dataclass(frozen=True)
class ParsedSchedule:
    template: str | None
    variant: TemplateVariant | None
    sessions: tuple[Session, ...] = field(default_factory=tuple)
    diagnostic: str | None = None

    @property
    def ok(self) -> bool:
        return self.variant is not None


# ── Time helpers ───────────────────────────────────────────────────────────────
_HHMM = r"(\d{2}:\d{2})"
_CONTINUOUS_RE = re.compile(rf"^CONTINUOUS_{_HHMM}_{_HHMM}$")
_SPLIT_RE = re.compile(rf"^SPLIT_{_HHMM}_{_HHMM}__{_HHMM}_{_HHMM}$")
_EXTENDED_PART_RE = re.compile(rf"^(PRE|REG|POST)_{_HHMM}_{_HHMM}$")


def to_minutes(hhmm: str) -> int:
    """'09:30' -> 570. Raises ValueError on anything outside 00:00–24:00."""
    h, m = hhmm.strip().split(":")
    hours, minutes = int(h), int(m)
    if not (0 <= hours <= 24 and 0 <= minutes <= 59):
        raise ValueError(f"time out of range: {hhmm!r}")
    total = hours * 60 + minutes
    if total > MINUTES_PER_DAY:
        raise ValueError(f"time out of range: {hhmm!r}")
    return total


def minutes_to_hhmm(m: int) -> str:
    h, mn = divmod(int(m), 60)
    return f"{h:02d}:{mn:02d}"


def _window(start: str, end: str) -> Window:
    s, e = to_minutes(start), to_minutes(end)
    if s >= MINUTES_PER_DAY:
        raise ValueError(f"session cannot start at {start}")
    if s >= e:
        raise ValueError(f"session {start}-{end} does not end after it starts")
    return Window(s, e)


def _parse_variant(tpl: str) -> TemplateVariant:
    if tpl.startswith("CONTINUOUS_"):
        m = _CONTINUOUS_RE.match(tpl)
        if not m:
            raise ValueError("expected CONTINUOUS_HH:MM_HH:MM")
        return Continuous(_window(m[1], m[2]))

    if tpl.startswith("SPLIT_"):
        m = _SPLIT_RE.match(tpl)
        if not m:
            raise ValueError("expected SPLIT_HH:MM_HH:MM__HH:MM_HH:MM")
        first, second = _window(m[1], m[2]), _window(m[3], m[4])
        if second.start < first.end:
            raise ValueError("split windows overlap")
        return Split(first, second)

    if tpl.startswith("EXTENDED_"):
        windows: dict[str, Window] = {}
        for part in tpl[len("EXTENDED_"):].split("__"):
            m = _EXTENDED_PART_RE.match(part)
            if not m:
                raise ValueError(f"bad extended part {part!r}")
            if m[1] in windows:
                raise ValueError(f"phase {m[1]} given twice")
            windows[m[1]] = _window(m[2], m[3])
        return Extended(pre=windows.get("PRE"), reg=windows.get("REG"), post=windows.get("POST"))

    raise ValueError("unknown template form")


def parse_template(tpl: str | None) -> ParsedSchedule:
    """
    Parse an hours template into a ParsedSchedule.

    Never raises: malformed input yields no sessions and a diagnostic.
    """
    if not tpl or not tpl.strip():
        return ParsedSchedule(template=tpl, variant=None, diagnostic="empty template")

    text = tpl.strip()
    try:
        variant = _parse_variant(text)
    except ValueError as exc:
        return ParsedSchedule(template=tpl, variant=None, diagnostic=f"{text}: {exc}")

    sessions = tuple(sorted(variant.sessions(), key=lambda s: (s.start_minute, s.end_minute)))
    return ParsedSchedule(template=tpl, variant=variant, sessions=sessions)


# ── Workdays ───────────────────────────────────────────────────────────────────
_DOW = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")
DEFAULT_WORKDAYS = frozenset({0, 1, 2, 3, 4})   # Mon–Fri


def parse_workdays(spec: str | None) -> frozenset[int]:
    """
    Accept "MON-FRI", wrapping ranges like "SUN-THU", or lists like "MON,TUE,FRI".
    Unknown tokens are ignored; nothing usable falls back to Mon–Fri.
    """
    if not spec:
        return DEFAULT_WORKDAYS

    days: set[int] = set()
    for token in re.split(r"[,\s]+", spec.strip().upper()):
        if not token:
            continue
        if "-" in token:
            a, _, b = token.partition("-")
            if a in _DOW and b in _DOW:
                start, stop = _DOW.index(a), _DOW.index(b)
                for i in range(7):
                    d = (start + i) % 7
                    days.add(d)
                    if d == stop:
                        break
        elif token in _DOW:
            days.add(_DOW.index(token))

    return frozenset(days) if days else DEFAULT_WORKDAYS
