"""
sunboard_app/catalogue.py
Reads the exchange catalogue (YAML, JSON or CSV) into immutable descriptors.

Each record is validated on its own: a bad record is rejected and logged, the
rest of the board still loads. Hours templates are compiled here once so the
per-tick evaluation never re-parses strings.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd
import yaml

from .errors import CatalogueError
from .market_schedule import ExceptionRule
from .templates import ParsedSchedule, parse_template

log = logging.getLogger("sunboard.catalogue")


@dataclass(frozen=True)
class ExchangeDescriptor:
    id: str
    timezone: str
    latitude: float
    longitude: float
    schedule_template: str
    workdays: str | None = None
    exceptions: tuple[ExceptionRule, ...] = ()
    name: str = ""
    city: str = ""
    half_day_close: str | None = None
    schedule: ParsedSchedule = field(default=None, compare=False, repr=False)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.schedule is None:
            object.__setattr__(self, "schedule", parse_template(self.schedule_template))

    @property
    def label(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class Rejection:
    index: int
    exchange_id: str | None
    reason: str


@dataclass(frozen=True)
class CatalogueLoad:
    exchanges: tuple[ExchangeDescriptor, ...]
    rejected: tuple[Rejection, ...] = ()


class _RecordError(ValueError):
    pass


# ── Field helpers ──────────────────────────────────────────────────────────────
def _pick(raw: dict[str, Any], *keys: str) -> Any:
    for k in keys:
        v = raw.get(k)
        if v is None:
            continue
        if isinstance(v, float) and pd.isna(v):
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None


def _text(v: Any) -> str | None:
    return None if v is None else str(v).strip()


def _coordinate(raw: dict[str, Any], keys: tuple[str, ...], limit: float) -> float:
    v = _pick(raw, *keys)
    if v is None:
        raise _RecordError(f"missing {keys[0]}")
    try:
        value = float(v)
    except (TypeError, ValueError) as exc:
        raise _RecordError(f"{keys[0]} is not a number: {v!r}") from exc
    if pd.isna(value) or not -limit <= value <= limit:
        raise _RecordError(f"{keys[0]} {value} outside [-{limit:g}, {limit:g}]")
    return value


def _clock(raw: dict[str, Any], *keys: str) -> str | None:
    v = _pick(raw, *keys)
    # YAML 1.1 reads an unquoted 13:00 as the base-60 integer 780
    if isinstance(v, int) and not isinstance(v, bool):
        h, m = divmod(v, 60)
        return f"{h:02d}:{m:02d}"
    return _text(v)


def _truthy(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "y")
    return bool(v)


def _exception(raw: dict[str, Any], exchange_id: str) -> ExceptionRule:
    d = _pick(raw, "date")
    if isinstance(d, date):
        day = d
    else:
        try:
            day = date.fromisoformat(str(d))
        except (TypeError, ValueError) as exc:
            raise _RecordError(f"exception date {d!r} is not YYYY-MM-DD") from exc

    rule = ExceptionRule(
        date=day,
        closed=_truthy(raw.get("closed", False)),
        override_open=_clock(raw, "override_open", "open"),
        override_close=_clock(raw, "override_close", "close"),
        half_day_close=_clock(raw, "half_day_close", "halfDayClose"),
    )
    if not rule.closed and bool(rule.override_open) != bool(rule.override_close):
        log.warning(f"{exchange_id}: exception on {day} has only one override time — ignored")
    return rule


def _exceptions(value: Any, exchange_id: str) -> tuple[ExceptionRule, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise _RecordError(f"exceptions column is not JSON: {exc}") from exc
    if not isinstance(value, list):
        raise _RecordError("exceptions must be a list")

    rules = []
    seen: set[date] = set()
    for item in value:
        if not isinstance(item, dict):
            raise _RecordError("each exception must be a mapping")
        rule = _exception(item, exchange_id)
        if rule.date in seen:
            log.warning(f"{exchange_id}: more than one exception for {rule.date} — first one wins")
        seen.add(rule.date)
        rules.append(rule)
    return tuple(rules)


def _descriptor(raw: dict[str, Any]) -> ExchangeDescriptor:
    exchange_id = _text(_pick(raw, "id", "exchange_id"))
    if not exchange_id:
        raise _RecordError("missing id")

    tz = _text(_pick(raw, "timezone", "tz"))
    if not tz:
        raise _RecordError("missing timezone")
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise _RecordError(f"unknown timezone {tz!r}") from exc

    return ExchangeDescriptor(
        id=exchange_id,
        timezone=tz,
        latitude=_coordinate(raw, ("latitude", "lat"), 90.0),
        longitude=_coordinate(raw, ("longitude", "lon", "lng"), 180.0),
        schedule_template=_text(_pick(raw, "schedule_template", "hours_template", "template")) or "",
        workdays=_text(_pick(raw, "workdays")),
        exceptions=_exceptions(_pick(raw, "exceptions"), exchange_id),
        name=_text(_pick(raw, "name")) or "",
        city=_text(_pick(raw, "city")) or "",
        half_day_close=_clock(raw, "half_day_close"),
    )


# ── Loading ────────────────────────────────────────────────────────────────────
def _read_records(path: Path) -> list[dict[str, Any]]:
    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
            return df.to_dict(orient="records")
        text = path.read_text(encoding="utf-8")
        if suffix == ".json":
            doc = json.loads(text)
        elif suffix in (".yaml", ".yml"):
            doc = yaml.safe_load(text)
        else:
            raise CatalogueError(f"unsupported catalogue format: {path.name}")
    except CatalogueError:
        raise
    except (OSError, ValueError, yaml.YAMLError, pd.errors.ParserError) as exc:
        raise CatalogueError(f"cannot read catalogue {path}: {exc}") from exc

    if isinstance(doc, dict):
        doc = doc.get("exchanges")
    if not isinstance(doc, list):
        raise CatalogueError(f"{path}: expected a list of exchanges")
    return doc


def build_catalogue(records: Iterable[Any], strict: bool = False) -> CatalogueLoad:
    """Validate raw records (dicts) into a CatalogueLoad."""
    exchanges: list[ExchangeDescriptor] = []
    rejected: list[Rejection] = []
    ids: set[str] = set()

    for i, raw in enumerate(records):
        if not isinstance(raw, dict):
            rejected.append(Rejection(i, None, "record is not a mapping"))
            continue
        raw_id = _text(_pick(raw, "id", "exchange_id"))
        try:
            ex = _descriptor(raw)
            if ex.id in ids:
                raise _RecordError(f"duplicate id {ex.id!r}")
        except _RecordError as exc:
            rejected.append(Rejection(i, raw_id, str(exc)))
            continue

        if not ex.schedule.ok:
            log.warning(f"{ex.id}: bad hours template — always closed ({ex.schedule.diagnostic})")

        ids.add(ex.id)
        exchanges.append(ex)

    for r in rejected:
        log.warning(f"rejected catalogue record #{r.index} ({r.exchange_id or '?'}): {r.reason}")

    if strict and rejected:
        raise CatalogueError(f"{len(rejected)} catalogue record(s) rejected")

    log.info(f"catalogue: {len(exchanges)} exchanges loaded, {len(rejected)} rejected")
    return CatalogueLoad(exchanges=tuple(exchanges), rejected=tuple(rejected))


def load_catalogue(path: str | Path, strict: bool = False) -> CatalogueLoad:
    """
    Load and validate a catalogue file.

    Raises CatalogueError when the file itself is unusable, or in strict
    mode when any record was rejected.
    """
    p = Path(path)
    if not p.exists():
        raise CatalogueError(f"catalogue not found: {p}")
    return build_catalogue(_read_records(p), strict=strict)
