"""
sunboard_app/ordering.py
Global exchange ordering and the two-rail split.

Exchanges are ranked either by today's sunrise instant (earliest first, no
sunrise last) or by longitude (east first). Ties always fall back to the
exchange id, so the same catalogue and instant give the same board.

The ordered sequence is then cut into two rails: the first ceil(n/2) go on
the left in order, the rest go on the right in reverse, so both columns meet
in the middle of the page.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol, Sequence, Union

from .solar import compute_sunrise_utc

LEFT = "left"
RIGHT = "right"

SortKey = Union[datetime, float, None]


class OrderMode(Enum):
    SUNRISE = "sunrise"
    LONGITUDE = "longitude"


class Located(Protocol):
    id: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class SortedExchange:
    exchange_id: str
    sort_key: SortKey
    rank: int
    rail: str = LEFT
    rail_position: int = 0


@dataclass(frozen=True)
class OrderingResult:
    sequence: tuple[SortedExchange, ...]
    left: tuple[SortedExchange, ...]
    right: tuple[SortedExchange, ...]

    def ids(self) -> list[str]:
        return [s.exchange_id for s in self.sequence]


# ── Geography ──────────────────────────────────────────────────────────────────
def normalize_longitude(lng: float) -> float:
    """Fold any longitude into [-180, 180]."""
    out = lng
    while out > 180.0:
        out -= 360.0
    while out < -180.0:
        out += 360.0
    return out


def longitude_diff(reference_lng: float, target_lng: float) -> float:
    """Signed degrees east (+) or west (-) of the reference, across the antimeridian."""
    diff = normalize_longitude(target_lng) - normalize_longitude(reference_lng)
    if diff > 180.0:
        diff -= 360.0
    if diff <= -180.0:
        diff += 360.0
    return diff


# ── Ordering ───────────────────────────────────────────────────────────────────
def _utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def _sunrise_keys(exchanges: Sequence[Located], now: datetime) -> list[tuple[tuple, SortKey, str]]:
    today = _utc(now).date()
    keyed = []
    for ex in exchanges:
        sunrise = compute_sunrise_utc(today, ex.latitude, ex.longitude)
        # (missing?, instant, id): no-sunrise entries after every real sunrise
        rank_key = (sunrise is None, sunrise or datetime.min.replace(tzinfo=timezone.utc), ex.id)
        keyed.append((rank_key, sunrise, ex.id))
    return keyed


def _longitude_keys(exchanges: Sequence[Located], reference_longitude: float) -> list[tuple[tuple, SortKey, str]]:
    keyed = []
    for ex in exchanges:
        key = longitude_diff(reference_longitude, ex.longitude)
        keyed.append(((-key, ex.id), key, ex.id))
    return keyed


def split_rails(sequence: Sequence[SortedExchange]) -> tuple[tuple[SortedExchange, ...], tuple[SortedExchange, ...]]:
    """
    Left rail = first ceil(n/2) in order; right rail = the rest, reversed.

    left + reversed(right) always reproduces `sequence`.
    """
    half = math.ceil(len(sequence) / 2)
    left = tuple(replace(s, rail=LEFT, rail_position=i) for i, s in enumerate(sequence[:half]))
    right_slice = list(sequence[half:])
    right_slice.reverse()
    right = tuple(replace(s, rail=RIGHT, rail_position=i) for i, s in enumerate(right_slice))
    return left, right


def merge_rails(left: Sequence[SortedExchange], right: Sequence[SortedExchange]) -> list[SortedExchange]:
    """Inverse of split_rails: the global order back from the two display columns."""
    return [*left, *reversed(right)]


def order_exchanges(
    exchanges: Sequence[Located],
    now: datetime,
    mode: OrderMode | str = OrderMode.SUNRISE,
    reference_longitude: float = 0.0,
) -> OrderingResult:
    """
    Rank every exchange and split the ranking into rails.

    `now` only selects the UTC calendar day for sunrise ordering; longitude
    ordering ignores it.
    """
    mode = OrderMode(mode)
    if mode is OrderMode.SUNRISE:
        keyed = _sunrise_keys(exchanges, now)
    else:
        keyed = _longitude_keys(exchanges, reference_longitude)

    keyed.sort(key=lambda item: item[0])
    ranked = [SortedExchange(exchange_id=ex_id, sort_key=key, rank=i) for i, (_, key, ex_id) in enumerate(keyed)]

    left, right = split_rails(ranked)
    by_rank = {s.rank: s for s in (*left, *right)}
    sequence = tuple(by_rank[s.rank] for s in ranked)
    return OrderingResult(sequence=sequence, left=left, right=right)
