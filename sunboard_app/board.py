"""
sunboard_app/board.py
One row per exchange: its place on the board (rank, rail) and its live status.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Sequence

import pandas as pd

from .catalogue import ExchangeDescriptor
from .market_schedule import StatusRecord, fmt_countdown, market_status
from .ordering import LEFT, RIGHT, OrderMode, OrderingResult, SortKey, order_exchanges
from .templates import minutes_to_hhmm


@dataclass(frozen=True)
class BoardRow:
    """One exchange card: its place on the board plus its live status."""

    exchange_id: str
    name: str
    rank: int
    rail: str
    rail_position: int
    sort_key: SortKey
    status: StatusRecord

    @property
    def countdown(self) -> str:
        return fmt_countdown(self.status)

    @property
    def local_time(self) -> str:
        if self.status.local_minute is None:
            return "—"
        return minutes_to_hhmm(self.status.local_minute)

    def to_dict(self) -> dict:
        s = self.status
        if isinstance(self.sort_key, datetime):
            key = self.sort_key.isoformat()
        else:
            key = self.sort_key
        return {
            "rank": self.rank,
            "exchange_id": self.exchange_id,
            "name": self.name,
            "rail": self.rail,
            "rail_position": self.rail_position,
            "sort_key": key,
            "is_open": s.is_open,
            "phase": s.phase.value,
            "next_event": s.next_event_label,
            "minutes_until_next_event": s.minutes_until_next_event,
            "countdown": self.countdown,
            "local_time": self.local_time,
            "progress": s.progress,
            "sessions_today": [
                {**asdict(x), "phase": x.phase.value} for x in s.sessions_today
            ],
            "diagnostic": s.diagnostic,
        }


def exchange_status(ex: ExchangeDescriptor, now: datetime) -> StatusRecord:
    return market_status(
        ex.schedule,
        ex.timezone,
        now,
        workdays=ex.workdays,
        exceptions=ex.exceptions,
        half_day_close=ex.half_day_close,
    )


def build_board(
    exchanges: Sequence[ExchangeDescriptor],
    now: datetime,
    mode: OrderMode | str = OrderMode.SUNRISE,
    reference_longitude: float = 0.0,
) -> list[BoardRow]:
    """Rows in global order, each with its rail placement and status at `now`."""
    ordering: OrderingResult = order_exchanges(exchanges, now, mode, reference_longitude)
    by_id = {ex.id: ex for ex in exchanges}

    rows = []
    for placed in ordering.sequence:
        ex = by_id[placed.exchange_id]
        rows.append(
            BoardRow(
                exchange_id=ex.id,
                name=ex.label,
                rank=placed.rank,
                rail=placed.rail,
                rail_position=placed.rail_position,
                sort_key=placed.sort_key,
                status=exchange_status(ex, now),
            )
        )
    return rows


RAIL_TITLES = {
    OrderMode.SUNRISE: ("First to see sunrise", "Later sunrise"),
    OrderMode.LONGITUDE: ("First by longitude", "Later by longitude"),
}


def rail_titles(mode: OrderMode | str) -> tuple[str, str]:
    """Headings for the (left, right) dashboard columns."""
    return RAIL_TITLES[OrderMode(mode)]


def rails(rows: Sequence[BoardRow]) -> tuple[list[BoardRow], list[BoardRow]]:
    """(left, right) in display order."""
    left = sorted((r for r in rows if r.rail == LEFT), key=lambda r: r.rail_position)
    right = sorted((r for r in rows if r.rail == RIGHT), key=lambda r: r.rail_position)
    return left, right


def board_frame(rows: Sequence[BoardRow]) -> pd.DataFrame:
    columns = [
        "rank", "exchange_id", "name", "rail", "rail_position", "sort_key",
        "is_open", "phase", "countdown", "local_time",
    ]
    if not rows:
        return pd.DataFrame(columns=columns).set_index("rank")
    df = pd.DataFrame([r.to_dict() for r in rows])
    return df[columns].set_index("rank")
