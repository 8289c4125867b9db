"""
Tests for the assembled board: ordering plus live status per exchange.
"""

import json
from datetime import datetime, timezone

import pytest

from sunboard_app.board import board_frame, build_board, exchange_status, rail_titles, rails
from sunboard_app.catalogue import load_catalogue
from sunboard_app.ordering import LEFT, RIGHT
from sunboard_app.templates import Phase

# Monday 15 January 2024, 12:00 Eastern / 17:00 London / 02:00 Tuesday Tokyo
NOON_NY = datetime(2024, 1, 15, 17, 0, tzinfo=timezone.utc)


@pytest.fixture
def exchanges(sample_catalogue_path):
    return load_catalogue(sample_catalogue_path).exchanges


@pytest.fixture
def rows(exchanges):
    return build_board(exchanges, NOON_NY)


def _row(rows, exchange_id):
    return next(r for r in rows if r.exchange_id == exchange_id)


class TestStatuses:
    def test_nyse_regular_session(self, rows):
        nyse = _row(rows, "nyse").status
        assert nyse.is_open
        assert nyse.phase == Phase.REG
        assert (nyse.next_event_label, nyse.minutes_until_next_event) == ("Closes", 240)

    def test_lse_after_close_counts_to_tomorrow(self, rows):
        lse = _row(rows, "lse").status
        assert not lse.is_open
        # 17:00 local, reopens 08:00 tomorrow
        assert (lse.next_event_label, lse.minutes_until_next_event) == ("Opens", 900)

    def test_tokyo_before_open(self, rows):
        tse = _row(rows, "tse").status
        assert tse.phase == Phase.CLOSED
        assert (tse.next_event_label, tse.minutes_until_next_event) == ("Opens", 420)

    def test_row_display_helpers(self, rows):
        nyse = _row(rows, "nyse")
        assert nyse.countdown == "Closes in 4h 00m"
        assert nyse.local_time == "12:00"
        assert nyse.name == "New York Stock Exchange"

    def test_exchange_status_uses_descriptor_exceptions(self, exchanges):
        nyse = next(ex for ex in exchanges if ex.id == "nyse")
        # 25 December 2025, 12:00 Eastern
        status = exchange_status(nyse, datetime(2025, 12, 25, 17, 0, tzinfo=timezone.utc))
        assert status.is_open is False
        assert status.next_event_label is None


class TestPlacement:
    def test_ranks_are_dense(self, rows):
        assert [r.rank for r in rows] == list(range(len(rows)))

    def test_rails_rebuild_global_order(self, rows):
        left, right = rails(rows)
        assert len(left) == 9 and len(right) == 9
        assert all(r.rail == LEFT for r in left)
        assert all(r.rail == RIGHT for r in right)
        assert [r.exchange_id for r in left + right[::-1]] == [r.exchange_id for r in rows]

    def test_longitude_mode_starts_in_the_east(self, exchanges):
        rows = build_board(exchanges, NOON_NY, mode="longitude")
        assert rows[0].exchange_id == "asx"
        assert rows[-1].exchange_id == "tsx"

    def test_same_instant_same_board(self, exchanges):
        assert build_board(exchanges, NOON_NY) == build_board(exchanges, NOON_NY)

    def test_rail_titles_follow_mode(self):
        assert rail_titles("sunrise") == ("First to see sunrise", "Later sunrise")
        assert rail_titles("longitude") == ("First by longitude", "Later by longitude")
        for title in (*rail_titles("sunrise"), *rail_titles("longitude")):
            assert "East" not in title and "West" not in title

    def test_sunrise_rails_not_split_by_hemisphere(self, rows):
        # Tokyo's sunrise wraps into the same UTC day, so it ranks after London
        ranks = {r.exchange_id: r.rank for r in rows}
        assert ranks["tse"] > ranks["lse"]

    def test_empty_catalogue(self):
        assert build_board([], NOON_NY) == []
        assert rails([]) == ([], [])


class TestSerialisation:
    def test_to_dict_is_json_ready(self, rows):
        payload = json.dumps([r.to_dict() for r in rows])
        decoded = json.loads(payload)
        nyse = next(d for d in decoded if d["exchange_id"] == "nyse")
        assert nyse["phase"] == "REG"
        assert nyse["sessions_today"][0] == {"start_minute": 240, "end_minute": 570, "phase": "PRE"}
        assert isinstance(nyse["sort_key"], str)

    def test_board_frame(self, rows):
        df = board_frame(rows)
        assert df.index.name == "rank"
        assert list(df.columns) == [
            "exchange_id", "name", "rail", "rail_position", "sort_key",
            "is_open", "phase", "countdown", "local_time",
        ]
        assert len(df) == 18
        assert df.loc[0, "exchange_id"] == rows[0].exchange_id

    def test_board_frame_empty(self):
        df = board_frame([])
        assert df.empty
        assert df.index.name == "rank"
