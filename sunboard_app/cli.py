from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime, timezone

import pandas as pd

from .board import board_frame, build_board
from .catalogue import CatalogueLoad, load_catalogue
from .config import load_config
from .errors import CatalogueError, ConfigError
from .logs import setup_logger
from .solar import compute_sunrise_utc

log = logging.getLogger("sunboard.cli")

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_BAD_CATALOGUE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sunboard", description="World exchange board: status and sunrise ordering")
    parser.add_argument("--log-level", default=None, help="Console log level (default from SUNBOARD_LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_board = sub.add_parser("board", help="Print every exchange's rank, rail and status")
    p_board.add_argument("--catalogue", default=None, help="Catalogue file (YAML, JSON or CSV)")
    p_board.add_argument("--at", default=None, help="ISO-8601 instant to evaluate (default: now)")
    p_board.add_argument("--mode", choices=["sunrise", "longitude"], default=None)
    p_board.add_argument("--reference-longitude", type=float, default=None)
    p_board.add_argument("--json", action="store_true", help="Emit JSON instead of a table")

    p_validate = sub.add_parser("validate", help="Load the catalogue and report problems")
    p_validate.add_argument("--catalogue", default=None)
    p_validate.add_argument("--strict", action="store_true", help="Non-zero exit when any record is rejected")

    p_sun = sub.add_parser("sunrise", help="UTC sunrise for a location")
    p_sun.add_argument("--lat", type=float, required=True)
    p_sun.add_argument("--lon", type=float, required=True)
    p_sun.add_argument("--date", default=None, help="YYYY-MM-DD (default: today, UTC)")

    return parser


def parse_instant(text: str | None) -> datetime:
    """ISO-8601 → aware datetime; a trailing Z and naive values are read as UTC."""
    if not text:
        return datetime.now(timezone.utc)
    value = datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def cmd_board(load: CatalogueLoad, now: datetime, mode: str, reference_longitude: float, as_json: bool) -> int:
    rows = build_board(load.exchanges, now, mode=mode, reference_longitude=reference_longitude)
    if as_json:
        payload = {
            "at": now.isoformat(),
            "mode": mode,
            "exchanges": [r.to_dict() for r in rows],
        }
        print(json.dumps(payload, indent=2, default=str))
        return EXIT_OK

    print(f"Board at {now.isoformat()}  |  ordered by {mode}  |  {len(rows)} exchanges")
    with pd.option_context("display.max_rows", None, "display.width", 200):
        print(board_frame(rows).to_string())
    return EXIT_OK


def cmd_validate(load: CatalogueLoad, strict: bool) -> int:
    bad_templates = [ex for ex in load.exchanges if not ex.schedule.ok]
    print(f"exchanges: {len(load.exchanges)}")
    print(f"rejected : {len(load.rejected)}")
    for r in load.rejected:
        print(f"  #{r.index} {r.exchange_id or '?'}: {r.reason}")
    print(f"always-closed (bad template): {len(bad_templates)}")
    for ex in bad_templates:
        print(f"  {ex.id}: {ex.schedule.diagnostic}")
    if strict and load.rejected:
        return EXIT_REJECTED
    return EXIT_OK


def cmd_sunrise(lat: float, lon: float, day: date) -> int:
    sunrise = compute_sunrise_utc(day, lat, lon)
    print(sunrise.isoformat() if sunrise else "none")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = load_config()
    except ConfigError as exc:
        print(f"config error: {exc}", file=sys.stderr)
        return EXIT_BAD_CATALOGUE

    setup_logger(cfg.log_dir, args.log_level or cfg.log_level)

    if args.command == "sunrise":
        if args.date:
            try:
                day = date.fromisoformat(args.date)
            except ValueError:
                parser.error(f"--date must be YYYY-MM-DD, got {args.date!r}")
        else:
            day = datetime.now(timezone.utc).date()
        if not (-90 <= args.lat <= 90 and -180 <= args.lon <= 180):
            parser.error("latitude must be in [-90, 90] and longitude in [-180, 180]")
        return cmd_sunrise(args.lat, args.lon, day)

    path = args.catalogue or cfg.catalogue_path
    try:
        load = load_catalogue(path)
    except CatalogueError as exc:
        log.error(f"catalogue failed to load: {exc}")
        return EXIT_BAD_CATALOGUE

    if args.command == "validate":
        return cmd_validate(load, strict=args.strict or cfg.strict_catalogue)

    try:
        now = parse_instant(args.at)
    except ValueError:
        parser.error(f"--at must be an ISO-8601 instant, got {args.at!r}")
    mode = args.mode or cfg.order_mode
    ref = cfg.reference_longitude if args.reference_longitude is None else args.reference_longitude
    return cmd_board(load, now, mode, ref, args.json)


if __name__ == "__main__":
    sys.exit(main())
