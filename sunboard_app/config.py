from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

ORDER_MODES = ("sunrise", "longitude")


@dataclass(frozen=True)
class AppConfig:
    catalogue_path: Path
    log_dir: Path
    log_level: str = "INFO"
    # Board ordering
    order_mode: str = "sunrise"
    reference_longitude: float = 0.0
    # Dashboard refresh cadence; the engine itself never schedules anything
    refresh_seconds: int = 30
    strict_catalogue: bool = False


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def load_config() -> AppConfig:
    from dotenv import load_dotenv
    load_dotenv()
    root = Path(__file__).resolve().parents[1]
    default_catalogue = root / "data" / "exchanges.yaml"

    order_mode = os.getenv("SUNBOARD_ORDER_MODE", "sunrise").strip().lower()
    if order_mode not in ORDER_MODES:
        raise ConfigError(f"SUNBOARD_ORDER_MODE must be one of {ORDER_MODES}, got {order_mode!r}")

    reference_longitude = _float_env("SUNBOARD_REFERENCE_LONGITUDE", "0")
    if not -180.0 <= reference_longitude <= 180.0:
        raise ConfigError(f"SUNBOARD_REFERENCE_LONGITUDE out of range: {reference_longitude}")

    refresh_seconds = _int_env("SUNBOARD_REFRESH_SECONDS", "30")
    if refresh_seconds < 1:
        raise ConfigError("SUNBOARD_REFRESH_SECONDS must be at least 1")

    return AppConfig(
        catalogue_path=Path(os.getenv("SUNBOARD_CATALOGUE", default_catalogue)),
        log_dir=Path(os.getenv("SUNBOARD_LOG_DIR", root / "data" / "logs")),
        log_level=os.getenv("SUNBOARD_LOG_LEVEL", "INFO").upper(),
        order_mode=order_mode,
        reference_longitude=reference_longitude,
        refresh_seconds=refresh_seconds,
        strict_catalogue=os.getenv("SUNBOARD_STRICT_CATALOGUE", "0").strip().lower() in ("1", "true", "yes"),
    )
