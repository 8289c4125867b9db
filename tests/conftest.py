"""
Pytest fixtures for the exchange board.

Every test injects a fixed instant; nothing here reads the wall clock.
"""

import logging
from pathlib import Path

import pytest

from sunboard_app.catalogue import ExchangeDescriptor

SAMPLE_CATALOGUE = Path(__file__).resolve().parents[1] / "data" / "exchanges.yaml"


@pytest.fixture(autouse=True)
def _reset_sunboard_logging():
    """Drop handlers installed by setup_logger so captured streams don't leak between tests."""
    yield
    logger = logging.getLogger("sunboard")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Clean SUNBOARD_* environment with logs redirected into tmp_path."""
    for name in (
        "SUNBOARD_CATALOGUE",
        "SUNBOARD_ORDER_MODE",
        "SUNBOARD_REFERENCE_LONGITUDE",
        "SUNBOARD_REFRESH_SECONDS",
        "SUNBOARD_LOG_LEVEL",
        "SUNBOARD_STRICT_CATALOGUE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SUNBOARD_LOG_DIR", str(tmp_path / "logs"))
    return monkeypatch


@pytest.fixture
def sample_catalogue_path() -> Path:
    return SAMPLE_CATALOGUE


@pytest.fixture
def make_exchange():
    """Factory for ExchangeDescriptor with sensible New York defaults."""

    def _make(
        id: str = "nyse",
        latitude: float = 40.7069,
        longitude: float = -74.0113,
        timezone: str = "America/New_York",
        schedule_template: str = "CONTINUOUS_09:30_16:00",
        **kwargs,
    ) -> ExchangeDescriptor:
        return ExchangeDescriptor(
            id=id,
            timezone=timezone,
            latitude=latitude,
            longitude=longitude,
            schedule_template=schedule_template,
            **kwargs,
        )

    return _make
