"""
Tests for environment-driven configuration.
"""

from pathlib import Path

import pytest

from sunboard_app.config import load_config
from sunboard_app.errors import ConfigError


class TestDefaults:
    def test_defaults(self, env, tmp_path):
        cfg = load_config()
        assert cfg.order_mode == "sunrise"
        assert cfg.reference_longitude == 0.0
        assert cfg.refresh_seconds == 30
        assert cfg.strict_catalogue is False
        assert cfg.log_level == "INFO"
        assert cfg.log_dir == tmp_path / "logs"
        assert cfg.catalogue_path.name == "exchanges.yaml"

    def test_overrides(self, env):
        env.setenv("SUNBOARD_CATALOGUE", "/tmp/other.json")
        env.setenv("SUNBOARD_ORDER_MODE", " Longitude ")
        env.setenv("SUNBOARD_REFERENCE_LONGITUDE", "139.7")
        env.setenv("SUNBOARD_REFRESH_SECONDS", "5")
        env.setenv("SUNBOARD_LOG_LEVEL", "debug")
        env.setenv("SUNBOARD_STRICT_CATALOGUE", "true")
        cfg = load_config()
        assert cfg.catalogue_path == Path("/tmp/other.json")
        assert cfg.order_mode == "longitude"
        assert cfg.reference_longitude == 139.7
        assert cfg.refresh_seconds == 5
        assert cfg.log_level == "DEBUG"
        assert cfg.strict_catalogue is True

    def test_config_is_frozen(self, env):
        cfg = load_config()
        with pytest.raises(AttributeError):
            cfg.order_mode = "longitude"


class TestInvalidValues:
    @pytest.mark.parametrize(
        "name, value",
        [
            ("SUNBOARD_ORDER_MODE", "alphabetical"),
            ("SUNBOARD_REFERENCE_LONGITUDE", "east"),
            ("SUNBOARD_REFERENCE_LONGITUDE", "200"),
            ("SUNBOARD_REFRESH_SECONDS", "soon"),
            ("SUNBOARD_REFRESH_SECONDS", "0"),
        ],
    )
    def test_rejected(self, env, name, value):
        env.setenv(name, value)
        with pytest.raises(ConfigError, match=name):
            load_config()
