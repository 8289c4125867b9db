from __future__ import annotations


class SunboardError(Exception):
    """Base class for errors raised outside the pure engine functions."""


class CatalogueError(SunboardError):
    """The exchange catalogue could not be read, parsed or (in strict mode) validated."""


class ConfigError(SunboardError):
    """An environment setting has a value that cannot be used."""
