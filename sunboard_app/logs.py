from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

LOGGER_NAME = "sunboard"


def setup_logger(log_dir: Path | None, level: str = "INFO") -> logging.Logger:
    """
    Configure the `sunboard` logger tree.

    Child loggers (sunboard.catalogue, sunboard.cli, ...) inherit these
    handlers. Calling this twice does not stack duplicate handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    fmt = logging.Formatter(
        "%(asctime)s  %(levelname)-7s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        # 5 MB per file, keep 3 backups
        fh = logging.handlers.RotatingFileHandler(
            log_dir / "sunboard.log", maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    # Console: configured level and above
    ch = logging.StreamHandler()
    ch.setLevel(getattr(logging, level.upper(), logging.INFO))
    ch.setFormatter(fmt)
    logger.addHandler(ch)
    return logger
