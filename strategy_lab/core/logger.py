"""
Package logging for strategy_lab. Console always, file optional.
Modules log through child loggers (strategy_lab.backtest, strategy_lab.risk, ...).
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "strategy_lab"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _reset_handlers(logger: logging.Logger) -> None:
    # close file handles left by an earlier setup call
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure the package logger. Safe to call again; unknown level names fall back to INFO."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    _reset_handlers(logger)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list = [logging.StreamHandler(sys.stdout)]
    if log_dir and log_file:
        path = Path(log_dir) / log_file
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
