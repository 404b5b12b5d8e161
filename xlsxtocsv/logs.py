"""xlsxtocsv.logs

Run log: one file per calendar day under the configured log directory,
duplicated to stdout. Lines look like ``[2024-01-31 08:00:00] [INFO] message``.
"""

from __future__ import annotations

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from .models import ConfigModel

LOGGER_NAME = "xlsxtocsv"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVEL_NAMES = {"WARNING": "WARN", "CRITICAL": "ERROR"}


class RunLogFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("[%(asctime)s] [%(levelname)s] %(message)s", datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        record.levelname = _LEVEL_NAMES.get(original, original)
        try:
            return super().format(record)
        finally:
            record.levelname = original


def log_file_path(config: ConfigModel, day: Optional[date] = None) -> Path:
    day = day or date.today()
    return config.log_dir / day.strftime(config.log_file_pattern)


def build_run_logger(config: ConfigModel, day: Optional[date] = None, to_file: bool = True) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    # A previous run in the same process may have left handlers behind
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    fmt = RunLogFormatter()
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    logger.addHandler(console)

    if not to_file:
        return logger

    path = log_file_path(config, day)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(path), mode="a", encoding="utf-8")
    except OSError as e:
        logger.warning("Cannot open log file %s (%s), logging to stdout only", path, e)
        return logger

    file_handler.setFormatter(fmt)
    logger.addHandler(file_handler)
    return logger


def log_output(logger: logging.Logger, text: Optional[str], level: int = logging.INFO) -> None:
    """Log each non-blank line of an external tool's output."""
    if not text:
        return
    for line in text.splitlines():
        if line.strip():
            logger.log(level, "  %s", line)
