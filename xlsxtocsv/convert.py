from __future__ import annotations

import logging
import math
import subprocess
import sys
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, List

import pandas as pd

from .errors import ConversionError
from .logs import log_output
from .models import ConverterConfig, ConverterEngine, RawTable
from .paths import as_argument


def xlsx2csv_command(source: Path, cfg: ConverterConfig) -> List[str]:
    """Command line for the xlsx2csv converter.

    ``-s`` selects the sheet by 1-based index, ``-i`` skips empty lines and
    ``-d`` sets the field separator.
    """
    prefix = list(cfg.command) if cfg.command else [sys.executable, "-W", "ignore", "-m", "xlsx2csv"]
    cmd = [*prefix, as_argument(source), "-s", str(cfg.sheet)]
    if cfg.ignore_empty:
        cmd.append("-i")
    cmd.extend(["-d", cfg.delimiter])
    return cmd


def _run_xlsx2csv(source: Path, raw_path: Path, cfg: ConverterConfig, logger: logging.Logger) -> None:
    cmd = xlsx2csv_command(source, cfg)
    try:
        with raw_path.open("w", encoding="utf-8") as out:
            result = subprocess.run(cmd, stdout=out, stderr=subprocess.PIPE, text=True)
    except OSError as e:
        raise ConversionError(f"Cannot run converter {cmd[0]}: {e}") from e

    if result.returncode != 0:
        logger.error("Converter exited with status %d", result.returncode)
        log_output(logger, result.stderr, logging.ERROR)
        log_output(logger, raw_path.read_text(encoding="utf-8", errors="replace"), logging.ERROR)
        raise ConversionError(f"XLSX to CSV conversion failed for {source}")
    log_output(logger, result.stderr)


def format_cell(value: Any) -> str:
    """Render a cell the way xlsx2csv does for general and date formats."""
    if value is None or (isinstance(value, float) and math.isnan(value)) or value is pd.NaT:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def _run_pandas(source: Path, raw_path: Path, cfg: ConverterConfig, logger: logging.Logger) -> None:
    try:
        df = pd.read_excel(source, sheet_name=cfg.sheet - 1, header=None, dtype=object, engine="openpyxl")
    except Exception as e:
        logger.error("pandas could not read %s: %s", source, e)
        raise ConversionError(f"XLSX to CSV conversion failed for {source}") from e

    if cfg.ignore_empty:
        df = df.dropna(how="all")
    df = df.apply(lambda col: col.map(format_cell))
    df.to_csv(raw_path, sep=cfg.delimiter, header=False, index=False, lineterminator="\n", encoding="utf-8")


def read_raw(raw_path: Path) -> RawTable:
    try:
        text = raw_path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise ConversionError(f"Converter output is not UTF-8: {e}") from e
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return RawTable(lines=lines)


def convert(source: Path, raw_path: Path, cfg: ConverterConfig, logger: logging.Logger) -> RawTable:
    """Render the configured sheet of ``source`` into ``raw_path`` and load it."""
    logger.info("Converting XLSX to CSV (%s)...", cfg.engine.value)
    if cfg.engine is ConverterEngine.pandas:
        _run_pandas(source, raw_path, cfg, logger)
    else:
        _run_xlsx2csv(source, raw_path, cfg, logger)
    raw = read_raw(raw_path)
    logger.info("Raw conversion done (%d lines)", len(raw.lines))
    return raw
