from __future__ import annotations

import sys
from dataclasses import dataclass
from logging import Logger
from pathlib import Path
from typing import List, Optional

import click
import typer

from .config import load_config
from .errors import ConfigError, UsageError, XlsxToCsvError
from .logs import build_run_logger
from .models import ConfigModel, InputSpec
from .pipeline import run_pipeline

PROG_NAME = "xlsxtocsv"
USAGE = f"Usage: {PROG_NAME} <file.xlsx> [--scp destination]"

# Newer typer releases ship their own copy of click, so parse errors may come
# from either package.
_TYPER_USAGE_ERROR = next(c for c in typer.BadParameter.__mro__ if c.__name__ == "UsageError")
PARSE_ERRORS = (click.UsageError, _TYPER_USAGE_ERROR)
ABORT_ERRORS = (click.Abort, typer.Abort, KeyboardInterrupt)

app = typer.Typer(
    help="Convert an XLSX workbook to a CSV of its CSV_State=OK rows and publish it.",
    add_completion=False,
)


@dataclass
class RunState:
    config: ConfigModel
    logger: Logger


@app.command()
def convert(
    ctx: typer.Context,
    workbook: str = typer.Argument(..., help="Input .xlsx workbook"),
    scp: Optional[str] = typer.Option(
        None, "--scp", help="scp destination (e.g. user@host:/path/) for the CSV"
    ),
):
    """Convert WORKBOOK to <WORKBOOK>.csv, keeping the header and the OK rows."""
    state: RunState = ctx.obj
    spec = InputSpec(source_path=Path(workbook), remote_destination=scp)
    run_pipeline(spec, state.config, state.logger)


def _parse_failure(exc: Exception) -> UsageError:
    return UsageError(exc.format_message())  # type: ignore[attr-defined]


def _input_first(args: List[str]) -> List[str]:
    """Keep the first argument as the input path even when it starts with '-'."""
    if not args or args[0] == "--help" or not args[0].startswith("-"):
        return args
    return [f"./{args[0]}", *args[1:]]


def main(argv: Optional[List[str]] = None) -> int:
    """Run one conversion and return the process exit code."""
    args = _input_first(list(sys.argv[1:] if argv is None else argv))

    try:
        config = load_config()
    except ConfigError as e:
        build_run_logger(ConfigModel(), to_file=False).error("%s", e)
        return 1

    logger = build_run_logger(config)
    command = typer.main.get_command(app)
    try:
        rv = command.main(
            args=args,
            prog_name=PROG_NAME,
            standalone_mode=False,
            obj=RunState(config=config, logger=logger),
        )
    except PARSE_ERRORS as e:
        logger.error("%s", _parse_failure(e))
        logger.error(USAGE)
        return 1
    except ABORT_ERRORS:
        logger.error("Interrupted")
        return 1
    except XlsxToCsvError as e:
        logger.error("%s", e)
        return 1

    # --help returns its exit code, a normal run returns None
    return rv if isinstance(rv, int) else 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    run()
