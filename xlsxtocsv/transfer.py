from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List

from .errors import TransferWarning
from .logs import log_output
from .paths import as_argument


def scp_command(output_path: Path, destination: str, scp: str = "scp") -> List[str]:
    return [scp, as_argument(output_path), destination]


def copy_to_remote(output_path: Path, destination: str, logger: logging.Logger, scp: str = "scp") -> None:
    """Copy the produced CSV with scp. Raises TransferWarning on failure."""
    logger.info("SCP upload to %s...", destination)
    cmd = scp_command(output_path, destination, scp)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise TransferWarning(f"Cannot run {scp}: {e}") from e

    log_output(logger, result.stdout)
    log_output(logger, result.stderr)
    if result.returncode != 0:
        raise TransferWarning(f"scp exited with status {result.returncode}")
    logger.info("SCP upload done")
