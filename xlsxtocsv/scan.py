"""Nextcloud re-index of the folder that received the CSV.

The output path decides the scan: files under a group folder
(``.../__groupfolders/<id>/files/<path>``) get ``occ groupfolders:scan``,
files in a user's space (``.../data/<user>/files/<path>``) get
``occ files:scan``. Anything else is left alone.
"""

from __future__ import annotations

import logging
import re
import subprocess
from typing import List

from .errors import IndexWarning
from .logs import log_output
from .models import ConfigModel, GroupFolderTarget, ScanTarget, Unrecognized, UserTarget

GROUPFOLDER_RE = re.compile(r"/__groupfolders/([0-9]+)/files/(.*)")
USER_FILES_RE = re.compile(r"/data/([^/]+)/files/(.*)")


def classify_output_path(path: str) -> ScanTarget:
    m = GROUPFOLDER_RE.search(path)
    if m:
        return GroupFolderTarget(folder_id=m.group(1), rel_path=m.group(2))
    m = USER_FILES_RE.search(path)
    if m:
        return UserTarget(user_id=m.group(1), rel_path=m.group(2))
    return Unrecognized(path=path)


def scan_kind(target: ScanTarget) -> str:
    if isinstance(target, GroupFolderTarget):
        return "groupfolder"
    if isinstance(target, UserTarget):
        return "user"
    return "skipped"


def build_scan_command(target: ScanTarget, config: ConfigModel) -> List[str]:
    if isinstance(target, GroupFolderTarget):
        return [*config.occ_command, "groupfolders:scan", target.folder_id, f"--path={target.rel_path}"]
    if isinstance(target, UserTarget):
        return [*config.occ_command, "files:scan", f"--path={target.scan_path}"]
    raise ValueError(f"No scan command for unrecognized path {target.path}")


def trigger_scan(target: ScanTarget, config: ConfigModel, logger: logging.Logger) -> bool:
    """Run the occ scan for ``target``.

    Returns False when the path is not recognized and nothing was run.
    Raises IndexWarning when occ fails.
    """
    if isinstance(target, Unrecognized):
        logger.warning("Path not recognized, no scan performed: %s", target.path)
        return False

    if isinstance(target, GroupFolderTarget):
        logger.info("GroupFolder detected: ID=%s, path=%s", target.folder_id, target.rel_path)
    else:
        logger.info("User space detected: %s", target.user_id)

    cmd = build_scan_command(target, config)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise IndexWarning(f"Cannot run {cmd[0]}: {e}") from e

    log_output(logger, result.stdout)
    log_output(logger, result.stderr)
    if result.returncode != 0:
        raise IndexWarning(f"{scan_kind(target)} scan failed with status {result.returncode}")
    logger.info("%s scan done", "GroupFolder" if isinstance(target, GroupFolderTarget) else "User")
    return True
