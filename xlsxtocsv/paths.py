from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .errors import FormatError, NotFoundError
from .models import INPUT_SUFFIX, InputSpec


def validate_input(spec: InputSpec) -> None:
    p = spec.source_path
    if not p.is_file():
        raise NotFoundError(f"File not found: {p}")
    if not str(p).endswith(INPUT_SUFFIX):
        raise FormatError(f"Input must be a {INPUT_SUFFIX} file: {p}")


@contextmanager
def scratch_file(directory: Optional[Path] = None, suffix: str = ".tmp") -> Iterator[Path]:
    """Yield a path to a fresh temporary file, removed on exit whatever happens."""
    fd, name = tempfile.mkstemp(suffix=suffix, prefix="xlsxtocsv_", dir=directory)
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


def as_argument(path: Path) -> str:
    """Render ``path`` for a command line so it is never read as an option."""
    text = str(path)
    return f"./{text}" if text.startswith("-") else text
