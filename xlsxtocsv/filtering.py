from __future__ import annotations

import os
from pathlib import Path

from .errors import ColumnNotFoundError, OutputWriteError
from .models import FilteredTable, RawTable
from .paths import scratch_file

STATE_COLUMN = "CSV_State"
ACCEPTED_STATE = "OK"
DELIMITER = ";"


def locate_column(header: str, name: str = STATE_COLUMN, delimiter: str = DELIMITER) -> int:
    """Return the 1-based position of ``name`` in the header line.

    Matching is exact: case-sensitive and without trimming.
    """
    for idx, field in enumerate(header.split(delimiter), start=1):
        if field == name:
            return idx
    raise ColumnNotFoundError(f"Column {name} not found in header")


def row_matches(line: str, column_index: int, accepted: str = ACCEPTED_STATE, delimiter: str = DELIMITER) -> bool:
    fields = line.split(delimiter)
    # Ragged rows without a value at the index never match
    if column_index > len(fields):
        return False
    return fields[column_index - 1] == accepted


def filter_rows(
    raw: RawTable,
    column_index: int,
    accepted: str = ACCEPTED_STATE,
    delimiter: str = DELIMITER,
) -> FilteredTable:
    rows = [line for line in raw.rows if row_matches(line, column_index, accepted, delimiter)]
    return FilteredTable(header=raw.header, column_index=column_index, total=len(raw.rows), rows=rows)


def write_filtered(table: FilteredTable, output_path: Path) -> None:
    """Write the table to ``output_path`` atomically.

    The text goes to a temporary file next to the destination which then
    replaces it, so a failed write never leaves a partial CSV behind.
    """
    try:
        with scratch_file(directory=output_path.parent, suffix=".csv.part") as tmp:
            with tmp.open("w", encoding="utf-8", newline="") as out:
                out.write(table.to_text())
            os.replace(tmp, output_path)
    except OSError as e:
        raise OutputWriteError(f"Cannot write {output_path}: {e}") from e
