from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

INPUT_SUFFIX = ".xlsx"
OUTPUT_SUFFIX = ".csv"


class InputSpec(BaseModel):
    source_path: Path
    remote_destination: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def output_path(self) -> Path:
        name = str(self.source_path)
        if name.endswith(INPUT_SUFFIX):
            name = name[: -len(INPUT_SUFFIX)]
        return Path(name + OUTPUT_SUFFIX)


class ConverterEngine(str, Enum):
    xlsx2csv = "xlsx2csv"
    pandas = "pandas"


class ConverterConfig(BaseModel):
    engine: ConverterEngine = ConverterEngine.xlsx2csv
    # Command prefix; the input path and options are appended
    command: Optional[List[str]] = None
    sheet: int = 1
    delimiter: str = ";"
    ignore_empty: bool = True

    @field_validator("command", mode="before")
    @classmethod
    def _split_command(cls, v: Optional[Union[str, List[str]]]) -> Optional[List[str]]:
        if isinstance(v, str):
            return shlex.split(v)
        return v

    @field_validator("sheet")
    @classmethod
    def _sheet_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("sheet must be 1 or greater")
        return v

    @field_validator("delimiter")
    @classmethod
    def _single_char(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError("delimiter must be a single character")
        return v


class ConfigModel(BaseModel):
    log_dir: Path = Path("/srv/nextcloud/scripts/logs")
    log_file_pattern: str = "convert_xlstocsv_%Y%m%d.log"

    php: str = "/usr/bin/php"
    nextcloud_root: Path = Path("/srv/nextcloud/html")
    scp: str = "scp"

    state_column: str = "CSV_State"
    accepted_state: str = "OK"

    converter: ConverterConfig = Field(default_factory=ConverterConfig)

    model_config = {"extra": "forbid"}

    @property
    def occ_command(self) -> List[str]:
        return [self.php, "-f", str(self.nextcloud_root / "occ")]


@dataclass
class RawTable:
    lines: List[str]

    @property
    def header(self) -> str:
        return self.lines[0] if self.lines else ""

    @property
    def rows(self) -> List[str]:
        return self.lines[1:]


@dataclass
class FilteredTable:
    header: str
    column_index: int
    total: int
    rows: List[str] = field(default_factory=list)

    @property
    def retained(self) -> int:
        return len(self.rows)

    def to_text(self) -> str:
        return "".join(line + "\n" for line in [self.header, *self.rows])


@dataclass(frozen=True)
class GroupFolderTarget:
    folder_id: str
    rel_path: str


@dataclass(frozen=True)
class UserTarget:
    user_id: str
    rel_path: str

    @property
    def scan_path(self) -> str:
        return f"/{self.user_id}/files/{self.rel_path}"


@dataclass(frozen=True)
class Unrecognized:
    path: str


ScanTarget = Union[GroupFolderTarget, UserTarget, Unrecognized]


@dataclass
class PipelineResult:
    output_path: Path
    total: int
    retained: int
    # None when no destination was given
    transferred: Optional[bool] = None
    scan: str = "skipped"
    scanned: bool = False
