from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

import pandas as pd
import pytest
import yaml

from xlsxtocsv.logs import build_run_logger, log_file_path
from xlsxtocsv.models import ConfigModel

HEADER = ["Name", "CSV_State", "Date"]
ROWS = [
    ["A", "OK", "2024-01-01"],
    ["B", "KO", "2024-01-02"],
    ["C", "OK", "2024-01-03"],
]


def write_workbook(path: Path, columns: List[str], rows: List[List[str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(rows, columns=columns)
    with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
        df.to_excel(writer, sheet_name="Sheet1", index=False)
    return path


@pytest.fixture
def workbook(tmp_path: Path) -> Path:
    return write_workbook(tmp_path / "in" / "report.xlsx", HEADER, ROWS)


@pytest.fixture
def fake_tool(tmp_path: Path) -> Callable[..., Path]:
    """Create a shell script that records its arguments and exits with ``exit_code``."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def make(name: str, exit_code: int = 0, output: str = "") -> Path:
        script = bin_dir / name
        calls = bin_dir / f"{name}.calls"
        script.write_text(
            "#!/bin/sh\n"
            f'echo "$@" >> "{calls}"\n'
            f'echo "{output}"\n'
            f"exit {exit_code}\n",
            encoding="utf-8",
        )
        script.chmod(0o755)
        return script

    return make


def recorded_calls(script: str | Path) -> List[str]:
    script = Path(script)
    calls = script.parent / f"{script.name}.calls"
    if not calls.exists():
        return []
    return calls.read_text(encoding="utf-8").splitlines()


@pytest.fixture
def config(tmp_path: Path, fake_tool) -> ConfigModel:
    return ConfigModel(
        log_dir=tmp_path / "logs",
        php=str(fake_tool("php")),
        nextcloud_root=tmp_path / "nextcloud",
        scp=str(fake_tool("scp")),
    )


@pytest.fixture
def logger(config: ConfigModel) -> logging.Logger:
    return build_run_logger(config)


@pytest.fixture
def config_file(tmp_path: Path, config: ConfigModel, monkeypatch) -> Callable[..., Path]:
    """Write ``config`` (plus overrides) to YAML and point XLSXTOCSV_CONFIG at it."""

    def make(**overrides: Optional[object]) -> Path:
        data = config.model_dump(mode="json")
        data.update(overrides)
        path = tmp_path / "xlsxtocsv.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        monkeypatch.setenv("XLSXTOCSV_CONFIG", str(path))
        return path

    return make


def log_text(config: ConfigModel) -> str:
    return log_file_path(config).read_text(encoding="utf-8")
