import sys
from datetime import date, datetime
from pathlib import Path

import pytest

from xlsxtocsv.convert import convert, format_cell, read_raw, xlsx2csv_command
from xlsxtocsv.errors import ConversionError
from xlsxtocsv.models import ConverterConfig, ConverterEngine

from .conftest import log_text, write_workbook


def test_xlsx2csv_command_defaults():
    cmd = xlsx2csv_command(Path("in.xlsx"), ConverterConfig())
    assert cmd == [sys.executable, "-W", "ignore", "-m", "xlsx2csv", "in.xlsx", "-s", "1", "-i", "-d", ";"]


def test_xlsx2csv_command_custom_prefix():
    cfg = ConverterConfig(command="/usr/bin/python3 -W ignore /usr/bin/xlsx2csv", ignore_empty=False, sheet=2)
    cmd = xlsx2csv_command(Path("in.xlsx"), cfg)
    assert cmd == ["/usr/bin/python3", "-W", "ignore", "/usr/bin/xlsx2csv", "in.xlsx", "-s", "2", "-d", ";"]


@pytest.mark.parametrize("engine", [ConverterEngine.xlsx2csv, ConverterEngine.pandas])
def test_convert_first_sheet(engine, workbook, tmp_path, logger):
    raw = convert(workbook, tmp_path / "raw.csv", ConverterConfig(engine=engine), logger)
    assert raw.lines == [
        "Name;CSV_State;Date",
        "A;OK;2024-01-01",
        "B;KO;2024-01-02",
        "C;OK;2024-01-03",
    ]


@pytest.mark.parametrize("engine", [ConverterEngine.xlsx2csv, ConverterEngine.pandas])
def test_convert_empty_cells(engine, tmp_path, logger):
    src = write_workbook(tmp_path / "gaps.xlsx", ["Name", "CSV_State", "Note"], [["A", None, "x"], ["B", "OK", "y"]])
    raw = convert(src, tmp_path / "raw.csv", ConverterConfig(engine=engine), logger)
    assert raw.rows == ["A;;x", "B;OK;y"]


def test_pandas_engine_bad_file(tmp_path, logger):
    src = tmp_path / "broken.xlsx"
    src.write_text("not a workbook", encoding="utf-8")
    with pytest.raises(ConversionError):
        convert(src, tmp_path / "raw.csv", ConverterConfig(engine=ConverterEngine.pandas), logger)


def test_xlsx2csv_failure_is_logged(tmp_path, config, logger):
    src = tmp_path / "broken.xlsx"
    src.write_text("not a workbook", encoding="utf-8")
    with pytest.raises(ConversionError):
        convert(src, tmp_path / "raw.csv", ConverterConfig(), logger)
    assert "[ERROR] Converter exited with status" in log_text(config)


def test_converter_not_installed(workbook, tmp_path, logger):
    cfg = ConverterConfig(command=[str(tmp_path / "no-such-converter")])
    with pytest.raises(ConversionError):
        convert(workbook, tmp_path / "raw.csv", cfg, logger)


def test_read_raw_keeps_lines(tmp_path):
    p = tmp_path / "raw.csv"
    p.write_bytes("Nom;CSV_State\nÉté;OK\n".encode("utf-8"))
    assert read_raw(p).lines == ["Nom;CSV_State", "Été;OK"]

    p.write_bytes(b"\xff\xfe")
    with pytest.raises(ConversionError):
        read_raw(p)


def test_command_string_keeps_quoted_paths():
    cfg = ConverterConfig(command='/usr/bin/python3 "/opt/my tools/xlsx2csv"')
    assert cfg.command == ["/usr/bin/python3", "/opt/my tools/xlsx2csv"]


def test_dash_path_is_not_an_option():
    cmd = xlsx2csv_command(Path("-r.xlsx"), ConverterConfig(command=["xlsx2csv"]))
    assert cmd[1] == "./-r.xlsx"


def test_format_cell():
    assert format_cell(None) == ""
    assert format_cell(float("nan")) == ""
    assert format_cell(datetime(2024, 1, 1)) == "2024-01-01"
    assert format_cell(datetime(2024, 1, 1, 8, 30)) == "2024-01-01 08:30:00"
    assert format_cell(date(2024, 1, 1)) == "2024-01-01"
    assert format_cell(42) == "42"
    assert format_cell(42.0) == "42"
    assert format_cell(1.5) == "1.5"
    assert format_cell(True) == "TRUE"
    assert format_cell("x;y") == "x;y"


def test_engines_agree_on_typed_cells(tmp_path, logger):
    src = write_workbook(
        tmp_path / "typed.xlsx",
        ["Name", "CSV_State", "Date", "Ratio", "Count", "Note"],
        [["A", "OK", date(2024, 1, 1), 1.5, 42, "x;y"]],
    )
    by_xlsx2csv = convert(src, tmp_path / "a.csv", ConverterConfig(), logger)
    by_pandas = convert(src, tmp_path / "b.csv", ConverterConfig(engine=ConverterEngine.pandas), logger)

    assert by_pandas.rows == ['A;OK;2024-01-01;1.5;42;"x;y"']
    assert by_pandas.lines == by_xlsx2csv.lines
