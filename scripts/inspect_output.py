from __future__ import annotations

from pathlib import Path
import sys

import pandas as pd


def main() -> int:
    # First argument is the CSV produced by xlsxtocsv
    if len(sys.argv) < 2:
        print("Usage: python scripts/inspect_output.py <file.csv>")
        return 2
    path = Path(sys.argv[1])
    if not path.exists():
        print(f"Output not found: {path}")
        return 1

    df = pd.read_csv(path, sep=";", dtype=str, keep_default_na=False)
    print("Columns:", list(df.columns))
    print("Rows:", len(df))
    if "CSV_State" in df.columns:
        print("CSV_State values:", sorted(df["CSV_State"].unique()))
    if len(df) > 0:
        print(df.head(10).to_string(index=False))
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
