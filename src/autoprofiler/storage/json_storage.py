"""
JSON backend for the sample table, for small runs that are read by eye.
"""

import json
from pathlib import Path
from typing import List, Optional

import polars as pl

from .base import SAMPLES_SCHEMA, DataStorage


class JsonStorage(DataStorage):
    """Writes the sample table as a ``{"samples": [row, ...]}`` document."""

    extension = "json"

    def _write(self, df: pl.DataFrame, path: Path) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"samples": df.to_dicts()}, f, indent=2, ensure_ascii=False)

    def _read(self, path: Path, columns: Optional[List[str]]) -> pl.DataFrame:
        with open(path, "r", encoding="utf-8") as f:
            rows = json.load(f).get("samples", [])

        # Rows carry no types; an empty table still needs its columns.
        df = pl.DataFrame(rows, schema=SAMPLES_SCHEMA)
        if columns:
            df = df.select(columns)
        return df
