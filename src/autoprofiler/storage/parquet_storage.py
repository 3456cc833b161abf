"""
Parquet backend for the sample table.
"""

import logging
from pathlib import Path
from typing import List, Literal, Optional

import polars as pl

from .base import DataStorage

logger = logging.getLogger(__name__)


class ParquetStorage(DataStorage):
    """Writes the sample table as compressed Parquet."""

    extension = "parquet"

    def __init__(self, compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"):
        self.compression = compression
        logger.debug(f"Initialized ParquetStorage with compression: {compression}")

    def _write(self, df: pl.DataFrame, path: Path) -> None:
        df.write_parquet(path, compression=self.compression)

    def _read(self, path: Path, columns: Optional[List[str]]) -> pl.DataFrame:
        # Parquet keeps the schema, so pruning happens in the reader.
        return pl.read_parquet(path, columns=columns)
