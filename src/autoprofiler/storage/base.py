"""
Abstract base class for sample table storage.

A backend owns one file per run directory, ``samples.<extension>``, holding
the flattened render samples in SAMPLES_SCHEMA column order. Subclasses only
implement the raw read and write; schema enforcement and column pruning are
shared.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

import polars as pl

logger = logging.getLogger(__name__)

# Column order and types of the flattened sample table.
SAMPLES_SCHEMA = {
    "flow_key": pl.Utf8,
    "batch_index": pl.Int64,
    "batch_id": pl.Utf8,
    "log_index": pl.Int64,
    "numberOfInteractions": pl.Float64,
    "actualDuration": pl.Float64,
    "baseDuration": pl.Float64,
    "commitTime": pl.Float64,
    "startTime": pl.Float64,
    "phase": pl.Utf8,
    "id": pl.Utf8,
    "interactionCount": pl.Int64,
}


class DataStorage(ABC):
    """Abstract base class for sample table backends."""

    # File extension of the sample table written by this backend.
    extension: str = ""

    def samples_path(self, run_dir: Path) -> Path:
        return Path(run_dir) / f"samples.{self.extension}"

    def save_samples(self, df: pl.DataFrame, run_dir: Path) -> Path:
        """
        Write the sample table into ``run_dir``.

        Args:
            df: Frame holding at least the SAMPLES_SCHEMA columns
            run_dir: Run output directory, created if missing

        Returns:
            Path of the written file

        Raises:
            ValueError: If a schema column is missing from ``df``
        """
        missing = [name for name in SAMPLES_SCHEMA if name not in df.columns]
        if missing:
            raise ValueError(f"Sample table is missing columns: {', '.join(missing)}")

        df = df.select([pl.col(name).cast(dtype) for name, dtype in SAMPLES_SCHEMA.items()])
        path = self.samples_path(run_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._write(df, path)
        except Exception as e:
            logger.error(f"Failed to save sample table to {path}: {e}")
            raise
        logger.debug(f"Saved sample table with {len(df)} rows to {path}")
        return path

    def load_samples(self, run_dir: Path, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """
        Read the sample table of ``run_dir``.

        Args:
            run_dir: Run output directory
            columns: Optional list of columns to load (for column pruning)

        Raises:
            FileNotFoundError: If the run has no sample table in this format
            ValueError: If ``columns`` names a column outside SAMPLES_SCHEMA
        """
        path = self.samples_path(run_dir)
        if not path.exists():
            raise FileNotFoundError(f"No render samples found in {run_dir}")

        if columns:
            unknown = [name for name in columns if name not in SAMPLES_SCHEMA]
            if unknown:
                raise ValueError(f"Unknown sample columns: {', '.join(unknown)}")

        try:
            df = self._read(path, columns or None)
        except Exception as e:
            logger.error(f"Failed to load sample table from {path}: {e}")
            raise
        logger.debug(f"Loaded sample table with {len(df)} rows from {path}")
        return df

    @abstractmethod
    def _write(self, df: pl.DataFrame, path: Path) -> None:
        """Write an already schema-conformant frame to ``path``."""
        pass

    @abstractmethod
    def _read(self, path: Path, columns: Optional[List[str]]) -> pl.DataFrame:
        """Read ``path``, keeping only ``columns`` when given."""
        pass
