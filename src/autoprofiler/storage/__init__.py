"""
Storage module for automation results.

This module provides:
- Parquet and JSON backends for the flattened sample table, sharing one
  column schema (SAMPLES_SCHEMA)
- Support for various Parquet compression algorithms (Snappy, Gzip, Brotli,
  LZ4, Zstd) and an optional legacy CSV copy
- The ResultsExporter that writes the results bundle, sample table, summary
  log and charts of a finished run, and re-renders charts of an earlier run

It uses Polars for DataFrame operations.
"""

from .base import SAMPLES_SCHEMA, DataStorage
from .exporter import ResultsExporter, build_samples_frame, results_to_dict
from .factory import create_storage
from .json_storage import JsonStorage
from .parquet_storage import ParquetStorage

__all__ = [
    "DataStorage",
    "SAMPLES_SCHEMA",
    "JsonStorage",
    "ParquetStorage",
    "ResultsExporter",
    "build_samples_frame",
    "create_storage",
    "results_to_dict",
]
