"""
Storage configuration model.

This module defines the StorageConfig dataclass which selects how exported
results are written: the sample table format, its compression, and whether a
CSV copy is produced alongside it.
"""

from typing import Literal, Dict, Any
from dataclasses import dataclass

SUPPORTED_FORMATS = ("parquet", "json")
SUPPORTED_COMPRESSIONS = ("snappy", "gzip", "brotli", "lz4", "zstd")


@dataclass
class StorageConfig:
    """
    Configuration model for result export settings.

    Attributes:
        format: Format of the flattened sample table
            - 'parquet': columnar format with compression (default)
            - 'json': human-readable rows, useful for small runs
        compression: Compression algorithm for the Parquet table
        generate_legacy_formats: Also write the sample table as CSV

    Note:
        The results bundle (`results.json`) is always JSON; these settings only
        affect the flattened sample table.
    """

    format: Literal["parquet", "json"] = "parquet"
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"
    generate_legacy_formats: bool = False

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Create a StorageConfig instance from the `[automation.storage]` table.

        Raises:
            ValueError: If invalid configuration values are provided
        """
        format_type = config_dict.get("format", "parquet")
        compression = config_dict.get("compression", "snappy")
        generate_legacy = config_dict.get("generate_legacy_formats", False)

        if format_type not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported storage format: {format_type}")

        # Compression only matters for Parquet output
        if format_type == "parquet" and compression not in SUPPORTED_COMPRESSIONS:
            raise ValueError(f"Unsupported compression algorithm: {compression}")

        return cls(
            format=format_type,
            compression=compression,
            generate_legacy_formats=bool(generate_legacy),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "compression": self.compression,
            "generate_legacy_formats": self.generate_legacy_formats,
        }
