"""
Unit tests for storage factory.
"""

import pytest

from autoprofiler.config.storage_config import StorageConfig
from autoprofiler.storage.factory import create_storage
from autoprofiler.storage.json_storage import JsonStorage
from autoprofiler.storage.parquet_storage import ParquetStorage


@pytest.mark.unit
class TestStorageFactory:
    """Test cases for storage factory."""

    def test_default_is_parquet(self):
        storage = create_storage()
        assert type(storage) is ParquetStorage
        assert storage.compression == "snappy"

    def test_create_parquet_storage(self):
        """Test creating ParquetStorage with the configured compression."""
        storage = create_storage(StorageConfig(format="parquet", compression="gzip"))

        assert type(storage) is ParquetStorage
        assert storage.compression == "gzip"
        assert storage.extension == "parquet"

    def test_create_json_storage(self):
        """Test creating JsonStorage."""
        storage = create_storage(StorageConfig(format="json", compression="zstd"))
        assert isinstance(storage, JsonStorage)
        assert storage.extension == "json"

    def test_create_storage_unsupported_format(self):
        """Test creating storage with unsupported format."""
        with pytest.raises(ValueError) as excinfo:
            create_storage(StorageConfig(format="unsupported"))

        assert "Unsupported storage format" in str(excinfo.value)
