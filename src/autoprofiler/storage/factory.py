"""
Factory for creating sample table backends.
"""

import logging
from typing import Dict, Optional, Type

from ..config.storage_config import StorageConfig
from .base import DataStorage
from .json_storage import JsonStorage
from .parquet_storage import ParquetStorage

logger = logging.getLogger(__name__)

BACKENDS: Dict[str, Type[DataStorage]] = {
    ParquetStorage.extension: ParquetStorage,
    JsonStorage.extension: JsonStorage,
}


def create_storage(storage_config: Optional[StorageConfig] = None) -> DataStorage:
    """
    Create the backend selected by ``storage_config``.

    Args:
        storage_config: Export settings; defaults to Parquet/snappy

    Returns:
        DataStorage instance

    Raises:
        ValueError: If the format has no backend
    """
    storage_config = storage_config or StorageConfig()
    backend = BACKENDS.get(storage_config.format)
    if backend is None:
        raise ValueError(f"Unsupported storage format: {storage_config.format}")

    logger.debug(f"Creating {backend.__name__} for format: {storage_config.format}")
    if backend is ParquetStorage:
        return ParquetStorage(compression=storage_config.compression)
    return backend()
