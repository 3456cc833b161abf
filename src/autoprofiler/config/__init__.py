"""
Configuration management for the autoprofiler package.

This module provides a clean interface for loading, validating, and accessing
configuration data from TOML files with singleton pattern management, and for
loading flow definition files.
"""

# Main configuration interface
from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)

# Loaders and validators
from .loader import (
    DEFAULT_FLOW_FILENAMES,
    find_flows_file,
    get_config_paths,
    load_flows_file,
    load_main_config,
    load_toml_file,
    load_yaml_file,
)
from .storage_config import StorageConfig
from .validators import (
    validate_automation_config,
    validate_browser_config,
    validate_flows_config,
)

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Loaders
    "DEFAULT_FLOW_FILENAMES",
    "find_flows_file",
    "get_config_paths",
    "load_flows_file",
    "load_main_config",
    "load_toml_file",
    "load_yaml_file",
    # Models and validators
    "StorageConfig",
    "validate_automation_config",
    "validate_browser_config",
    "validate_flows_config",
]
