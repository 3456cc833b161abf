"""
Configuration file loading utilities.

This module handles the low-level loading and parsing of the main
config.toml and of flow definition files. Flow files may be TOML (a top-level
``[flows]`` table) or the YAML ``react.automation.yml`` format, where the
document itself maps flow names to action lists.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..validation import ErrorSeverity, ValidationError, handle_config_error

logger = logging.getLogger(__name__)

# Flow files looked up in the working directory, in order.
DEFAULT_FLOW_FILENAMES = (
    "react.automation.yml",
    "react.automation.yaml",
    "automation.toml",
)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def load_yaml_file(file_path: Path, description: str = "flow definition file") -> Any:
    """
    Load and parse a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file is not valid YAML
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(
            f"{description} is not valid YAML: {e}",
            field_name=str(file_path),
        ) from e


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """
    Load the main configuration file (config.toml).

    Args:
        config_path: Path to the main config.toml file

    Returns:
        Parsed configuration data
    """
    return load_toml_file(config_path, "main configuration file")


def load_flows_file(flows_path: Path) -> Dict[str, Any]:
    """
    Load a flow definition file and return its raw name -> actions mapping.

    TOML files keep their flows under a ``[flows]`` table; YAML files are the
    mapping themselves. An empty YAML document yields an empty mapping.

    Args:
        flows_path: Path to a .toml, .yml or .yaml file

    Returns:
        Mapping of flow name to raw action token list, in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file type is unsupported or its top level
            is not a mapping
    """
    suffix = flows_path.suffix.lower()
    if suffix == ".toml":
        data = load_toml_file(flows_path, "flow definition file")
        flows = data.get("flows", {})
    elif suffix in (".yml", ".yaml"):
        flows = load_yaml_file(flows_path)
    else:
        raise ValidationError(
            f"Unsupported flow definition file type '{suffix}': {flows_path}",
            field_name="flows_file",
            value=str(flows_path),
        )

    if flows is None:
        return {}
    if not isinstance(flows, dict):
        raise ValidationError(
            f"Flow definition file must map flow names to action lists: {flows_path}",
            field_name="flows_file",
            value=str(flows_path),
        )
    return flows


def find_flows_file(search_dir: Path) -> Optional[Path]:
    """
    Find the first default flow definition file in a directory.

    Args:
        search_dir: Directory to search (normally the current working directory)

    Returns:
        Path of the first file found, or None
    """
    for filename in DEFAULT_FLOW_FILENAMES:
        candidate = search_dir / filename
        if candidate.is_file():
            logger.debug(f"Found flow definition file: {candidate}")
            return candidate
    return None


def get_config_paths(main_config_data: Dict[str, Any], config_dir: Path) -> Dict[str, Optional[Path]]:
    """
    Extract and resolve auxiliary file paths from the main config.

    Args:
        main_config_data: Parsed main configuration data
        config_dir: Directory containing the main config file (for relative paths)

    Returns:
        Dictionary mapping file types to resolved paths; entries that are not
        configured map to None
    """
    paths_data = main_config_data.get("paths", {})

    flows_file = paths_data.get("flows_config")
    return {
        "flows": config_dir / flows_file if flows_file else None,
    }
