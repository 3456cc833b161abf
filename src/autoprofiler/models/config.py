"""
Configuration data models.

This module contains the configuration data structures for an automation run:
browser settings, retry and aggregation policies, and the root application
configuration loaded from `config.toml`.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config.storage_config import StorageConfig


@dataclass
class BrowserConfig:
    """
    Browser and page settings, loaded from `[automation.browser]`.
    """

    # The page under test.
    url: str
    headless: bool = True
    # Extra command-line switches passed to Chromium.
    browser_args: List[str] = field(default_factory=list)
    viewport_width: int = 1920
    viewport_height: int = 1080
    # Optional script evaluated on every new document before page scripts run.
    preload_file: Optional[Path] = None
    # Cookies in Playwright's `add_cookies` format (name, value, url or domain/path).
    cookies: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class AutomationConfig:
    """
    Configuration for the automation engine's global behavior.
    """

    # [automation.general]
    average_of: int
    include_mount: bool
    output: str  # "json" or "chart"
    output_dir: Path

    # [automation.browser]
    browser: BrowserConfig

    # [automation.retry]
    max_empty_capture_retries: int = 3

    # [automation.aggregation]
    divisor: str = "configured"  # "configured" or "contributing"
    length_mismatch: str = "warn"  # "warn" or "error"

    # [automation.storage]
    storage: StorageConfig = field(default_factory=StorageConfig)


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    automation: AutomationConfig
    # Flow definition file referenced from [paths], if any.
    flows_file: Optional[Path] = None
