"""
Configuration validation utilities.

This module turns raw TOML/YAML data into validated configuration and flow
models.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

from ..models.config import AutomationConfig, BrowserConfig
from ..models.flows import ScriptedFlow
from .storage_config import StorageConfig
from ..validation import (
    ValidationError,
    validate_action_token,
    validate_boolean,
    validate_enum_choice,
    validate_flow_name,
    validate_path_exists,
    validate_positive_integer,
    validate_url,
)

logger = logging.getLogger(__name__)

MAX_AVERAGE_OF = 100
MAX_EMPTY_CAPTURE_RETRIES = 10


def validate_browser_config(browser_settings: Dict[str, Any], config_dir: Path) -> BrowserConfig:
    """
    Validate the `[automation.browser]` table.

    An empty ``url`` is accepted here because the CLI may supply the page;
    the runner validates the final URL before launching.
    """
    url = browser_settings.get("url", "")
    if url:
        url = validate_url(url, field_name="automation.browser.url")

    headless = validate_boolean(
        browser_settings.get("headless", True), field_name="automation.browser.headless"
    )

    browser_args = browser_settings.get("browser_args", [])
    if not isinstance(browser_args, list) or not all(isinstance(a, str) for a in browser_args):
        raise ValidationError(
            "automation.browser.browser_args must be a list of strings",
            field_name="automation.browser.browser_args",
            value=browser_args,
        )

    viewport_width = validate_positive_integer(
        browser_settings.get("viewport_width", 1920),
        min_value=1,
        max_value=10000,
        field_name="automation.browser.viewport_width",
    )
    viewport_height = validate_positive_integer(
        browser_settings.get("viewport_height", 1080),
        min_value=1,
        max_value=10000,
        field_name="automation.browser.viewport_height",
    )

    preload_file = browser_settings.get("preload_file") or None
    if preload_file is not None:
        preload_file = Path(preload_file)
        if not preload_file.is_absolute():
            preload_file = config_dir / preload_file
        validate_path_exists(preload_file, field_name="automation.browser.preload_file")

    cookies = browser_settings.get("cookies", [])
    if not isinstance(cookies, list):
        raise ValidationError(
            "automation.browser.cookies must be an array of tables",
            field_name="automation.browser.cookies",
            value=cookies,
        )
    for i, cookie in enumerate(cookies):
        if not isinstance(cookie, dict) or "name" not in cookie or "value" not in cookie:
            raise ValidationError(
                f"automation.browser.cookies[{i}] must define 'name' and 'value'",
                field_name="automation.browser.cookies",
                value=cookie,
            )
        if "url" not in cookie and "domain" not in cookie:
            raise ValidationError(
                f"automation.browser.cookies[{i}] must define either 'url' or 'domain'",
                field_name="automation.browser.cookies",
                value=cookie,
            )

    return BrowserConfig(
        url=url,
        headless=headless,
        browser_args=list(browser_args),
        viewport_width=viewport_width,
        viewport_height=viewport_height,
        preload_file=preload_file,
        cookies=[dict(cookie) for cookie in cookies],
    )


def validate_automation_config(automation_data: Dict[str, Any], config_dir: Path) -> AutomationConfig:
    """
    Validate and create an AutomationConfig from raw configuration data.

    Args:
        automation_data: Raw `[automation]` table from TOML
        config_dir: Directory of the config file, for relative paths

    Returns:
        Validated AutomationConfig instance

    Raises:
        ValidationError: If validation fails
    """
    general_settings = automation_data.get("general", {})
    browser_settings = automation_data.get("browser", {})
    retry_settings = automation_data.get("retry", {})
    aggregation_settings = automation_data.get("aggregation", {})
    storage_settings = automation_data.get("storage", {})

    try:
        average_of = validate_positive_integer(
            general_settings.get("average_of", 1),
            min_value=1,
            max_value=MAX_AVERAGE_OF,
            field_name="automation.general.average_of",
        )

        include_mount = validate_boolean(
            general_settings.get("include_mount", False),
            field_name="automation.general.include_mount",
        )

        output = validate_enum_choice(
            general_settings.get("output", "json"),
            valid_choices=["json", "chart"],
            field_name="automation.general.output",
        )

        output_dir = Path(general_settings.get("output_dir", "logs"))
        if not output_dir.is_absolute():
            output_dir = config_dir / output_dir

        browser = validate_browser_config(browser_settings, config_dir)

        max_retries = validate_positive_integer(
            retry_settings.get("max_empty_capture_retries", 3),
            min_value=0,
            max_value=MAX_EMPTY_CAPTURE_RETRIES,
            field_name="automation.retry.max_empty_capture_retries",
        )

        divisor = validate_enum_choice(
            aggregation_settings.get("divisor", "configured"),
            valid_choices=["configured", "contributing"],
            field_name="automation.aggregation.divisor",
        )

        length_mismatch = validate_enum_choice(
            aggregation_settings.get("length_mismatch", "warn"),
            valid_choices=["warn", "error"],
            field_name="automation.aggregation.length_mismatch",
        )

        try:
            storage = StorageConfig.from_dict(storage_settings)
        except ValueError as e:
            raise ValidationError(str(e), field_name="automation.storage") from e

    except ValidationError as e:
        logger.error(f"Automation configuration validation failed: {e}")
        raise

    return AutomationConfig(
        average_of=average_of,
        include_mount=include_mount,
        output=output,
        output_dir=output_dir,
        browser=browser,
        max_empty_capture_retries=max_retries,
        divisor=divisor,
        length_mismatch=length_mismatch,
        storage=storage,
    )


def validate_flows_config(flows_data: Mapping[str, Any]) -> List[ScriptedFlow]:
    """
    Validate a flow-name -> action-token-list mapping and parse it.

    Declaration order is kept. Every token is parsed up front, so an unknown
    action aborts the flow set before any flow runs.

    Args:
        flows_data: Raw mapping loaded from a flow file or passed by a caller

    Returns:
        List of ScriptedFlow in declaration order

    Raises:
        ValidationError: If names or token lists are malformed
        UnknownActionError: If a token names an unrecognized action
    """
    if not isinstance(flows_data, Mapping):
        raise ValidationError(
            "Flows must be a mapping of flow names to action lists",
            field_name="flows",
            value=flows_data,
        )

    flows: List[ScriptedFlow] = []
    seen_names: List[str] = []
    for name, tokens in flows_data.items():
        validate_flow_name(name, existing_names=seen_names, field_name="flow name")
        if not isinstance(tokens, list):
            raise ValidationError(
                f"Flow '{name}' must be a list of action strings",
                field_name=f"flows.{name}",
                value=tokens,
            )
        for i, token in enumerate(tokens):
            validate_action_token(token, field_name=f"flows.{name}[{i}]")

        flows.append(ScriptedFlow.from_tokens(name, tokens))
        seen_names.append(name)

    logger.debug(f"Validated {len(flows)} scripted flows")
    return flows
