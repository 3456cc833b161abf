"""
Input validation functions.

This module provides the validation functions used for configuration values,
command-line arguments and flow definitions.
"""

import os
import re
from pathlib import Path
from typing import Any, List, Optional, Union
from urllib.parse import urlparse

from .exceptions import ValidationError


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is a positive integer.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    """
    Validate that a value is a real boolean.

    Raises:
        ValidationError: If the value is not a bool
    """
    if not isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a boolean, got {value!r}",
            field_name=field_name,
            value=value
        )
    return value


def validate_path_exists(path: Union[str, Path], field_name: str = "path") -> str:
    """
    Validate that a path exists.

    Args:
        path: Path to validate
        field_name: Name of the field being validated

    Returns:
        Validated path string

    Raises:
        ValidationError: If path doesn't exist
    """
    path_str = str(path)
    if not os.path.exists(path_str):
        raise ValidationError(
            f"{field_name} does not exist: {path_str}",
            field_name=field_name,
            value=path_str
        )
    return path_str


def validate_url(url: Any, field_name: str = "url") -> str:
    """
    Validate that a value is an absolute http(s) or file URL.

    Args:
        url: URL to validate
        field_name: Name of the field being validated

    Returns:
        Validated URL string

    Raises:
        ValidationError: If the URL is empty or not absolute
    """
    if not url or not isinstance(url, str):
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=url
        )

    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https", "file") or (
        parsed.scheme != "file" and not parsed.netloc
    ):
        raise ValidationError(
            f"{field_name} must be an absolute http(s) or file URL, got {url}",
            field_name=field_name,
            value=url
        )
    return url.strip()


def validate_flow_name(
    name: Any,
    existing_names: Optional[List[str]] = None,
    field_name: str = "flow name"
) -> str:
    """
    Validate a flow identifier.

    Flow names are free text (they become result keys and chart titles) but
    must be non-empty, must not collide with the reserved mount flow and must
    not use the prefix reserved for averaged results.

    Args:
        name: Flow name to validate
        existing_names: Names already declared (for uniqueness check)
        field_name: Name of the field being validated

    Returns:
        Validated flow name

    Raises:
        ValidationError: If name is invalid
    """
    if not name or not isinstance(name, str) or not name.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=name
        )

    if name == "Mount":
        raise ValidationError(
            f"{field_name} 'Mount' is reserved for the initial mount render",
            field_name=field_name,
            value=name
        )

    if name.startswith("average-"):
        raise ValidationError(
            f"{field_name} must not start with the reserved prefix 'average-': {name}",
            field_name=field_name,
            value=name
        )

    if existing_names and name in existing_names:
        raise ValidationError(
            f"{field_name} must be unique, '{name}' already exists",
            field_name=field_name,
            value=name
        )

    return name


def validate_action_token(token: Any, field_name: str = "action") -> str:
    """
    Validate the shape of a scripted action token (``"<action> <argument>"``).

    Whether the action word itself is recognized is decided when the token is
    parsed; this only rejects values that cannot be tokens at all.

    Raises:
        ValidationError: If the token is not a non-empty string
    """
    if not isinstance(token, str) or not token.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string, got {token!r}",
            field_name=field_name,
            value=token
        )
    if not re.match(r'^\S+', token):
        raise ValidationError(
            f"{field_name} must start with an action word: {token!r}",
            field_name=field_name,
            value=token
        )
    return token


def validate_enum_choice(
    value: Any,
    valid_choices: List[str] = None,
    choices: List[str] = None,
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Args:
        value: Value to validate
        valid_choices: List of allowed choices
        choices: Alias of ``valid_choices``
        field_name: Name of the field being validated
        case_sensitive: Whether the comparison should be case-sensitive

    Returns:
        Validated choice

    Raises:
        ValidationError: If value is not in choices
    """
    choice_list = valid_choices or choices
    if choice_list is None:
        raise ValidationError(
            f"No valid choices provided for {field_name}",
            field_name=field_name,
            value=value
        )

    str_value = str(value)

    if case_sensitive:
        if str_value not in choice_list:
            raise ValidationError(
                f"{field_name} must be one of {choice_list}, got {value}",
                field_name=field_name,
                value=value
            )
        return str_value

    lower_choices = [choice.lower() for choice in choice_list]
    lower_value = str_value.lower()
    if lower_value not in lower_choices:
        raise ValidationError(
            f"{field_name} must be one of {choice_list}, got {value}",
            field_name=field_name,
            value=value
        )
    # Return the original case from valid choices
    return choice_list[lower_choices.index(lower_value)]
