"""
Validation and error handling for the autoprofiler package.

This module provides input validation, the application's exception types and
error handling helpers with consistent error reporting.
"""

# Core exception classes and error handling
from .exceptions import (
    AggregationError,
    AutomationError,
    ErrorSeverity,
    FlowSetError,
    UnknownActionError,
    ValidationError,
    handle_automation_error,
    handle_cli_error,
    handle_config_error,
    handle_error,
)

# Validation functions
from .validators import (
    validate_action_token,
    validate_boolean,
    validate_enum_choice,
    validate_flow_name,
    validate_path_exists,
    validate_positive_integer,
    validate_url,
)

__all__ = [
    # Exceptions
    "AggregationError",
    "AutomationError",
    "ErrorSeverity",
    "FlowSetError",
    "UnknownActionError",
    "ValidationError",
    # Handlers
    "handle_automation_error",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    # Validators
    "validate_action_token",
    "validate_boolean",
    "validate_enum_choice",
    "validate_flow_name",
    "validate_path_exists",
    "validate_positive_integer",
    "validate_url",
]
