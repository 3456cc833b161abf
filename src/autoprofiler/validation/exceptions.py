"""
Exception types and error handling helpers.

This module provides the error types raised across the application and the
consistent logging/re-raising helpers used wherever errors are handled.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationError(Exception):
    """
    Exception raised when validation fails.

    This is the main exception type used for configuration and input checks.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class AutomationError(Exception):
    """Base class for errors that abort an automation run."""


class UnknownActionError(AutomationError):
    """A scripted flow references an action token outside the recognized set."""

    def __init__(self, token: str):
        super().__init__(f"One or more action types provided was not valid: '{token}'")
        self.token = token


class FlowSetError(AutomationError):
    """
    Any other failure while running a flow set.

    Wraps the underlying exception (selector not found, navigation failure,
    missing flow definitions) with the run-level diagnostic.
    """

    HINT = (
        " This was likely caused by one of these issues:\n"
        "  - The flow definition file could not be found at the root of your repo.\n"
        "  - The flow definition file is using a selector that does not exist."
    )

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @classmethod
    def from_exception(cls, error: BaseException) -> "FlowSetError":
        """Build the run-level error, adding the hint when the cause says nothing."""
        message = "An error occurred while trying to run automation flows."
        if not str(error).strip():
            message += cls.HINT
        return cls(message, cause=error)


class AggregationError(AutomationError):
    """An exception raised while reducing repetitions into averages."""


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.

    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']

    error_msg = f"Error in {context}: {error}"

    # Handle both enum and string severity values
    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_automation_error(error: Exception, context: str, **kwargs) -> None:
    """Handle errors raised while running flows or aggregating results."""
    handle_error(error, f"automation {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Handle CLI-related errors."""
    exit_code = kwargs.pop('exit_code', 1)
    kwargs.pop('include_traceback', None)

    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)

    sys.exit(exit_code)
