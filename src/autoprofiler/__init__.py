"""
autoprofiler: Render performance profiling through scripted page automation.

This package drives repeated interaction sessions against a running page,
captures the render samples its instrumentation records, and reduces several
independent sessions into one averaged result.

The package is organized into specialized modules:
- config: Configuration management, validation and flow file loading
- models: Data structures and type definitions
- validation: Input validation and error handling
- automation: Flow execution, retry, sessions and aggregation
- storage: Export of results, sample tables and summaries
- cli: Command-line interface

Usage:
    From command line:
        autoprofiler --page http://localhost:3000 --average-of 3

    Programmatically:
        from autoprofiler import AutomationAPI
        results = AutomationAPI.run(page="http://localhost:3000", average_of=3)
"""

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .automation import AutomationRunner, SampleStore
from .api import AutomationAPI
from .cli import main_cli

# Model classes for external use
from .models import (
    AppConfig,
    AutomationConfig,
    BrowserConfig,
    FlowAction,
    ProgrammaticFlow,
    SampleBatch,
    SampleEntry,
    ScriptedFlow,
)

# Errors
from .validation import (
    AggregationError,
    AutomationError,
    FlowSetError,
    UnknownActionError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "AutomationRunner",
    "SampleStore",
    "AutomationAPI",
    "main_cli",
    # Models
    "AppConfig",
    "AutomationConfig",
    "BrowserConfig",
    "FlowAction",
    "ProgrammaticFlow",
    "SampleBatch",
    "SampleEntry",
    "ScriptedFlow",
    # Errors
    "AggregationError",
    "AutomationError",
    "FlowSetError",
    "UnknownActionError",
    "ValidationError",
]
