"""
Command-line interface for the autoprofiler package.

This module provides the main CLI entry point for the automation application.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
