"""
Data models for the automation engine.

Sample Models:
- Render samples captured from the page's instrumentation
- Per-flow sample batches and the results map built from them

Flow Models:
- Scripted flows made of parsed action tokens
- Programmatic flows driven by async callbacks

Configuration Models:
- Browser, retry, aggregation and storage settings
"""

from typing import Dict, List

# Sample models
from .samples import NUMERIC_FIELDS, Interaction, SampleBatch, SampleEntry

# Flow models
from .flows import (
    MOUNT_FLOW_ID,
    ActionType,
    Flow,
    FlowAction,
    PageProcedure,
    ProgrammaticFlow,
    ScriptedFlow,
)

# Configuration models
from .config import AppConfig, AutomationConfig, BrowserConfig

# Flow identifier -> batches collected for it, in insertion order.
ResultsMap = Dict[str, List[SampleBatch]]

__all__ = [
    # Samples
    "NUMERIC_FIELDS",
    "Interaction",
    "SampleBatch",
    "SampleEntry",
    "ResultsMap",
    # Flows
    "MOUNT_FLOW_ID",
    "ActionType",
    "Flow",
    "FlowAction",
    "PageProcedure",
    "ProgrammaticFlow",
    "ScriptedFlow",
    # Configuration
    "AppConfig",
    "AutomationConfig",
    "BrowserConfig",
]
