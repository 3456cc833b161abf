"""
Flow execution, retry and aggregation engine.

This package runs flow sets against live pages, retries empty captures,
accumulates sample batches across repetitions and averages them.
"""

from .aggregator import AVERAGE_PREFIX, Aggregator, average_key
from .flow_runner import FlowRunner
from .page import PageHandle, PlaywrightPage, PlaywrightPageProvider
from .retry import DEFAULT_MAX_RETRIES, RetryController
from .runner import AutomationRunner
from .sample_store import SampleStore
from .session import SessionOrchestrator, normalize_flow_set

__all__ = [
    "AVERAGE_PREFIX",
    "Aggregator",
    "average_key",
    "FlowRunner",
    "PageHandle",
    "PlaywrightPage",
    "PlaywrightPageProvider",
    "DEFAULT_MAX_RETRIES",
    "RetryController",
    "AutomationRunner",
    "SampleStore",
    "SessionOrchestrator",
    "normalize_flow_set",
]
