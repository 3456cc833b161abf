"""
Top-level driver for a complete automation run.

This module repeats the automation session N times, each repetition in its
own freshly launched browser, and reduces the collected batches once the last
repetition is over.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from ..models.config import AutomationConfig, BrowserConfig
from ..models.flows import Flow
from ..models.samples import SampleBatch
from ..validation import (
    AutomationError,
    ErrorSeverity,
    handle_automation_error,
    validate_url,
)
from .aggregator import Aggregator
from .page import PlaywrightPageProvider
from .sample_store import SampleStore
from .session import FlowSetInput, SessionOrchestrator, normalize_flow_set

logger = logging.getLogger(__name__)

# Builds the async context manager that owns the browser of one repetition.
# The object it yields must offer ``new_page()``.
PageProviderFactory = Callable[[BrowserConfig], Any]


class AutomationRunner:
    """
    Runs repetitions 1..N of the flow set and returns the final results.

    Repetitions run strictly one after another. When N > 1 the stored raw
    batches are averaged after the last repetition, and the averaging has
    finished before ``run_async`` returns.
    """

    def __init__(
        self,
        settings: AutomationConfig,
        flows: Optional[FlowSetInput],
        store: Optional[SampleStore] = None,
        page_provider_factory: Optional[PageProviderFactory] = None,
        batch_id_factory: Optional[Callable[[str], str]] = None,
    ):
        """
        Initialize the runner.

        Args:
            settings: Validated automation settings
            flows: Mapping of flow name to action tokens, or a sequence of
                programmatic flows
            store: Store to fill; a new one is created when omitted
            page_provider_factory: Builds the page provider of a repetition;
                defaults to PlaywrightPageProvider
            batch_id_factory: Builds batch ids from a flow label
        """
        self.settings = settings
        self.flows = flows
        self.store = store if store is not None else SampleStore()
        self.page_provider_factory = page_provider_factory or PlaywrightPageProvider
        self.batch_id_factory = batch_id_factory

        self.aggregator = Aggregator(
            repetitions=settings.average_of,
            divisor=settings.divisor,
            length_mismatch=settings.length_mismatch,
            batch_id_factory=batch_id_factory,
        )
        self.exhausted_flows: List[str] = []

    async def run_async(self) -> Dict[str, List[SampleBatch]]:
        """
        Run every repetition and return the ResultsMap.

        Returns:
            Mapping of flow key to its batches; averaged keys when N > 1

        Raises:
            ValidationError: If the target URL is missing or invalid
            UnknownActionError: If a scripted flow uses an unknown action
            FlowSetError: If a flow set could not be run
            AggregationError: If averaging failed
        """
        validate_url(self.settings.browser.url, field_name="automation.browser.url")
        # Parse the flow set once so a bad token fails before a browser starts.
        flow_list: List[Flow] = normalize_flow_set(self.flows)

        repetitions = self.settings.average_of
        start_time = time.time()
        logger.info(
            f"Starting automation against {self.settings.browser.url} "
            f"({repetitions} repetition(s), {len(flow_list)} flow(s))"
        )

        for repetition in range(1, repetitions + 1):
            await self._run_repetition(flow_list, repetition)

            if Aggregator.should_aggregate(repetition, repetitions):
                self.aggregator.aggregate(self.store)

        duration = time.time() - start_time
        logger.info(
            f"Automation finished in {duration:.2f}s with {len(self.store)} flow key(s)"
        )
        return self.store.snapshot()

    async def _run_repetition(self, flows: List[Flow], repetition: int) -> None:
        logger.info(f"Running automation session {repetition}/{self.settings.average_of}")

        try:
            async with self.page_provider_factory(self.settings.browser) as provider:
                orchestrator = SessionOrchestrator(
                    self.store,
                    provider.new_page,
                    include_mount=self.settings.include_mount,
                    max_retries=self.settings.max_empty_capture_retries,
                    batch_id_factory=self.batch_id_factory,
                )
                await orchestrator.run_session(flows, repetition)
                self.exhausted_flows.extend(orchestrator.retry_controller.exhausted)
        except AutomationError:
            raise
        except Exception as e:
            handle_automation_error(
                e, f"session {repetition}", severity=ErrorSeverity.CRITICAL,
                reraise=True, logger=logger
            )

    def run(self) -> Dict[str, List[SampleBatch]]:
        """
        Run the automation synchronously.

        Raises:
            RuntimeError: If called from within a running event loop
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "Cannot run synchronous AutomationRunner from within async context. "
                "Use run_async() directly."
            )

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(self.run_async())
        finally:
            loop.close()
            asyncio.set_event_loop(None)
