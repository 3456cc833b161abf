"""
One automation session: the mount render followed by the whole flow set.
"""

import logging
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence, Union

from ..config.validators import validate_flows_config
from ..models.flows import Flow, ProgrammaticFlow, ScriptedFlow
from ..validation import (
    AutomationError,
    ErrorSeverity,
    FlowSetError,
    handle_automation_error,
    validate_flow_name,
)
from .flow_runner import FlowRunner
from .page import PageHandle
from .retry import DEFAULT_MAX_RETRIES, RetryController
from .sample_store import SampleStore

logger = logging.getLogger(__name__)

# Returns a new page handle, already navigated to the page under test.
PageFactory = Callable[[], Awaitable[PageHandle]]

FlowSetInput = Union[Mapping[str, Any], Sequence[Flow]]


def normalize_flow_set(flows: Optional[FlowSetInput]) -> List[Flow]:
    """
    Turn caller input into an ordered list of flow definitions.

    Accepts a mapping of flow name to action tokens (parsed into scripted
    flows) or a sequence of already-built flows. A flow set must use a single
    form.

    Raises:
        UnknownActionError: If a scripted token names an unknown action
        ValidationError: If the mapping is malformed, or a flow id is empty,
            reserved or declared twice
        FlowSetError: If scripted and programmatic flows are mixed
    """
    if flows is None:
        return []
    if isinstance(flows, Mapping):
        return list(validate_flows_config(flows))

    flow_list = list(flows)
    seen_ids: List[str] = []
    for flow in flow_list:
        if not isinstance(flow, (ScriptedFlow, ProgrammaticFlow)):
            raise FlowSetError(f"Unsupported flow definition: {flow!r}")
        # Ids become store keys and retry counter keys.
        validate_flow_name(flow.id, existing_names=seen_ids, field_name="scenario id")
        seen_ids.append(flow.id)

    kinds = {type(flow) for flow in flow_list}
    if len(kinds) > 1:
        raise FlowSetError(
            "A flow set must contain either scripted or programmatic flows, not both."
        )
    return flow_list


class SessionOrchestrator:
    """
    Runs every flow once for a single repetition, strictly in order.

    Flows never run concurrently: they all share the page's single sample
    buffer, and overlapping flows would mix their captures.

    Scripted flows all run on the initial page. Programmatic flows reuse the
    initial page for their very first attempt only; every later attempt,
    including retries, gets a fresh page from the factory, and each page is
    closed once its attempt is over.
    """

    def __init__(
        self,
        store: SampleStore,
        page_factory: PageFactory,
        include_mount: bool = False,
        max_retries: int = DEFAULT_MAX_RETRIES,
        batch_id_factory: Optional[Callable[[str], str]] = None,
    ):
        self.store = store
        self.page_factory = page_factory
        self.flow_runner = FlowRunner(store, include_mount, batch_id_factory)
        self.retry_controller = RetryController(max_retries)
        self._open_pages: List[PageHandle] = []

    async def run_session(self, flows: FlowSetInput, repetition: int = 1) -> None:
        """
        Run the mount flow and then the flow set.

        Args:
            flows: Flow set (mapping of token lists or sequence of flows)
            repetition: 1-based repetition ordinal, for logging

        Raises:
            UnknownActionError: If a scripted flow uses an unknown action
            FlowSetError: If running the flow set failed
        """
        flow_list = normalize_flow_set(flows)
        programmatic = bool(flow_list) and isinstance(flow_list[0], ProgrammaticFlow)
        logger.info(
            f"Repetition {repetition}: running {'programmatic' if programmatic else 'scripted'} "
            f"flows ({len(flow_list)} defined)"
        )

        try:
            initial_page = await self._open_page()
            await self._run_mount(initial_page)

            if programmatic:
                await self._run_programmatic(flow_list, initial_page)
            else:
                await self.retry_controller.run(
                    flow_list, lambda flow, _attempt: self.flow_runner.run(flow, initial_page)
                )
        finally:
            await self._close_pages()

    async def _run_mount(self, page: PageHandle) -> None:
        try:
            await self.flow_runner.run_mount(page)
        except AutomationError:
            raise
        except Exception as e:
            error = FlowSetError.from_exception(e)
            handle_automation_error(
                error, f"mount render ({type(e).__name__}: {e})",
                severity=ErrorSeverity.ERROR, reraise=False, logger=logger
            )
            raise error from e

    async def _run_programmatic(self, flows: List[Flow], initial_page: PageHandle) -> None:
        active: List[Flow] = []
        for flow in flows:
            if flow.should_skip:
                logger.info(f'Scenario "{flow.id}": skipped')
            else:
                active.append(flow)

        reusable_page: Optional[PageHandle] = initial_page

        async def attempt(flow: Flow, attempt_number: int) -> bool:
            nonlocal reusable_page
            logger.info(f'Scenario "{flow.id}": attempt #{attempt_number + 1}')

            if reusable_page is not None:
                page, reusable_page = reusable_page, None
            else:
                page = await self._open_page()

            try:
                return await self.flow_runner.run(flow, page)
            finally:
                await self._close_page(page)

        await self.retry_controller.run(active, attempt)

    async def _open_page(self) -> PageHandle:
        page = await self.page_factory()
        self._open_pages.append(page)
        return page

    async def _close_page(self, page: PageHandle) -> None:
        if page in self._open_pages:
            self._open_pages.remove(page)
        await page.close()

    async def _close_pages(self) -> None:
        while self._open_pages:
            page = self._open_pages.pop()
            try:
                await page.close()
            except Exception as e:
                logger.warning(f"Error closing page: {e}")
