"""
Execution of a single flow against a page handle.
"""

import logging
from typing import Callable, Optional

from ..models.flows import MOUNT_FLOW_ID, Flow, ProgrammaticFlow, ScriptedFlow
from ..models.samples import SampleBatch
from ..utils import get_file_name
from .page import PageHandle
from .sample_store import SampleStore

logger = logging.getLogger(__name__)


class FlowRunner:
    """
    Runs one flow definition and stores the captured batch.

    Sampling is disabled while a flow's setup step runs and enabled for the
    measured step. Afterwards the page's sample buffer is read and cleared and
    sampling is re-enabled, whatever was captured, so the next attempt starts
    from an empty capture window.

    ``run`` returns False when nothing was captured. That result, not an
    exception, is the retry signal; errors raised by the page propagate.
    """

    def __init__(
        self,
        store: SampleStore,
        include_mount: bool = False,
        batch_id_factory: Optional[Callable[[str], str]] = None,
    ):
        self.store = store
        self.include_mount = include_mount
        self.batch_id_factory = batch_id_factory or get_file_name

    async def run(self, flow: Flow, page: PageHandle) -> bool:
        """
        Execute ``flow`` on ``page``.

        Args:
            flow: Scripted or programmatic flow definition
            page: Live page handle

        Returns:
            True if a usable batch was captured and stored, False otherwise
        """
        await page.set_sampling_enabled(False)

        if isinstance(flow, ScriptedFlow):
            await page.set_sampling_enabled(True)
            for action in flow.actions:
                await page.execute(action.action, action.argument)
        elif isinstance(flow, ProgrammaticFlow):
            if flow.on_before is not None:
                await page.run_procedure(flow.on_before)
            await page.set_sampling_enabled(True)
            await page.run_procedure(flow.on_profile)
        else:
            raise TypeError(f"Unsupported flow definition: {flow!r}")

        return await self.collect(flow.id, page, flow.number_of_interactions)

    async def run_mount(self, page: PageHandle) -> bool:
        """
        Collect the initial mount render.

        The mount batch is only stored when ``include_mount`` is set; otherwise
        the buffer is just cleared and the result is True.
        """
        return await self.collect(MOUNT_FLOW_ID, page, 0)

    async def collect(self, label: str, page: PageHandle, number_of_interactions: float) -> bool:
        samples = await page.read_and_clear_samples()
        await page.set_sampling_enabled(True)

        if label == MOUNT_FLOW_ID and not self.include_mount:
            logger.debug(f"Discarded {len(samples)} mount sample(s)")
            return True

        if not samples:
            logger.debug(f"Flow '{label}' captured no samples")
            return False

        batch = SampleBatch.from_samples(
            samples,
            number_of_interactions=number_of_interactions,
            batch_id=self.batch_id_factory(label),
        )
        self.store.append(label, batch)
        logger.info(f"Flow '{label}' captured {len(batch.logs)} render(s)")
        return True
