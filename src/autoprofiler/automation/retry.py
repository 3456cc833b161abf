"""
Bounded retry of empty captures across a flow set.

Capturing render samples is racy: a commit may not have landed when the batch
is read back. An empty capture therefore re-runs the same flow, up to a fixed
number of times per flow. Flows are idempotent with respect to page state by
convention, which is what makes re-running them safe.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Sequence

from ..models.flows import Flow
from ..validation import (
    AutomationError,
    ErrorSeverity,
    FlowSetError,
    handle_automation_error,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3

# Runs one attempt of a flow; receives the flow and its 0-based attempt number.
FlowAttempt = Callable[[Flow, int], Awaitable[bool]]


class RetryController:
    """
    Iterates a flow set, re-running flows whose capture came back empty.

    Every flow has its own attempt counter, so retries spent on one flow never
    reduce the allowance of a later one. A flow gets at most
    ``max_retries + 1`` attempts; after that it is skipped for this repetition
    with a notice and nothing is recorded for it.

    Any exception raised by an attempt aborts the rest of the flow set. An
    unknown action propagates as is; everything else is wrapped in
    FlowSetError.
    """

    def __init__(self, max_retries: int = DEFAULT_MAX_RETRIES):
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self.max_retries = max_retries
        self.attempts: Dict[str, int] = {}
        self.exhausted: List[str] = []

    async def run(self, flows: Sequence[Flow], attempt: FlowAttempt) -> None:
        """
        Run every flow in order through ``attempt``.

        Args:
            flows: Flow set in declaration order
            attempt: Coroutine function executing one attempt of a flow

        Raises:
            UnknownActionError: If a flow uses an unrecognized action
            FlowSetError: If any other error aborts the flow set
        """
        self.attempts = {}
        self.exhausted = []

        index = 0
        while index < len(flows):
            flow = flows[index]
            retries = self.attempts.get(flow.id, 0)

            try:
                captured = await attempt(flow, retries)
            except AutomationError as e:
                handle_automation_error(
                    e, f"flow '{flow.id}'", severity=ErrorSeverity.ERROR,
                    reraise=True, logger=logger
                )
                raise
            except Exception as e:
                error = FlowSetError.from_exception(e)
                handle_automation_error(
                    error, f"flow '{flow.id}' ({type(e).__name__}: {e})",
                    severity=ErrorSeverity.ERROR, reraise=False, logger=logger
                )
                raise error from e

            if not captured:
                if retries < self.max_retries:
                    self.attempts[flow.id] = retries + 1
                    logger.debug(
                        f"Flow '{flow.id}' captured nothing, retrying "
                        f"({retries + 1}/{self.max_retries})"
                    )
                    continue
                self.exhausted.append(flow.id)
                logger.warning(f'Automation flow "{flow.id}" did not produce any renders.')

            index += 1
