"""
Reduction of repeated flow batches into averaged batches.

After the last of N repetitions every raw flow key is replaced by a single
batch under ``average-<key>``. Entries are matched by their position in each
batch's ``logs``, not by sample id, which is only meaningful when every
repetition of a flow renders the same commits in the same order. Batches of
unequal length are reported (or rejected, depending on policy) rather than
averaged silently.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from ..models.samples import NUMERIC_FIELDS, SampleBatch, SampleEntry
from ..utils import get_file_name
from ..validation import AggregationError, ErrorSeverity, handle_automation_error
from .sample_store import SampleStore

logger = logging.getLogger(__name__)

AVERAGE_PREFIX = "average-"

DIVISOR_CONFIGURED = "configured"
DIVISOR_CONTRIBUTING = "contributing"
MISMATCH_WARN = "warn"
MISMATCH_ERROR = "error"


def average_key(flow_key: str) -> str:
    return f"{AVERAGE_PREFIX}{flow_key}"


@dataclass
class _PositionSum:
    """Running totals for one log index across batches."""

    totals: Dict[str, float] = field(
        default_factory=lambda: {name: 0.0 for name, _ in NUMERIC_FIELDS}
    )
    id: str = ""
    phase: str = ""

    def add(self, entry: SampleEntry) -> None:
        for name, _ in NUMERIC_FIELDS:
            self.totals[name] += getattr(entry, name)
        if not self.id:
            self.id = entry.id
        if not self.phase:
            self.phase = entry.phase

    def average(self, divisor: float) -> SampleEntry:
        return SampleEntry(
            id=self.id,
            phase=self.phase,
            interactions=frozenset(),
            **{name: total / divisor for name, total in self.totals.items()},
        )


class Aggregator:
    """
    Averages every raw flow key of a SampleStore in place.

    Args:
        repetitions: Configured number of repetitions (N)
        divisor: "configured" divides by N even when some repetitions
            contributed nothing for a flow; "contributing" divides by the
            number of batches actually stored for it
        length_mismatch: "warn" logs batches of unequal length and averages
            them by position; "error" raises AggregationError
        batch_id_factory: Builds the id of each averaged batch
    """

    def __init__(
        self,
        repetitions: int,
        divisor: str = DIVISOR_CONFIGURED,
        length_mismatch: str = MISMATCH_WARN,
        batch_id_factory: Optional[Callable[[str], str]] = None,
    ):
        if repetitions < 1:
            raise ValueError(f"repetitions must be >= 1, got {repetitions}")
        if divisor not in (DIVISOR_CONFIGURED, DIVISOR_CONTRIBUTING):
            raise ValueError(f"Unknown divisor policy: {divisor}")
        if length_mismatch not in (MISMATCH_WARN, MISMATCH_ERROR):
            raise ValueError(f"Unknown length mismatch policy: {length_mismatch}")

        self.repetitions = repetitions
        self.divisor = divisor
        self.length_mismatch = length_mismatch
        self.batch_id_factory = batch_id_factory or get_file_name

    @staticmethod
    def should_aggregate(repetition: int, repetitions: int) -> bool:
        """Aggregation runs once, after the last repetition, and only when N > 1."""
        return repetitions > 1 and repetition == repetitions

    def average_batches(self, flow_key: str, batches: Sequence[SampleBatch]) -> SampleBatch:
        """
        Average the batches stored for one flow key.

        Raises:
            AggregationError: If there is nothing to average, or the batch
                lengths differ under the "error" policy
        """
        if not batches:
            raise AggregationError(f"No batches to average for flow '{flow_key}'")

        lengths = [len(batch.logs) for batch in batches]
        if len(set(lengths)) > 1:
            message = (
                f"Flow '{flow_key}' produced a different number of renders per "
                f"repetition {lengths}; entries are averaged by position"
            )
            if self.length_mismatch == MISMATCH_ERROR:
                raise AggregationError(message)
            logger.warning(message)

        positions: List[_PositionSum] = []
        interactions_total = 0.0
        for batch in batches:
            for index, entry in enumerate(batch.logs):
                if index == len(positions):
                    positions.append(_PositionSum())
                positions[index].add(entry)
            interactions_total += batch.number_of_interactions

        divisor = self.repetitions if self.divisor == DIVISOR_CONFIGURED else len(batches)

        return SampleBatch(
            logs=tuple(position.average(divisor) for position in positions),
            number_of_interactions=interactions_total / divisor,
            id=self.batch_id_factory(flow_key),
        )

    def aggregate(self, store: SampleStore) -> None:
        """
        Replace every raw key in ``store`` with its averaged batch.

        Keys are reduced one after another and the method only returns once
        every replacement has been applied, so callers may export right after.
        Keys that are already averaged are left alone.

        Raises:
            AggregationError: If any key could not be reduced
        """
        for flow_key in store.keys():
            if flow_key.startswith(AVERAGE_PREFIX):
                continue

            try:
                averaged = self.average_batches(flow_key, store.get(flow_key))
            except AggregationError as e:
                handle_automation_error(
                    e, "calculating averages", severity=ErrorSeverity.ERROR,
                    reraise=True, logger=logger
                )
                raise
            except Exception as e:
                error = AggregationError(
                    f"An error occurred while calculating averages for '{flow_key}': {e}"
                )
                handle_automation_error(
                    error, "calculating averages", severity=ErrorSeverity.ERROR,
                    reraise=False, logger=logger
                )
                raise error from e

            store.replace(flow_key, average_key(flow_key), averaged)
            logger.info(
                f"Averaged {len(averaged.logs)} render(s) "
                f"for '{flow_key}' over {self.repetitions} repetition(s)"
            )
