"""
In-memory store of sample batches keyed by flow identifier.
"""

import logging
from typing import Dict, Iterator, List

from ..models.samples import SampleBatch

logger = logging.getLogger(__name__)


class SampleStore:
    """
    Ordered, append-only mapping of flow identifier to sample batches.

    One batch is appended per successful (flow, repetition) pair. Aggregation
    swaps a key's raw batches for a single averaged batch under a derived key.
    The store is written and read from a single asyncio task, so it carries no
    locking.
    """

    def __init__(self) -> None:
        self._results: Dict[str, List[SampleBatch]] = {}

    def append(self, flow_key: str, batch: SampleBatch) -> None:
        """Add ``batch`` to the sequence for ``flow_key``, creating it if absent."""
        self._results.setdefault(flow_key, []).append(batch)
        logger.debug(
            f"Stored batch for '{flow_key}' ({len(batch.logs)} samples, "
            f"{len(self._results[flow_key])} batch(es) total)"
        )

    def remove_by_key(self, flow_key: str) -> None:
        """Delete every batch stored for ``flow_key``; no-op if absent."""
        self._results.pop(flow_key, None)

    def replace(self, flow_key: str, derived_key: str, batch: SampleBatch) -> None:
        """Drop the raw batches of ``flow_key`` and store ``batch`` under ``derived_key``."""
        self.remove_by_key(flow_key)
        self.append(derived_key, batch)

    def get(self, flow_key: str) -> List[SampleBatch]:
        return list(self._results.get(flow_key, []))

    def snapshot(self) -> Dict[str, List[SampleBatch]]:
        """
        Return the results as they stand.

        A new mapping (with new lists) is returned on every call; batches
        themselves are immutable and shared.
        """
        return {key: list(batches) for key, batches in self._results.items()}

    def keys(self) -> List[str]:
        return list(self._results)

    def clear(self) -> None:
        self._results.clear()

    def __contains__(self, flow_key: object) -> bool:
        return flow_key in self._results

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())
