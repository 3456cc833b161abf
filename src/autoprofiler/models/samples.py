"""
Render sample data models.

This module defines the records captured from the page's render instrumentation
and the per-flow batches built from them. A batch is created once per
successful flow execution and is never mutated afterwards; aggregation replaces
batches wholesale.

Python attributes are snake_case. The camelCase names used by the page and by
the exported JSON bundle are handled by ``from_dict``/``to_dict``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Tuple

# Wire names of the numeric fields that aggregation sums and averages.
NUMERIC_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("actual_duration", "actualDuration"),
    ("base_duration", "baseDuration"),
    ("commit_time", "commitTime"),
    ("start_time", "startTime"),
)


@dataclass(frozen=True)
class Interaction:
    """A single interaction descriptor attached to a render commit."""

    id: int
    name: str
    timestamp: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Interaction":
        return cls(
            id=int(data.get("id", 0)),
            name=str(data.get("name", "")),
            timestamp=float(data.get("timestamp", 0.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "timestamp": self.timestamp}


@dataclass(frozen=True)
class SampleEntry:
    """
    One instrumentation record emitted during a flow's execution window.

    All timing fields are in milliseconds, as reported by the page.
    """

    actual_duration: float
    base_duration: float
    commit_time: float
    start_time: float
    phase: str
    id: str
    interactions: FrozenSet[Interaction] = frozenset()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SampleEntry":
        """
        Build an entry from the page's raw record.

        The page serializes its interaction ``Set`` either as a list of
        descriptors or, when it went through ``JSON.stringify``, as an empty
        object. Both are accepted.

        Args:
            data: Raw sample dictionary with camelCase keys

        Returns:
            SampleEntry instance
        """
        raw_interactions = data.get("interactions") or []
        if isinstance(raw_interactions, dict):
            raw_interactions = list(raw_interactions.values())

        return cls(
            actual_duration=float(data.get("actualDuration", 0.0)),
            base_duration=float(data.get("baseDuration", 0.0)),
            commit_time=float(data.get("commitTime", 0.0)),
            start_time=float(data.get("startTime", 0.0)),
            phase=str(data.get("phase") or ""),
            id=str(data.get("id") or ""),
            interactions=frozenset(
                Interaction.from_dict(item) for item in raw_interactions
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actualDuration": self.actual_duration,
            "baseDuration": self.base_duration,
            "commitTime": self.commit_time,
            "id": self.id,
            "interactions": [
                interaction.to_dict()
                for interaction in sorted(self.interactions, key=lambda i: i.id)
            ],
            "phase": self.phase,
            "startTime": self.start_time,
        }


@dataclass(frozen=True)
class SampleBatch:
    """
    All samples captured during one flow execution (``AutomationResult``).

    The ``id`` is a display/export label derived from the flow identifier and
    a timestamp; it takes no part in equality.
    """

    logs: Tuple[SampleEntry, ...]
    number_of_interactions: float
    id: str = field(default="", compare=False)

    @classmethod
    def from_samples(
        cls,
        raw_samples: List[Dict[str, Any]],
        number_of_interactions: float,
        batch_id: str,
    ) -> "SampleBatch":
        return cls(
            logs=tuple(SampleEntry.from_dict(sample) for sample in raw_samples),
            number_of_interactions=number_of_interactions,
            id=batch_id,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SampleBatch":
        return cls.from_samples(
            data.get("logs", []),
            data.get("numberOfInteractions", 0),
            str(data.get("id", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logs": [entry.to_dict() for entry in self.logs],
            "numberOfInteractions": self.number_of_interactions,
            "id": self.id,
        }
