"""
Unit tests for render sample models.
"""

import pytest

from autoprofiler.models.samples import Interaction, SampleBatch, SampleEntry


@pytest.mark.unit
class TestSampleEntry:
    """Test cases for SampleEntry."""

    def test_from_dict_reads_wire_names(self, test_utils):
        raw = test_utils.make_sample(
            actual=12.5, base=10.0, commit=200.0, start=187.5, phase="mount", sample_id="Header",
            interactions=[{"id": 1, "name": "click login", "timestamp": 180.0}],
        )

        entry = SampleEntry.from_dict(raw)

        assert entry.actual_duration == 12.5
        assert entry.base_duration == 10.0
        assert entry.commit_time == 200.0
        assert entry.start_time == 187.5
        assert entry.phase == "mount"
        assert entry.id == "Header"
        assert entry.interactions == frozenset({Interaction(1, "click login", 180.0)})

    def test_serialized_empty_set_accepted(self, test_utils):
        """Test that an interaction Set serialized as {} reads as empty."""
        raw = test_utils.make_sample()
        raw["interactions"] = {}

        assert SampleEntry.from_dict(raw).interactions == frozenset()

    def test_to_dict_uses_wire_names(self, test_utils):
        raw = test_utils.make_sample(
            interactions=[
                {"id": 2, "name": "b", "timestamp": 2.0},
                {"id": 1, "name": "a", "timestamp": 1.0},
            ]
        )

        data = SampleEntry.from_dict(raw).to_dict()

        assert data["actualDuration"] == raw["actualDuration"]
        assert data["startTime"] == raw["startTime"]
        assert [i["id"] for i in data["interactions"]] == [1, 2]

    def test_entries_are_immutable(self, test_utils):
        entry = SampleEntry.from_dict(test_utils.make_sample())

        with pytest.raises(AttributeError):
            entry.actual_duration = 0.0


@pytest.mark.unit
class TestSampleBatch:
    """Test cases for SampleBatch."""

    def test_from_samples(self, test_utils):
        batch = SampleBatch.from_samples([test_utils.make_sample(), test_utils.make_sample()], 3, "Login-1")

        assert len(batch.logs) == 2
        assert batch.number_of_interactions == 3
        assert batch.id == "Login-1"

    def test_id_not_part_of_equality(self, test_utils):
        samples = [test_utils.make_sample()]

        assert SampleBatch.from_samples(samples, 1, "a") == SampleBatch.from_samples(samples, 1, "b")

    def test_wire_format(self, test_utils):
        batch = SampleBatch.from_samples([test_utils.make_sample()], 1.5, "Login-1")

        data = batch.to_dict()

        assert set(data) == {"logs", "numberOfInteractions", "id"}
        assert data["numberOfInteractions"] == 1.5
        assert SampleBatch.from_dict(data) == batch
