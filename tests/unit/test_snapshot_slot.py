"""Unit tests for LatestSnapshotSlot."""

import pytest
import numpy as np

from micscope.models.spectrum import SpectrumSnapshot
from micscope.pipeline.slot import LatestSnapshotSlot


def make_snapshot(sequence_number):
    return SpectrumSnapshot(
        magnitudes=np.zeros(4, dtype=np.float32),
        frequencies=np.arange(4, dtype=np.float32),
        sequence_number=sequence_number,
        timestamp=0.0,
        sample_rate=8.0,
        frame_size=8,
    )


@pytest.mark.unit
class TestLatestSnapshotSlot:
    """Test cases for LatestSnapshotSlot class."""

    def test_empty_slot(self):
        slot = LatestSnapshotSlot()

        assert slot.take() is None
        assert slot.peek() is None

    def test_take_returns_once(self):
        slot = LatestSnapshotSlot()
        slot.put(make_snapshot(1))

        assert slot.take().sequence_number == 1
        assert slot.take() is None
        assert slot.peek().sequence_number == 1

    def test_newer_snapshot_supersedes(self):
        slot = LatestSnapshotSlot()
        for n in range(1, 6):
            slot.put(make_snapshot(n))

        assert slot.take().sequence_number == 5
        assert slot.take() is None
        assert slot.superseded == 4

    def test_clear(self):
        slot = LatestSnapshotSlot()
        slot.put(make_snapshot(1))

        slot.clear()

        assert slot.take() is None
        assert slot.peek() is None


@pytest.mark.unit
class TestSpectrumSnapshot:

    def test_rejects_misaligned_arrays(self):
        with pytest.raises(ValueError):
            SpectrumSnapshot(
                magnitudes=np.zeros(4, dtype=np.float32),
                frequencies=np.zeros(3, dtype=np.float32),
                sequence_number=1,
                timestamp=0.0,
                sample_rate=8.0,
                frame_size=8,
            )
