"""
Unit tests for flamerank.core.metrics module.

Tests cover the FrameMetricsTable arena and FrameMetrics snapshots.
"""

import pytest

from flamerank.core.metrics import FrameMetrics, FrameMetricsTable


class TestFrameMetricsTable:
    """Tests for the per-frame accumulator arena."""

    def test_starts_zeroed(self) -> None:
        """Test a new table has no observed frames."""
        table = FrameMetricsTable(4)
        assert len(table) == 4
        assert list(table.observed_indices()) == []
        assert table.snapshot(3) == FrameMetrics(
            index=3, self_time=0.0, total_time=0.0, sample_count=0
        )

    @pytest.mark.parametrize("frame_count", [0, -2])
    def test_requires_frames(self, frame_count: int) -> None:
        """Test a table needs at least one frame."""
        with pytest.raises(ValueError, match="frame_count must be positive"):
            FrameMetricsTable(frame_count)

    def test_add_stack(self) -> None:
        """Test total for every member and self for the leaf."""
        table = FrameMetricsTable(3)
        table.add_stack([0, 2], 2.5)
        assert table.snapshot(0) == FrameMetrics(
            index=0, self_time=0.0, total_time=2.5, sample_count=1
        )
        assert table.snapshot(2) == FrameMetrics(
            index=2, self_time=2.5, total_time=2.5, sample_count=1
        )
        assert list(table.observed_indices()) == [0, 2]

    def test_add_stack_accumulates(self) -> None:
        """Test repeated stacks add up."""
        table = FrameMetricsTable(2)
        table.add_stack([0, 1], 1)
        table.add_stack([0, 1], 2)
        table.add_stack([0], 4)
        assert table.snapshot(0).total_time == 7
        assert table.snapshot(0).self_time == 4
        assert table.snapshot(0).sample_count == 3
        assert table.snapshot(1).self_time == 3

    def test_repeated_frame_in_stack(self) -> None:
        """Test duplicate indices in one stack accumulate per membership."""
        table = FrameMetricsTable(2)
        table.add_stack([1, 0, 1], 3)
        assert table.snapshot(1).total_time == 6
        assert table.snapshot(1).sample_count == 2
        assert table.snapshot(1).self_time == 3

    def test_empty_stack_is_ignored(self) -> None:
        """Test an empty stack adds nothing."""
        table = FrameMetricsTable(2)
        table.add_stack([], 5)
        assert list(table.observed_indices()) == []

    def test_snapshot_types(self) -> None:
        """Test snapshots expose plain Python numbers."""
        table = FrameMetricsTable(1)
        table.add_stack([0], 1)
        snapshot = table.snapshot(0)
        assert type(snapshot.total_time) is float
        assert type(snapshot.sample_count) is int

    def test_all_finite(self) -> None:
        """Test overflowing sums are reported instead of raising."""
        table = FrameMetricsTable(2)
        table.add_stack([0, 1], 1e308)
        assert table.all_finite()
        table.add_stack([0, 1], 1e308)
        assert not table.all_finite()
        assert table.snapshot(1).self_time == float("inf")
