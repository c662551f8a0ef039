"""
Unit tests for flamerank.core.evented module.

Tests cover time attribution between consecutive events, stack discipline,
and every evented-profile failure mode.
"""

from typing import Any, Dict, List

import pytest

from flamerank.core.document import EventedProfile
from flamerank.core.errors import (
    InvalidEventType,
    InvalidFrameReference,
    InvalidNumber,
    MalformedEventStream,
    NonMonotonicTimestamps,
    UnbalancedStack,
    UnclosedFrames,
)
from flamerank.core.evented import reconstruct_evented
from flamerank.core.metrics import FrameMetricsTable


def _event(event_type: str, frame: Any, at: Any) -> Dict[str, Any]:
    return {"type": event_type, "frame": frame, "at": at}


def _replay(events: List[Any], frame_count: int = 3, index: int = 0):
    metrics = FrameMetricsTable(frame_count)
    observed = reconstruct_evented(EventedProfile(index=index, events=events), frame_count, metrics)
    return observed, metrics


class TestTimeAttribution:
    """Tests for inclusive and exclusive time from event gaps."""

    def test_nested_frames(self) -> None:
        """Test main 0-10 with work 2-6.

        These totals (main 10 / self 6, work 4 / self 4) pin the order of
        attribution: each event is applied to the stack first, and the gap
        that follows it is charged to the resulting stack. Charging the gap
        before the push or pop would give main a total of 8.
        """
        observed, metrics = _replay([
            _event("O", 0, 0),
            _event("O", 1, 2),
            _event("C", 1, 6),
            _event("C", 0, 10),
        ])
        assert observed == 10
        main = metrics.snapshot(0)
        work = metrics.snapshot(1)
        assert (main.total_time, main.self_time, main.sample_count) == (10, 6, 3)
        assert (work.total_time, work.self_time, work.sample_count) == (4, 4, 1)

    def test_gaps_with_empty_stack_are_not_observed(self) -> None:
        """Test idle time between top-level frames is not attributed."""
        observed, metrics = _replay([
            _event("O", 0, 0),
            _event("C", 0, 3),
            _event("O", 1, 10),
            _event("C", 1, 12),
        ])
        assert observed == 5
        assert metrics.snapshot(0).total_time == 3
        assert metrics.snapshot(1).total_time == 2

    def test_zero_length_gaps_contribute_nothing(self) -> None:
        """Test equal timestamps add no time and no membership."""
        observed, metrics = _replay([
            _event("O", 0, 5),
            _event("O", 1, 5),
            _event("C", 1, 5),
            _event("C", 0, 9),
        ])
        assert observed == 4
        assert metrics.snapshot(1).sample_count == 0
        assert metrics.snapshot(0).self_time == 4

    def test_recursive_frame(self) -> None:
        """Test a frame open twice is counted once per stack membership."""
        observed, metrics = _replay([
            _event("O", 0, 0),
            _event("O", 0, 1),
            _event("C", 0, 3),
            _event("C", 0, 4),
        ])
        assert observed == 4
        snapshot = metrics.snapshot(0)
        assert snapshot.total_time == 6
        assert snapshot.self_time == 4
        assert snapshot.sample_count == 4

    def test_float_timestamps(self) -> None:
        """Test fractional timestamps produce fractional durations."""
        observed, metrics = _replay([
            _event("O", 2, 0.5),
            _event("C", 2, 1.75),
        ])
        assert observed == pytest.approx(1.25)
        assert metrics.snapshot(2).self_time == pytest.approx(1.25)


class TestStreamShape:
    """Tests for stream-level failures."""

    @pytest.mark.parametrize("events", [[], [_event("C", 0, 10)]])
    def test_fewer_than_two_events(self, events: List[Any]) -> None:
        """Test streams need at least two events."""
        with pytest.raises(MalformedEventStream, match="at least two events"):
            _replay(events, index=5)

    def test_event_not_object(self) -> None:
        """Test each event must be an object."""
        with pytest.raises(MalformedEventStream, match="profile 0, index 1"):
            _replay([_event("O", 0, 0), ["C", 0, 1]])

    def test_unclosed_frames(self) -> None:
        """Test frames left open at the end fail."""
        with pytest.raises(UnclosedFrames, match="Unclosed frames in evented profile 0") as excinfo:
            _replay([_event("O", 0, 0), _event("O", 1, 1)])
        assert excinfo.value.open_frames == [0, 1]


class TestEventFields:
    """Tests for per-event field validation."""

    @pytest.mark.parametrize("frame", [3, -1, "1", None, 0.5])
    def test_invalid_frame(self, frame: Any) -> None:
        """Test event frames must reference the frame table."""
        with pytest.raises(InvalidFrameReference, match="Invalid event frame at profile 0, index 0"):
            _replay([_event("O", frame, 0), _event("C", 0, 1)])

    @pytest.mark.parametrize("at", ["0", None, float("nan"), float("inf"), True])
    def test_invalid_timestamp(self, at: Any) -> None:
        """Test timestamps must be finite numbers."""
        with pytest.raises(InvalidNumber, match="Invalid event timestamp at profile 0, index 0"):
            _replay([_event("O", 0, at), _event("C", 0, 1)])

    def test_frame_beyond_float_range(self) -> None:
        """Test an oversized integer frame is an invalid reference."""
        with pytest.raises(InvalidFrameReference, match="index 0"):
            _replay([_event("O", 10 ** 400, 0), _event("C", 0, 1)])

    def test_timestamp_beyond_float_range(self) -> None:
        """Test an oversized integer timestamp is an invalid number."""
        with pytest.raises(InvalidNumber, match="Invalid event timestamp at profile 0, index 1"):
            _replay([_event("O", 0, 0), _event("C", 0, 10 ** 400)])

    def test_invalid_next_timestamp(self) -> None:
        """Test the lookahead timestamp is validated too."""
        with pytest.raises(InvalidNumber, match="index 1"):
            _replay([_event("O", 0, 0), _event("C", 0, "later")])

    def test_non_monotonic_timestamps(self) -> None:
        """Test timestamps may not go backwards."""
        with pytest.raises(NonMonotonicTimestamps, match="non-decreasing in profile 2"):
            _replay([_event("O", 0, 5), _event("C", 0, 4)], index=2)

    @pytest.mark.parametrize("event_type", ["X", "Open", "", None])
    def test_invalid_event_type(self, event_type: Any) -> None:
        """Test only O and C are accepted."""
        with pytest.raises(InvalidEventType, match="Invalid event type at profile 0, index 0"):
            _replay([_event(event_type, 0, 0), _event("C", 0, 1)])


class TestStackDiscipline:
    """Tests for open/close matching."""

    def test_close_mismatched_frame(self) -> None:
        """Test closing a frame that is not on top fails with both indices."""
        with pytest.raises(UnbalancedStack, match=r"expected 1, got 0") as excinfo:
            _replay([
                _event("O", 0, 0),
                _event("O", 1, 1),
                _event("C", 0, 2),
                _event("C", 1, 3),
            ])
        error = excinfo.value
        assert error.event_index == 2
        assert error.expected == 1
        assert error.actual == 0

    def test_close_on_empty_stack(self) -> None:
        """Test closing with nothing open fails."""
        with pytest.raises(UnbalancedStack, match="expected none, got 0") as excinfo:
            _replay([_event("C", 0, 0), _event("O", 0, 1)])
        assert excinfo.value.expected is None

    def test_close_after_balanced_section(self) -> None:
        """Test an extra close after the stack empties fails."""
        with pytest.raises(UnbalancedStack):
            _replay([
                _event("O", 0, 0),
                _event("C", 0, 1),
                _event("C", 0, 2),
            ])
