"""
Unit tests for flamerank.core.document module.

Tests cover the Frame dataclass, top-level document validation and the
decoding of individual profile entries.
"""

import pytest

from flamerank.core.document import (
    EventedProfile,
    EventType,
    Frame,
    ProfileKind,
    SampledProfile,
    decode_profile_entry,
    validate_document,
)
from flamerank.core.errors import MalformedDocument, UnsupportedProfileType


class TestFrameDataclass:
    """Tests for Frame construction and defaults."""

    def test_from_record_full(self) -> None:
        """Test a frame with name and file."""
        frame = Frame.from_record(0, {"name": "main", "file": "main.py", "line": 3})
        assert frame == Frame(index=0, name="main", file="main.py")

    def test_from_record_defaults(self) -> None:
        """Test missing name and file use placeholders."""
        frame = Frame.from_record(7, {})
        assert frame.name == "frame_7"
        assert frame.file == "unknown"

    def test_from_record_null_values(self) -> None:
        """Test null name and file also fall back to placeholders."""
        frame = Frame.from_record(2, {"name": None, "file": None})
        assert frame.name == "frame_2"
        assert frame.file == "unknown"

    def test_from_record_non_string_name(self) -> None:
        """Test non-string names are converted to strings."""
        frame = Frame.from_record(0, {"name": 42})
        assert frame.name == "42"

    def test_negative_index_raises_error(self) -> None:
        """Test that a negative index raises ValueError."""
        with pytest.raises(ValueError, match="index cannot be negative"):
            Frame(index=-1, name="x")

    def test_frames_are_immutable(self) -> None:
        """Test frames cannot be changed after load."""
        frame = Frame(index=0, name="x")
        with pytest.raises(AttributeError):
            frame.name = "y"


class TestValidateDocument:
    """Tests for validate_document."""

    def test_valid_document(self) -> None:
        """Test frames and raw profiles are extracted."""
        frames, profiles = validate_document({
            "shared": {"frames": [{"name": "a"}, {"name": "b", "file": "b.py"}]},
            "profiles": [{"type": "sampled", "samples": []}],
        })
        assert [f.name for f in frames] == ["a", "b"]
        assert [f.index for f in frames] == [0, 1]
        assert frames[1].file == "b.py"
        assert len(profiles) == 1

    def test_missing_shared(self) -> None:
        """Test a missing shared object."""
        with pytest.raises(MalformedDocument, match="missing shared frames"):
            validate_document({"profiles": [{}]})

    def test_shared_not_object(self) -> None:
        """Test shared must be an object."""
        with pytest.raises(MalformedDocument, match="missing shared frames"):
            validate_document({"shared": [], "profiles": [{}]})

    @pytest.mark.parametrize("frames", [None, [], "frames", {"0": {}}])
    def test_invalid_frames(self, frames) -> None:
        """Test frames must be a non-empty array."""
        with pytest.raises(MalformedDocument, match="non-empty array"):
            validate_document({"shared": {"frames": frames}, "profiles": [{}]})

    @pytest.mark.parametrize("profiles", [None, [], {"type": "sampled"}])
    def test_invalid_profiles(self, profiles) -> None:
        """Test profiles must be a non-empty array."""
        with pytest.raises(MalformedDocument, match="at least one profile entry"):
            validate_document({"shared": {"frames": [{}]}, "profiles": profiles})

    def test_frame_entry_not_object(self) -> None:
        """Test each frame must be an object."""
        with pytest.raises(MalformedDocument, match="Invalid frame entry at index 1"):
            validate_document({
                "shared": {"frames": [{"name": "a"}, "b"]},
                "profiles": [{}],
            })


class TestDecodeProfileEntry:
    """Tests for decode_profile_entry."""

    def test_sampled_with_weights(self) -> None:
        """Test a sampled entry keeps samples and weights."""
        entry = decode_profile_entry(
            {"type": "sampled", "samples": [[0]], "weights": [3]}, 0
        )
        assert isinstance(entry, SampledProfile)
        assert entry.kind is ProfileKind.SAMPLED
        assert entry.samples == [[0]]
        assert entry.weights == [3]

    @pytest.mark.parametrize("weights", [None, [], "heavy", 5])
    def test_sampled_without_usable_weights(self, weights) -> None:
        """Test absent, empty or non-array weights mean implicit weight 1."""
        entry = decode_profile_entry(
            {"type": "sampled", "samples": [[0]], "weights": weights}, 0
        )
        assert entry.weights is None

    def test_sampled_missing_samples(self) -> None:
        """Test a sampled entry needs a samples array."""
        with pytest.raises(MalformedDocument, match="Sampled profile 3 is missing samples"):
            decode_profile_entry({"type": "sampled"}, 3)

    def test_evented(self) -> None:
        """Test an evented entry keeps its events."""
        events = [{"type": "O", "frame": 0, "at": 0}]
        entry = decode_profile_entry({"type": "evented", "events": events}, 1)
        assert isinstance(entry, EventedProfile)
        assert entry.kind is ProfileKind.EVENTED
        assert entry.index == 1
        assert entry.events == events

    def test_evented_non_array_events(self) -> None:
        """Test non-array events decode as an empty stream."""
        entry = decode_profile_entry({"type": "evented", "events": "none"}, 0)
        assert entry.events == []

    @pytest.mark.parametrize("profile_type", ["flamegraph", "", None, 1])
    def test_unsupported_type(self, profile_type) -> None:
        """Test unknown or missing types are rejected."""
        with pytest.raises(UnsupportedProfileType, match="Unsupported profile type at index 2") as excinfo:
            decode_profile_entry({"type": profile_type}, 2)
        assert excinfo.value.profile_index == 2

    def test_entry_not_object(self) -> None:
        """Test each profile entry must be an object."""
        with pytest.raises(MalformedDocument, match="Invalid profile at index 0"):
            decode_profile_entry(["sampled"], 0)


class TestEventType:
    """Tests for the event code enum."""

    def test_codes(self) -> None:
        """Test open and close use Speedscope letters."""
        assert EventType.OPEN.value == "O"
        assert EventType.CLOSE.value == "C"
        assert EventType("O") is EventType.OPEN
