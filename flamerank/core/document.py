"""
flamerank.core.document - Speedscope document validation.

This module type-checks a decoded Speedscope JSON document and extracts the
two things the metrics engine needs: the shared frame table and the list of
profile entries. Profile entries are decoded one at a time by the parser so
that the first structural violation in document order is the one reported.

Speedscope document shape:
=========================

    {
        "shared": {"frames": [{"name": "main", "file": "main.py"}, ...]},
        "profiles": [
            {"type": "sampled", "samples": [[0, 1], [0, 2]], "weights": [5, 3]},
            {"type": "evented", "events": [{"type": "O", "frame": 0, "at": 0}, ...]}
        ]
    }

Classes:
    Frame: Immutable frame table entry
    ProfileKind: The two supported profile encodings
    EventType: Open/close event codes used by evented profiles
    SampledProfile: Sampled profile entry (stacks plus optional weights)
    EventedProfile: Evented profile entry (open/close stream)

Functions:
    validate_document: Extract the frame table and raw profile entries
    decode_profile_entry: Turn one raw profile entry into a typed variant
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from flamerank.core.errors import MalformedDocument, UnsupportedProfileType
from flamerank.utils.validation import is_record, is_sequence

DEFAULT_FILE = "unknown"


@dataclass(frozen=True)
class Frame:
    """A named call site in the shared frame table.

    Attributes:
        index: Position in the frame table
        name: Function or call-site name
        file: Source file, "unknown" when the document does not say
    """
    index: int
    name: str
    file: str = DEFAULT_FILE

    def __post_init__(self) -> None:
        """Validate frame data after initialization."""
        if self.index < 0:
            raise ValueError("index cannot be negative")

    @classmethod
    def from_record(cls, index: int, record: dict) -> "Frame":
        """Build a frame from its JSON object, filling in defaults.

        Args:
            index: Position of the record in shared.frames
            record: The decoded frame object

        Returns:
            Frame with name ``frame_<index>`` and file ``unknown`` when absent
        """
        name = record.get("name")
        file = record.get("file")
        return cls(
            index=index,
            name=f"frame_{index}" if name is None else str(name),
            file=DEFAULT_FILE if file is None else str(file),
        )


class ProfileKind(str, Enum):
    """Profile entry encodings, as written in the entry's ``type`` field."""
    SAMPLED = "sampled"
    EVENTED = "evented"


class EventType(str, Enum):
    """Event codes of an evented profile."""
    OPEN = "O"
    CLOSE = "C"


@dataclass
class SampledProfile:
    """A profile entry made of pre-collapsed stack samples.

    Samples are kept as decoded so the aggregator can skip malformed ones
    individually instead of rejecting the whole entry.

    Attributes:
        index: Position of this entry in the document's profiles list
        samples: Stacks, outer-to-inner, one per sample
        weights: Per-sample weights, or None for implicit weight 1
    """
    index: int
    samples: List[Any] = field(default_factory=list)
    weights: Optional[List[Any]] = None

    kind = ProfileKind.SAMPLED


@dataclass
class EventedProfile:
    """A profile entry made of timestamped open/close events.

    Attributes:
        index: Position of this entry in the document's profiles list
        events: Raw event objects in stream order
    """
    index: int
    events: List[Any] = field(default_factory=list)

    kind = ProfileKind.EVENTED


ProfileEntry = Union[SampledProfile, EventedProfile]


def validate_document(document: Any) -> Tuple[List[Frame], List[Any]]:
    """Check the top-level document structure.

    Args:
        document: Decoded JSON value handed in by the caller

    Returns:
        Tuple of (frame table, raw profile entries)

    Raises:
        MalformedDocument: If the root, shared.frames or profiles are unusable
    """
    if not is_record(document):
        raise MalformedDocument("Profile must be a JSON object")

    shared = document.get("shared")
    if not is_record(shared):
        raise MalformedDocument("Profile is missing shared frames")

    raw_frames = shared.get("frames")
    if not is_sequence(raw_frames) or len(raw_frames) == 0:
        raise MalformedDocument("Profile shared.frames must be a non-empty array")

    profiles = document.get("profiles")
    if not is_sequence(profiles) or len(profiles) == 0:
        raise MalformedDocument("Profile must include at least one profile entry")

    frames: List[Frame] = []
    for idx, raw_frame in enumerate(raw_frames):
        if not is_record(raw_frame):
            raise MalformedDocument(f"Invalid frame entry at index {idx}")
        frames.append(Frame.from_record(idx, raw_frame))

    return frames, list(profiles)


def decode_profile_entry(raw_profile: Any, profile_index: int) -> ProfileEntry:
    """Decode one raw profile entry into its typed variant.

    Args:
        raw_profile: The decoded profile object
        profile_index: Position of the entry in the document

    Returns:
        SampledProfile or EventedProfile

    Raises:
        MalformedDocument: If the entry is not an object, or a sampled
            entry has no samples array
        UnsupportedProfileType: If ``type`` is neither sampled nor evented
    """
    if not is_record(raw_profile):
        raise MalformedDocument(
            f"Invalid profile at index {profile_index}", profile_index
        )

    raw_type = raw_profile.get("type")
    profile_type = "" if raw_type is None else str(raw_type)

    if profile_type == ProfileKind.SAMPLED.value:
        samples = raw_profile.get("samples")
        if not is_sequence(samples):
            raise MalformedDocument(
                f"Sampled profile {profile_index} is missing samples array",
                profile_index,
            )
        weights = raw_profile.get("weights")
        # An empty or non-array weights field means every sample weighs 1
        if not is_sequence(weights) or len(weights) == 0:
            weights = None
        return SampledProfile(
            index=profile_index,
            samples=list(samples),
            weights=None if weights is None else list(weights),
        )

    if profile_type == ProfileKind.EVENTED.value:
        events = raw_profile.get("events")
        return EventedProfile(
            index=profile_index,
            events=list(events) if is_sequence(events) else [],
        )

    raise UnsupportedProfileType(
        f"Unsupported profile type at index {profile_index}: {profile_type}",
        profile_index,
        profile_type,
    )
