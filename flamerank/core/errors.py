"""
flamerank.core.errors - Error taxonomy for Speedscope profile parsing.

Every failure raised while validating or replaying a profile document is a
subclass of SpeedscopeParseError. These are client faults: the document the
caller handed in is unusable, and the message is safe to surface verbatim.
Anything else escaping the parser is an internal failure.

Classes:
    SpeedscopeParseError: Base class for all document-level failures
    MalformedDocument: Top-level structure problems
    InvalidFrameReference: Frame index out of range or not an integer
    InvalidNumber: A number was required but something else was found
    InvalidWeight: A sample weight failed numeric validation
    UnsupportedProfileType: Profile entry kind is neither sampled nor evented
    MalformedEventStream: Evented profile is too short or has bad entries
    NonMonotonicTimestamps: Event timestamps went backwards
    UnbalancedStack: Close event does not match the top of the stack
    InvalidEventType: Event type is neither open nor close
    UnclosedFrames: Frames still open after the last event
    NoMeasurableActivity: Valid document with zero observed time

Functions:
    is_speedscope_parse_error: Client-fault predicate
"""

from __future__ import annotations

from typing import List, Optional


class SpeedscopeParseError(ValueError):
    """Base class for profile documents that cannot be analyzed.

    Attributes:
        message: Human readable diagnostic
        profile_index: Index of the offending profile entry, if any
    """

    def __init__(self, message: str, profile_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.profile_index = profile_index


class MalformedDocument(SpeedscopeParseError):
    """Raised for missing or empty shared frames, profiles, or non-object roots."""


class InvalidFrameReference(SpeedscopeParseError):
    """Raised when a sample or event references a frame outside the table."""


class InvalidNumber(SpeedscopeParseError):
    """Raised when a finite number was required."""


class InvalidWeight(InvalidNumber):
    """Raised when a sample weight is non-numeric or non-finite."""

    def __init__(self, message: str, profile_index: int, sample_index: int) -> None:
        super().__init__(message, profile_index)
        self.sample_index = sample_index


class UnsupportedProfileType(SpeedscopeParseError):
    """Raised when a profile entry is neither sampled nor evented."""

    def __init__(self, message: str, profile_index: int, profile_type: str) -> None:
        super().__init__(message, profile_index)
        self.profile_type = profile_type


class MalformedEventStream(SpeedscopeParseError):
    """Raised for evented profiles with fewer than two events or bad entries."""


class NonMonotonicTimestamps(SpeedscopeParseError):
    """Raised when an event timestamp is earlier than the one before it."""


class UnbalancedStack(SpeedscopeParseError):
    """Raised when a close event does not match the frame on top of the stack.

    Attributes:
        event_index: Position of the close event in the stream
        expected: Frame index on top of the stack (None when the stack was empty)
        actual: Frame index the close event named
    """

    def __init__(
        self,
        message: str,
        profile_index: int,
        event_index: int,
        expected: Optional[int],
        actual: int,
    ) -> None:
        super().__init__(message, profile_index)
        self.event_index = event_index
        self.expected = expected
        self.actual = actual


class InvalidEventType(SpeedscopeParseError):
    """Raised when an event type is neither open nor close."""


class UnclosedFrames(SpeedscopeParseError):
    """Raised when frames are still open after the final event."""

    def __init__(self, message: str, profile_index: int, open_frames: List[int]) -> None:
        super().__init__(message, profile_index)
        self.open_frames = open_frames


class NoMeasurableActivity(SpeedscopeParseError):
    """Raised when the document is valid but no time was observed."""


def is_speedscope_parse_error(error: object) -> bool:
    """Tell client faults apart from internal failures.

    Args:
        error: Any exception (or object) caught by the caller

    Returns:
        True if the error describes a malformed profile document
    """
    return isinstance(error, SpeedscopeParseError)
