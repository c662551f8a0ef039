"""
flamerank.core.evented - Call-stack reconstruction for evented profiles.

An evented profile is a stream of open ("O") and close ("C") events, each
naming a frame and carrying a timestamp. Replaying the stream rebuilds the
call stack over time; the gap between two consecutive events is attributed
to whatever stack was active during that gap.

Time attribution:
=================

For event i with timestamp ``at`` and the next event's timestamp ``next_at``:

    delta = next_at - at

Event i pushes or pops first, and the delta is then attributed to the
resulting stack: the gap that follows an event belongs to the stack that
event produced. A push or pop never changes an interval already measured.
Gaps with an empty stack are not attributed to anything and do not count as
observed time.

    Open(main, 0)  Open(work, 2)  Close(work, 6)  Close(main, 10)
    [0, 2)    stack=[main]         main +2 (self)
    [2, 6)    stack=[main, work]   main +4, work +4 (self)
    [6, 10)   stack=[main]         main +4 (self)
    main: total 10, self 6       work: total 4, self 4

Functions:
    reconstruct_evented: Replay one evented profile into a metrics table
"""

from __future__ import annotations

from typing import Any, List

from flamerank.core.document import EventedProfile, EventType
from flamerank.core.errors import (
    InvalidEventType,
    InvalidFrameReference,
    InvalidNumber,
    MalformedEventStream,
    NonMonotonicTimestamps,
    UnbalancedStack,
    UnclosedFrames,
)
from flamerank.core.metrics import FrameMetricsTable
from flamerank.utils.validation import is_finite_number, is_record, to_frame_index


def _event_at(events: List[Any], event_index: int, profile_index: int) -> dict:
    raw_event = events[event_index]
    if not is_record(raw_event):
        raise MalformedEventStream(
            f"Invalid event entry at profile {profile_index}, index {event_index}",
            profile_index,
        )
    return raw_event


def _timestamp(event: dict, event_index: int, profile_index: int) -> float:
    at = event.get("at")
    if not is_finite_number(at):
        raise InvalidNumber(
            f"Invalid event timestamp at profile {profile_index}, index {event_index}",
            profile_index,
        )
    return at


def reconstruct_evented(
    profile: EventedProfile, frame_count: int, metrics: FrameMetricsTable
) -> float:
    """Replay an open/close event stream and attribute time to frames.

    Args:
        profile: Decoded evented profile entry
        frame_count: Size of the shared frame table
        metrics: Table shared across all entries of the document

    Returns:
        Total observed duration (sum of positive deltas with a non-empty stack)

    Raises:
        MalformedEventStream: Fewer than two events, or an event is not an object
        InvalidFrameReference: An event names a frame outside the table
        InvalidNumber: An event timestamp is not a finite number
        NonMonotonicTimestamps: A timestamp is earlier than the previous one
        UnbalancedStack: A close does not match the frame on top of the stack
        InvalidEventType: An event type is neither "O" nor "C"
        UnclosedFrames: Frames remain open after the last event
    """
    events = profile.events
    profile_index = profile.index

    if len(events) < 2:
        raise MalformedEventStream(
            f"Evented profile {profile_index} must include at least two events",
            profile_index,
        )

    stack: List[int] = []
    observed = 0.0
    last_index = len(events) - 1

    for event_index in range(len(events)):
        event = _event_at(events, event_index, profile_index)
        raw_type = event.get("type")
        event_type = "" if raw_type is None else str(raw_type)

        frame = to_frame_index(event.get("frame"), frame_count)
        if frame is None:
            raise InvalidFrameReference(
                f"Invalid event frame at profile {profile_index}, index {event_index}",
                profile_index,
            )
        at = _timestamp(event, event_index, profile_index)

        delta = 0.0
        if event_index < last_index:
            next_event = _event_at(events, event_index + 1, profile_index)
            delta = _timestamp(next_event, event_index + 1, profile_index) - at

            if delta < 0:
                raise NonMonotonicTimestamps(
                    f"Event timestamps must be non-decreasing in profile {profile_index} "
                    f"(event {event_index + 1} is earlier than event {event_index})",
                    profile_index,
                )

        if event_type == EventType.OPEN.value:
            stack.append(frame)
        elif event_type == EventType.CLOSE.value:
            closing = stack.pop() if stack else None
            if closing != frame:
                expected = "none" if closing is None else str(closing)
                raise UnbalancedStack(
                    f"Unbalanced event stack in profile {profile_index} at event "
                    f"{event_index} (expected {expected}, got {frame})",
                    profile_index,
                    event_index,
                    closing,
                    frame,
                )
        else:
            raise InvalidEventType(
                f"Invalid event type at profile {profile_index}, index {event_index}: "
                f"{event_type}",
                profile_index,
            )

        if delta > 0 and stack:
            observed += delta
            metrics.add_stack(stack, delta)

    if stack:
        raise UnclosedFrames(
            f"Unclosed frames in evented profile {profile_index}",
            profile_index,
            list(stack),
        )

    return observed
