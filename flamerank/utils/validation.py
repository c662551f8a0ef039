"""
flamerank.utils.validation - Shape checks for decoded JSON trees.

Profile documents arrive as generic trees of dicts, lists, strings and
numbers. These predicates answer "is this value usable as X" without
raising, so callers can build an error that names the exact profile,
sample or event that failed.

Functions:
    is_record: True for JSON objects
    is_sequence: True for JSON arrays
    is_finite_number: True for finite, non-boolean numbers
    to_frame_index: Integer frame index or None when out of range
"""

from __future__ import annotations

import math
from typing import Any, Optional


def is_record(value: Any) -> bool:
    """Check whether a value decodes as a structured object.

    Args:
        value: Any decoded JSON value

    Returns:
        True if value is a dict
    """
    return isinstance(value, dict)


def is_sequence(value: Any) -> bool:
    """Check whether a value decodes as an ordered sequence.

    Strings are excluded even though they are iterable.
    """
    return isinstance(value, (list, tuple))


def is_finite_number(value: Any) -> bool:
    """Check whether a value is a finite number.

    JSON booleans decode to ``bool``, which Python treats as an ``int``
    subclass; they are rejected here. JSON integers too large for a float
    (``json`` decodes them as exact ints) count as infinite.

    Args:
        value: Any decoded JSON value

    Returns:
        True for ints and floats that are neither NaN nor infinite
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def to_frame_index(value: Any, frame_count: int) -> Optional[int]:
    """Convert a value into a frame index if it is a valid one.

    Integral floats such as ``2.0`` are accepted.

    Args:
        value: Candidate index from a sample or event
        frame_count: Size of the shared frame table

    Returns:
        The index as an int, or None if it is not an integer in
        ``[0, frame_count)``
    """
    if not is_finite_number(value):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if value < 0 or value >= frame_count:
        return None
    return value
