"""
flamerank.utils - Helpers for inspecting untyped profile documents.

This subpackage contains utility functions:
- validation: Predicates for JSON objects, arrays, numbers and frame indices
"""

from flamerank.utils.validation import (
    is_record,
    is_sequence,
    is_finite_number,
    to_frame_index,
)

__all__ = [
    "is_record",
    "is_sequence",
    "is_finite_number",
    "to_frame_index",
]
