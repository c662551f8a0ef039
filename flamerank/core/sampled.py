"""
flamerank.core.sampled - Aggregation of sampled profile entries.

A sampled profile is a list of call stacks captured at intervals, each with
an optional weight (usually a duration). Every sample contributes its
weight to the total time of each frame on its stack and to the self time
of its innermost frame.

Malformed individual samples (missing, non-array or empty stacks) are
skipped rather than rejected: one noisy sample should not invalidate an
entire trace. Bad weights and bad frame references are still fatal.

Functions:
    aggregate_sampled: Accumulate one sampled profile into a metrics table
"""

from __future__ import annotations

from typing import Any, List

from flamerank.core.document import SampledProfile
from flamerank.core.errors import InvalidFrameReference, InvalidWeight
from flamerank.core.metrics import FrameMetricsTable
from flamerank.utils.validation import is_finite_number, is_sequence, to_frame_index


def _resolve_weight(profile: SampledProfile, sample_index: int) -> float:
    """Read the weight of one sample.

    Args:
        profile: The sampled profile being aggregated
        sample_index: Position of the sample

    Returns:
        The weight, or 1 when the profile carries no weights

    Raises:
        InvalidWeight: If the weight is missing, non-numeric or non-finite
    """
    if profile.weights is None:
        return 1
    weight: Any = None
    if sample_index < len(profile.weights):
        weight = profile.weights[sample_index]
    if not is_finite_number(weight):
        raise InvalidWeight(
            f"Invalid weight at sampled profile {profile.index}, index {sample_index}",
            profile.index,
            sample_index,
        )
    return weight


def _resolve_stack(
    profile: SampledProfile, sample_index: int, raw_stack: List[Any], frame_count: int
) -> List[int]:
    """Validate every frame index of one sample's stack."""
    stack: List[int] = []
    for raw_index in raw_stack:
        frame_index = to_frame_index(raw_index, frame_count)
        if frame_index is None:
            raise InvalidFrameReference(
                f"Invalid frame reference in sampled profile {profile.index}, "
                f"sample {sample_index}",
                profile.index,
            )
        stack.append(frame_index)
    return stack


def aggregate_sampled(
    profile: SampledProfile, frame_count: int, metrics: FrameMetricsTable
) -> float:
    """Accumulate one sampled profile into the shared metrics table.

    Args:
        profile: Decoded sampled profile entry
        frame_count: Size of the shared frame table
        metrics: Table shared across all entries of the document

    Returns:
        Sum of the weights of all counted samples

    Raises:
        InvalidWeight: If a supplied weight is not a finite number
        InvalidFrameReference: If a stack references a frame outside the table
    """
    observed = 0.0

    for sample_index, raw_stack in enumerate(profile.samples):
        if not is_sequence(raw_stack) or len(raw_stack) == 0:
            continue

        weight = _resolve_weight(profile, sample_index)
        if weight <= 0:
            continue

        stack = _resolve_stack(profile, sample_index, raw_stack, frame_count)
        observed += weight
        metrics.add_stack(stack, weight)

    return observed
