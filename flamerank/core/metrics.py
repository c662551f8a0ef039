"""
flamerank.core.metrics - Per-frame time accumulators.

The metrics table is an arena: one slot per frame in the shared frame table,
stored as dense numpy arrays indexed directly by frame index. Sampled and
evented profiles write into the same table, so a document mixing both
encodings produces one combined set of metrics.

Accumulators:
=============

self_time:
    Time during which the frame was the innermost (leaf) active frame.

total_time:
    Time during which the frame was anywhere on the active stack. A frame
    that appears twice on one stack (recursion) is counted twice.

sample_count:
    Number of stack memberships, not number of samples.

hotspot_score:
    Derived by the ranker, never accumulated.

Classes:
    FrameMetrics: Read-only snapshot of one frame's accumulators
    FrameMetricsTable: Arena of accumulators for one parse call
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class FrameMetrics:
    """Snapshot of the accumulators for a single frame.

    Attributes:
        index: Frame table index
        self_time: Exclusive time
        total_time: Inclusive time
        sample_count: Stack memberships
        hotspot_score: Ranking score (0.0 until ranked)
    """
    index: int
    self_time: float
    total_time: float
    sample_count: int
    hotspot_score: float = 0.0


class FrameMetricsTable:
    """Dense per-frame accumulators for one parse call.

    Callers must pass indices already validated against the frame table;
    numpy would otherwise wrap negative indices silently.

    Example:
        >>> table = FrameMetricsTable(3)
        >>> table.add_stack([0, 1], 5.0)
        >>> table.snapshot(1).self_time
        5.0
    """

    def __init__(self, frame_count: int) -> None:
        """Allocate zeroed accumulators.

        Args:
            frame_count: Number of frames in the shared frame table
        """
        if frame_count <= 0:
            raise ValueError("frame_count must be positive")
        self.frame_count = frame_count
        self.self_time = np.zeros(frame_count, dtype=np.float64)
        self.total_time = np.zeros(frame_count, dtype=np.float64)
        self.sample_count = np.zeros(frame_count, dtype=np.int64)
        self.hotspot_score = np.zeros(frame_count, dtype=np.float64)

    def __len__(self) -> int:
        return self.frame_count

    def add_stack(self, stack: Sequence[int], amount: float) -> None:
        """Attribute an amount of time to an entire active stack.

        Every member gets ``amount`` added to its total time and one more
        stack membership; the last (innermost) member also gets it as
        self time.

        Args:
            stack: Validated frame indices, outer-to-inner
            amount: Weight or duration to attribute
        """
        if not stack:
            return
        members = np.asarray(stack, dtype=np.intp)
        # add.at accumulates repeated indices, so recursive frames count once per membership.
        # Overflow to inf is left for all_finite() to report.
        with np.errstate(over="ignore"):
            np.add.at(self.total_time, members, amount)
            self.self_time[stack[-1]] += amount
        np.add.at(self.sample_count, members, 1)

    def all_finite(self) -> bool:
        """Whether every time accumulator is still a finite number."""
        return bool(np.isfinite(self.total_time).all() and np.isfinite(self.self_time).all())

    def observed_indices(self) -> np.ndarray:
        """Indices of frames with any self or total time, in frame order."""
        return np.flatnonzero((self.total_time != 0) | (self.self_time != 0))

    def snapshot(self, index: int) -> FrameMetrics:
        """Return a read-only view of one frame's accumulators."""
        return FrameMetrics(
            index=index,
            self_time=float(self.self_time[index]),
            total_time=float(self.total_time[index]),
            sample_count=int(self.sample_count[index]),
            hotspot_score=float(self.hotspot_score[index]),
        )
