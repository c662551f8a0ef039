"""
flamerank.core.ranker - Hotspot ranking from accumulated frame metrics.

The ranker turns raw per-frame accumulators into percentages of the grand
total observed time, orders frames by a composite score and assigns dense
ranks starting at 1.

Scoring:
========

    inclusivePct = totalTime / grandTotal * 100     (2 decimals)
    exclusivePct = selfTime  / grandTotal * 100     (2 decimals)
    score        = inclusivePct * 0.6 + exclusivePct * 0.4

The score is computed from the rounded percentages, so two frames that
present identical percentages always tie. Ties keep frame table order.

Rounding is half-up on the exact binary value of the float, the same result
JavaScript's ``Number.prototype.toFixed`` gives, rather than Python's
round-half-even.

Classes:
    Hotspot: One ranked frame record

Functions:
    round_half_up: Presentation rounding helper
    rank_hotspots: Build the ranked hotspot list
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Dict, List, Sequence

import numpy as np

from flamerank.core.document import Frame
from flamerank.core.errors import InvalidNumber, NoMeasurableActivity
from flamerank.core.metrics import FrameMetricsTable

INCLUSIVE_WEIGHT = 0.6
EXCLUSIVE_WEIGHT = 0.4
PERCENT_PLACES = 2
TIME_PLACES = 3

# Wide enough to quantize any finite float without InvalidOperation
_DECIMAL_CONTEXT = Context(prec=400)


@dataclass
class Hotspot:
    """A frame with nonzero accumulated time, ready for reporting.

    Attributes:
        name: Frame name
        file: Frame source file
        selfTimeMs: Exclusive time, 3 decimals
        totalTimeMs: Inclusive time, 3 decimals
        sampleCount: Stack memberships
        inclusivePct: Share of grand total while on the stack, 2 decimals
        exclusivePct: Share of grand total while leaf, 2 decimals
        rank: Dense 1-based rank
    """
    name: str
    file: str
    selfTimeMs: float
    totalTimeMs: float
    sampleCount: int
    inclusivePct: float
    exclusivePct: float
    rank: int = 0

    def __post_init__(self) -> None:
        """Validate hotspot data after initialization."""
        if self.sampleCount < 0:
            raise ValueError("sampleCount cannot be negative")
        if self.rank < 0:
            raise ValueError("rank cannot be negative")

    @property
    def score(self) -> float:
        """Composite ordering score derived from the rounded percentages."""
        return composite_score(self.inclusivePct, self.exclusivePct)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used on the wire."""
        return asdict(self)


def round_half_up(value: float, places: int) -> float:
    """Round a float half-up to a fixed number of decimal places.

    Args:
        value: Finite value to round
        places: Number of digits after the decimal point

    Returns:
        Rounded value

    Example:
        >>> round_half_up(0.125, 2)
        0.13
        >>> round(0.125, 2)
        0.12
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(value).quantize(
        quantum, rounding=ROUND_HALF_UP, context=_DECIMAL_CONTEXT
    )
    return float(rounded)


def round_to_int(value: float) -> int:
    """Round to the nearest integer, halves upward."""
    return int(math.floor(value + 0.5))


def composite_score(inclusive_pct: float, exclusive_pct: float) -> float:
    return inclusive_pct * INCLUSIVE_WEIGHT + exclusive_pct * EXCLUSIVE_WEIGHT


def rank_hotspots(
    frames: Sequence[Frame], metrics: FrameMetricsTable, grand_total: float
) -> List[Hotspot]:
    """Normalize, score, sort and rank every observed frame.

    Frames that never received any time are left out. The computed score
    is written back into ``metrics.hotspot_score``.

    Args:
        frames: Shared frame table
        metrics: Accumulators filled by the aggregator and reconstructor
        grand_total: Observed time summed across all profile entries

    Returns:
        Hotspots ordered by descending score, ranks 1..N

    Raises:
        NoMeasurableActivity: If grand_total is not strictly positive
        InvalidNumber: If grand_total overflowed to infinity
    """
    if not grand_total > 0:
        raise NoMeasurableActivity("Profile contains no measurable samples or durations")
    if not math.isfinite(grand_total):
        raise InvalidNumber("Profile total time is not a finite number")

    indices = metrics.observed_indices()
    if len(indices) == 0:
        return []

    inclusive = metrics.total_time[indices] / grand_total * 100
    exclusive = metrics.self_time[indices] / grand_total * 100

    candidates: List[Hotspot] = []
    scores = np.zeros(len(indices), dtype=np.float64)

    for position, frame_index in enumerate(indices):
        frame = frames[frame_index]
        hotspot = Hotspot(
            name=frame.name,
            file=frame.file,
            selfTimeMs=round_half_up(float(metrics.self_time[frame_index]), TIME_PLACES),
            totalTimeMs=round_half_up(float(metrics.total_time[frame_index]), TIME_PLACES),
            sampleCount=int(metrics.sample_count[frame_index]),
            inclusivePct=round_half_up(float(inclusive[position]), PERCENT_PLACES),
            exclusivePct=round_half_up(float(exclusive[position]), PERCENT_PLACES),
        )
        scores[position] = hotspot.score
        metrics.hotspot_score[frame_index] = hotspot.score
        candidates.append(hotspot)

    # Stable sort keeps frame table order among equal scores
    order = np.argsort(-scores, kind="stable")

    ranked: List[Hotspot] = []
    for rank, position in enumerate(order, start=1):
        hotspot = candidates[position]
        hotspot.rank = rank
        ranked.append(hotspot)

    return ranked
