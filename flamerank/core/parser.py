"""
flamerank.core.parser - Speedscope profile parsing and hotspot summary.

This module is the single entry point of the metrics engine. It validates a
decoded Speedscope document, dispatches every profile entry to the sampled
aggregator or the evented reconstructor, and ranks the combined per-frame
metrics into a hotspot summary.

Each call builds its own frame table and metrics arena and drops them when
it returns, so one parser instance can serve concurrent callers.

Classes:
    ProfileSummary: Ranked hotspots plus document totals
    SpeedscopeParser: Parser for Speedscope JSON documents

Functions:
    parse_speedscope_profile: Convenience wrapper around SpeedscopeParser
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from opentelemetry import trace

from flamerank.core.document import (
    EventedProfile,
    SampledProfile,
    decode_profile_entry,
    validate_document,
)
from flamerank.core.errors import InvalidNumber
from flamerank.core.evented import reconstruct_evented
from flamerank.core.metrics import FrameMetricsTable
from flamerank.core.ranker import Hotspot, rank_hotspots, round_to_int
from flamerank.core.sampled import aggregate_sampled

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass
class ProfileSummary:
    """Result of parsing one Speedscope document.

    Attributes:
        hotspots: Ranked hotspot records, rank 1 first
        totalSamples: Grand total observed time, rounded to an integer
        profileCount: Number of profile entries processed
    """
    hotspots: List[Hotspot]
    totalSamples: int
    profileCount: int

    def __post_init__(self) -> None:
        """Validate summary data after initialization."""
        if self.totalSamples < 0:
            raise ValueError("totalSamples cannot be negative")
        if self.profileCount < 0:
            raise ValueError("profileCount cannot be negative")

    @property
    def hotspot_count(self) -> int:
        """Get the number of ranked hotspots."""
        return len(self.hotspots)

    def top(self, limit: Optional[int] = None) -> List[Hotspot]:
        """Get the highest ranked hotspots.

        Args:
            limit: Maximum number of hotspots, None for all

        Returns:
            Hotspots in rank order
        """
        if limit is None:
            return list(self.hotspots)
        return self.hotspots[:max(0, limit)]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used on the wire."""
        return {
            "hotspots": [hotspot.to_dict() for hotspot in self.hotspots],
            "totalSamples": self.totalSamples,
            "profileCount": self.profileCount,
        }


@dataclass
class _ParseState:
    """Per-call working state; never shared between calls."""
    frame_count: int
    metrics: FrameMetricsTable
    observed: float = 0.0


class SpeedscopeParser:
    """Parser for Speedscope JSON profile documents.

    Supports parsing from:
    - JSON string format
    - An already decoded document (dicts and lists)

    Example:
        >>> parser = SpeedscopeParser()
        >>> summary = parser.parse_json(json_string)
        >>> print(summary.hotspots[0].name)
    """

    def parse_json(self, json_str: str) -> ProfileSummary:
        """Parse a Speedscope profile from a JSON string.

        Args:
            json_str: JSON string containing a Speedscope document

        Returns:
            ProfileSummary with ranked hotspots

        Raises:
            json.JSONDecodeError: If JSON is invalid
            SpeedscopeParseError: If the document cannot be analyzed
        """
        data = json.loads(json_str)
        return self.parse(data)

    def parse(self, document: Any) -> ProfileSummary:
        """Parse a decoded Speedscope document into a hotspot summary.

        The first structural violation aborts the whole parse; there is no
        partial result.

        Args:
            document: Decoded JSON document

        Returns:
            ProfileSummary with ranked hotspots

        Raises:
            SpeedscopeParseError: If the document cannot be analyzed
        """
        with tracer.start_as_current_span("flamerank.parse") as span:
            frames, raw_profiles = validate_document(document)
            span.set_attribute("flamerank.frame_count", len(frames))
            span.set_attribute("flamerank.profile_count", len(raw_profiles))

            state = _ParseState(
                frame_count=len(frames),
                metrics=FrameMetricsTable(len(frames)),
            )

            for profile_index, raw_profile in enumerate(raw_profiles):
                entry = decode_profile_entry(raw_profile, profile_index)
                observed = self._process_entry(entry, state)
                state.observed += observed
                if not (math.isfinite(state.observed) and state.metrics.all_finite()):
                    raise InvalidNumber(
                        f"Accumulated time overflows in profile {profile_index}",
                        profile_index,
                    )
                logger.debug(
                    "Processed %s profile %d: observed=%s",
                    entry.kind.value,
                    profile_index,
                    observed,
                )

            hotspots = rank_hotspots(frames, state.metrics, state.observed)
            span.set_attribute("flamerank.hotspot_count", len(hotspots))

            summary = ProfileSummary(
                hotspots=hotspots,
                totalSamples=round_to_int(state.observed),
                profileCount=len(raw_profiles),
            )

        logger.debug(
            "Parsed profile: frames=%d profiles=%d hotspots=%d total=%d",
            len(frames),
            summary.profileCount,
            summary.hotspot_count,
            summary.totalSamples,
        )
        return summary

    def _process_entry(self, entry: Any, state: _ParseState) -> float:
        """Dispatch one decoded entry to its accumulator.

        Args:
            entry: SampledProfile or EventedProfile
            state: Working state of the current parse

        Returns:
            Observed time contributed by this entry
        """
        if isinstance(entry, SampledProfile):
            return aggregate_sampled(entry, state.frame_count, state.metrics)
        if isinstance(entry, EventedProfile):
            return reconstruct_evented(entry, state.frame_count, state.metrics)
        raise TypeError(f"Unhandled profile entry: {type(entry).__name__}")


def parse_speedscope_profile(document: Any) -> ProfileSummary:
    """Parse a decoded Speedscope document with a fresh parser.

    Args:
        document: Decoded JSON document

    Returns:
        ProfileSummary with ranked hotspots

    Raises:
        SpeedscopeParseError: If the document cannot be analyzed
    """
    return SpeedscopeParser().parse(document)
