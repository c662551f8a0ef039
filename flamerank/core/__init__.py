"""
flamerank.core - Speedscope validation, time attribution and hotspot ranking.

This subpackage contains the metrics engine:
- errors: SpeedscopeParseError hierarchy and the client-fault predicate
- document: Frame table and profile entry validation
- metrics: FrameMetricsTable arena of per-frame accumulators
- sampled: Aggregation of sampled profiles
- evented: Call-stack reconstruction of evented profiles
- ranker: Hotspot normalization, scoring and ranking
- parser: SpeedscopeParser entry point and ProfileSummary
"""

from flamerank.core.errors import SpeedscopeParseError, is_speedscope_parse_error
from flamerank.core.document import Frame, EventType, ProfileKind
from flamerank.core.metrics import FrameMetrics, FrameMetricsTable
from flamerank.core.ranker import Hotspot
from flamerank.core.parser import ProfileSummary, SpeedscopeParser, parse_speedscope_profile

__all__ = [
    "SpeedscopeParseError",
    "is_speedscope_parse_error",
    "Frame",
    "EventType",
    "ProfileKind",
    "FrameMetrics",
    "FrameMetricsTable",
    "Hotspot",
    "ProfileSummary",
    "SpeedscopeParser",
    "parse_speedscope_profile",
]
