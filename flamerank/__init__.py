"""
flamerank - Speedscope profile analysis and hotspot ranking.

This package validates Speedscope profile documents (sampled and evented),
reconstructs per-frame inclusive and exclusive time, and ranks the frames
that consume the most time into a hotspot summary for reporting.

Example:
    >>> from flamerank import SpeedscopeParser
    >>> parser = SpeedscopeParser()
    >>> summary = parser.parse_json(json_str)
    >>> for hotspot in summary.top(5):
    ...     print(hotspot.rank, hotspot.name, hotspot.inclusivePct)
"""

__version__ = "0.1.0"
__author__ = "KR"
__email__ = "Karthickrajam18@gmail.com"

from flamerank.core.errors import SpeedscopeParseError, is_speedscope_parse_error
from flamerank.core.document import Frame
from flamerank.core.ranker import Hotspot
from flamerank.core.parser import ProfileSummary, SpeedscopeParser, parse_speedscope_profile

__all__ = [
    "SpeedscopeParseError",
    "is_speedscope_parse_error",
    "Frame",
    "Hotspot",
    "ProfileSummary",
    "SpeedscopeParser",
    "parse_speedscope_profile",
]
