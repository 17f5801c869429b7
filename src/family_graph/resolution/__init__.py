"""
Entity resolution: candidate records to people, by pluggable name matching.
"""

from family_graph.resolution.matching import (
    ExactNameMatcher,
    FuzzyNameMatcher,
    NameLookup,
    NameMatcher,
    matcher_from_config,
)
from family_graph.resolution.resolver import ResolutionResult, resolve_candidates

__all__ = [
    "ExactNameMatcher",
    "FuzzyNameMatcher",
    "NameLookup",
    "NameMatcher",
    "ResolutionResult",
    "matcher_from_config",
    "resolve_candidates",
]
