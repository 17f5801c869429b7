"""
Extraction collaborator contract: candidate records and extractors.
"""

from family_graph.extraction.client import (
    Extractor,
    HttpExtractor,
    StaticExtractor,
    extraction_context,
    parse_candidates,
)
from family_graph.extraction.models import CandidateRecord

__all__ = [
    "CandidateRecord",
    "Extractor",
    "HttpExtractor",
    "StaticExtractor",
    "extraction_context",
    "parse_candidates",
]
