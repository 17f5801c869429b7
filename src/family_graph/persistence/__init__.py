"""
Persistence and sharing: injected repositories plus the share-link codec.
"""

from family_graph.persistence.repository import (
    InMemoryRepository,
    JsonFileRepository,
    Repository,
)
from family_graph.persistence.share import (
    build_share_link,
    decode_share,
    encode_share,
    token_from_link,
)

__all__ = [
    "InMemoryRepository",
    "JsonFileRepository",
    "Repository",
    "build_share_link",
    "decode_share",
    "encode_share",
    "token_from_link",
]
