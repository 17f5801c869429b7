from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ImportContext:
    """
    Shared import context.
    This object is passed between orchestration layers.
    """

    config: Any
    logger: Any
    extractor: Any

    repository: Optional[Any] = None
    matcher: Optional[Any] = None

    stats: Dict[str, Any] = field(default_factory=dict)
    errors: list = field(default_factory=list)
