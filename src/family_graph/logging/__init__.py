"""
Logging package for ``family_graph``.

Use ``get_logger("<module>")`` to inherit the shared handlers and write to a
module-specific log file.
"""

from .logger import get_logger

__all__ = ["get_logger"]
