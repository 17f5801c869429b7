"""
family_graph: a genealogical graph engine.

Keeps a person set consistent under interactive edits and bulk
natural-language imports, and projects it into a positioned single-root
tree for rendering.
"""

__version__ = "0.1.0"
