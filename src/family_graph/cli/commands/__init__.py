"""
CLI command modules for family_graph.

Each command module defines a single Typer-compatible command function
(``share`` defines a sub-application).
"""

from family_graph.cli.commands.check import check_command
from family_graph.cli.commands.import_text import import_command
from family_graph.cli.commands.layout import layout_command
from family_graph.cli.commands.remove import remove_command
from family_graph.cli.commands.share import share_app
from family_graph.cli.commands.stats import stats_command

__all__ = [
    "check_command",
    "import_command",
    "layout_command",
    "remove_command",
    "share_app",
    "stats_command",
]
