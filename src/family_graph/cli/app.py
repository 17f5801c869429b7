from __future__ import annotations

import typer

from family_graph.cli.commands import (
    check_command,
    import_command,
    layout_command,
    remove_command,
    share_app,
    stats_command,
)

app = typer.Typer(
    name="family",
    help="Family graph importer, checker, and layout exporter",
    add_completion=False,
)

app.command("import")(import_command)
app.command("layout")(layout_command)
app.command("stats")(stats_command)
app.command("check")(check_command)
app.command("remove")(remove_command)
app.add_typer(share_app, name="share")


def main():
    app()


if __name__ == "__main__":
    main()
