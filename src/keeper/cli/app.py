"""
Root Typer application for the keeper CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from keeper import __version__
from keeper.cli.db import app as db_app
from keeper.cli.records import app as records_app

app = Typer(
    name="keeper",
    help="keeper - persistence layer for synchronized user records.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"keeper {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """keeper CLI - manage the schema and inspect synchronized records."""


app.add_typer(db_app, name="db", help="Database operations.")
app.add_typer(records_app, name="records", help="Record inspection.")


if __name__ == "__main__":  # pragma: no cover
    app()
