"""
CLI: ``keeper records`` - read-only inspection of a user's records.
"""

from __future__ import annotations

from datetime import datetime

import typer

from keeper.cli.utils import load_settings, output_rows, run_with_database
from keeper.core.database import Database
from keeper.core.records import Record, RecordEngine
from keeper.core.timestamps import from_rfc3339
from keeper.core.users import UserRepository

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_records(
    table: str = typer.Argument(..., help="Record table, e.g. TextData"),
    username: str = typer.Option(..., "--user", "-u", help="Owning username"),
    since: str | None = typer.Option(None, "--since", help="RFC 3339 sync cursor"),
    include_deleted: bool = typer.Option(False, "--include-deleted", help="Show soft-deleted records"),
    dsn: str | None = typer.Option(None, "--dsn", "-d", help="Override KEEPER_DSN"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List a user's records in TABLE."""
    settings = load_settings(dsn)
    cursor: datetime | None = None
    if since:
        try:
            cursor = from_rfc3339(since)
        except ValueError as exc:
            raise typer.BadParameter(f"invalid timestamp: {since}", param_hint="--since") from exc

    async def _list(db: Database) -> list[Record]:
        user_id = await UserRepository(db).get_user_id(username)
        return await RecordEngine(db).get_all_records(table, user_id, cursor, include_deleted)

    rows = run_with_database(settings, _list)
    output_rows(rows, as_json=json_out, title=table)
