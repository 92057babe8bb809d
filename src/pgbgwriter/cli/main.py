"""CLI for pgbgwriter.

works as the command behind an agent user parameter (it prints just the
value) and is handy on its own for poking at a server or a csv snapshot.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import sqlglot
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table
from sqlglot.errors import SqlglotError

from pgbgwriter.agent import AgentHandler
from pgbgwriter.config import ConnectionSettings, load_settings
from pgbgwriter.errors import MetricError
from pgbgwriter.executor.duckdb_executor import DuckDBExecutor
from pgbgwriter.models.query import AgentResult
from pgbgwriter.parser.keys import parse_key
from pgbgwriter.store import MetricStore

app = typer.Typer(
    name="pgbw",
    help="pgbgwriter - PostgreSQL background writer metrics",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_settings(config: Path | None, dsn: str | None, database: str | None) -> ConnectionSettings:
    settings = load_settings(config) if config else ConnectionSettings()
    return settings.with_overrides(dsn=dsn, database=database)


def _snapshot_factory(snapshot: Path):
    def factory(settings: ConnectionSettings) -> DuckDBExecutor:
        executor = DuckDBExecutor()
        try:
            executor.load_snapshot_csv(snapshot)
        except (OSError, MetricError):
            executor.close()
            raise
        return executor

    return factory


def format_sql(sql: str) -> str:
    """Pretty-print SQL with sqlglot, falling back to the raw text."""
    try:
        return sqlglot.parse_one(sql, dialect="postgres").sql(dialect="postgres", pretty=True)
    except SqlglotError:
        return sql


@app.command()
def get(
    key: Annotated[str, typer.Argument(help="Item key, e.g. pg.checkpoint_time_ratio[,,sync]")],
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="YAML connection settings")
    ] = None,
    dsn: Annotated[str | None, typer.Option("--dsn", help="libpq connection string")] = None,
    database: Annotated[str | None, typer.Option("--db", help="Database name")] = None,
    snapshot: Annotated[
        Path | None, typer.Option("--snapshot", help="Evaluate against a pg_stat_bgwriter CSV")
    ] = None,
    show_sql: Annotated[bool, typer.Option("--sql", "-s", help="Show the SQL that was run")] = False,
    output: Annotated[str, typer.Option("--output", "-o", help="Output format: plain, json")] = "plain",
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Evaluate one item key and print its value."""
    _configure_logging(verbose)

    try:
        settings = _load_settings(config, dsn, database)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error loading settings: {e}[/red]")
        raise typer.Exit(1)

    if snapshot:
        handler = AgentHandler(
            settings.model_copy(update={"detect_version": False}),
            executor_factory=_snapshot_factory(snapshot),
            report_error=_report_error,
        )
    else:
        handler = AgentHandler(settings, report_error=_report_error)

    try:
        result = handler.handle(key)
    except OSError as e:
        _report_error(str(e))
        raise typer.Exit(1)

    if show_sql and result.sql:
        # as executed, after server version detection
        _print_sql_text(result.sql)

    if not result.ok:
        raise typer.Exit(1)

    _output_result(key, result, output)


def _report_error(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")


def _output_result(key: str, result: AgentResult, output_format: str) -> None:
    if output_format == "json":
        payload = {"key": key, "value": result.value, "type": result.result_type.value}
        console.print_json(json.dumps(payload, default=str))
    else:
        # plain print so agents get just the value, no markup
        typer.echo(result.value)


def _print_sql(key: str, server_version: int | None = None) -> None:
    request = parse_key(key)
    action = request.param(2)
    with MetricStore(None, server_version) as store:
        sql = store.get_sql(request.metric_name, action)
    _print_sql_text(sql)


def _print_sql_text(sql: str) -> None:
    console.print(Syntax(format_sql(sql), "sql", theme="monokai", line_numbers=True))
    console.print()


@app.command("show-sql")
def show_sql(
    key: Annotated[str, typer.Argument(help="Item key")],
    server_version: Annotated[
        int | None,
        typer.Option("--server-version", help="server_version_num, e.g. 170002"),
    ] = None,
) -> None:
    """Show generated SQL without executing."""
    try:
        _print_sql(key, server_version)
    except MetricError as e:
        console.print(f"[red]Error generating SQL: {e}[/red]")
        raise typer.Exit(1)


@app.command("list")
def list_items(
    item_type: Annotated[str, typer.Argument(help="Type: fields or keys")] = "fields",
    server_version: Annotated[
        int | None,
        typer.Option("--server-version", help="Only fields present on this server_version_num"),
    ] = None,
) -> None:
    """List known stats fields or derived keys."""
    with MetricStore(None, server_version) as store:
        if item_type == "fields":
            _list_fields(store)
        elif item_type == "keys":
            _list_keys(store)
        else:
            console.print(f"[red]Unknown type: {item_type}. Use: fields, keys[/red]")
            raise typer.Exit(1)


def _list_fields(store: MetricStore) -> None:
    table = Table(title="pg_stat_bgwriter fields")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Type", style="green")
    table.add_column("Description")

    for field in store.list_fields():
        table.add_row(f"pg.{field['name']}", field["type"], field["description"] or "-")

    console.print(table)


def _list_keys(store: MetricStore) -> None:
    table = Table(title="Derived keys")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Type", style="green")
    table.add_column("Parameters", style="yellow")
    table.add_column("Description")

    for key in store.list_keys():
        table.add_row(
            key["key"],
            key["type"],
            ", ".join(key["params"]) or "-",
            key["description"] or "-",
        )

    console.print(table)


if __name__ == "__main__":
    app()
