"""
CLI entry point for localstore.

This module provides the Typer-based command-line interface for inspecting
and editing tables kept in a SQLite-backed key-value store.

Commands:
    create-table  Create (or reset) a table
    insert        Insert a record and print its identifier
    update        Replace a stored record
    delete        Delete a record by identifier
    query         List records matching a scope, ordered and paginated
    count         Count records matching a scope
    tables        List stored table keys

Architecture Note:
    The CLI is intentionally thin - it parses arguments and delegates to
    LocalStorageConnector, the same object a model layer would use.
"""

import asyncio
import json
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, Awaitable, Callable, NoReturn, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from localstore import __version__
from localstore.connector import LocalStorageConnector
from localstore.errors import RecordNotFoundError
from localstore.log import configure_logging
from localstore.model import Model, model_for
from localstore.schema import ConnectorConfig, Order, SortDirection, load_config
from localstore.storage import SQLiteStorage

app = typer.Typer(
    name="localstore",
    help="Query and edit tables stored as JSON in a key-value store.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

T = TypeVar("T")


@dataclass
class CliState:
    """Options shared by every command."""

    db_path: Path
    config: ConnectorConfig
    debug: bool = False


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]localstore[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    db: Annotated[
        Path,
        typer.Option(
            "--db",
            help="Path to the SQLite database holding the tables.",
            resolve_path=True,
        ),
    ] = Path("localstore.db"),
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="YAML file with the storage key prefix/postfix.",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log storage activity to stderr."),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show full error tracebacks."),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    localstore - tables of JSON records in a key-value store.
    """
    configure_logging(level="DEBUG" if verbose else None, force=verbose)
    try:
        connector_config = load_config(config) if config else ConnectorConfig()
    except Exception as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(code=1)
    ctx.obj = CliState(db_path=db, config=connector_config, debug=debug)


# =============================================================================
# Helpers
# =============================================================================


def _fail(state: CliState, error: Exception) -> NoReturn:
    """Report an error and exit with code 1."""
    console.print(f"[red]Error: {error}[/red]")
    if state.debug:
        console.print(f"[dim]{traceback.format_exc()}[/dim]")
    raise typer.Exit(code=1)


def _parse_json_object(text: str, what: str) -> dict[str, Any]:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _parse_order(specs: list[str]) -> Order | None:
    """Turn ``field[:asc|desc]`` strings into an order mapping."""
    if not specs:
        return None
    order: dict[str, str] = {}
    for spec in specs:
        name, _, direction = spec.partition(":")
        order[name] = SortDirection(direction.lower() or "asc").value
    return order


def _run(state: CliState, operation: Callable[[LocalStorageConnector], Awaitable[T]]) -> T:
    """Open the store, run one connector coroutine against it and return its result."""
    with SQLiteStorage(state.db_path) as storage:
        connector = LocalStorageConnector(storage, state.config)
        return asyncio.run(operation(connector))


def _format_value(value: Any) -> str:
    if value is None:
        return "[dim]null[/dim]"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _display_records(records: list[dict[str, Any]], identifier: str) -> None:
    columns = [identifier]
    for record in records:
        for name in record:
            if name not in columns:
                columns.append(name)

    table = Table(show_header=True, header_style="bold")
    for name in columns:
        table.add_column(name, style="cyan" if name == identifier else None)
    for record in records:
        table.add_row(*(_format_value(record.get(name)) for name in columns))
    console.print(table)


# =============================================================================
# Commands
# =============================================================================


TableArg = Annotated[str, typer.Argument(help="Logical table name.")]
IdentifierOpt = Annotated[
    str,
    typer.Option("--identifier", "-i", help="Name of the identifier field."),
]


@app.command("create-table")
def create_table(ctx: typer.Context, table: TableArg) -> None:
    """
    Create a table, discarding any records already stored under its key.

    Example:
        $ localstore create-table users
    """
    state: CliState = ctx.obj
    try:
        _run(state, lambda c: c.create_table(model_for(table)))
    except Exception as e:
        _fail(state, e)
    console.print(f"[green]✓[/green] Created table [bold]{table}[/bold]")


@app.command()
def insert(
    ctx: typer.Context,
    table: TableArg,
    attributes: Annotated[str, typer.Argument(help="Record attributes as a JSON object.")],
    identifier: IdentifierOpt = "id",
) -> None:
    """
    Insert a record and print the identifier it was assigned.

    Example:
        $ localstore insert users '{"name": "foo", "age": 18}'
    """
    state: CliState = ctx.obj
    try:
        model = model_for(table, identifier)
        record: Model = model(**_parse_json_object(attributes, "attributes"))
        _run(state, lambda c: c.save(record))
    except Exception as e:
        _fail(state, e)
    console.print(getattr(record, identifier))


@app.command()
def update(
    ctx: typer.Context,
    table: TableArg,
    record_id: Annotated[int, typer.Argument(help="Identifier of the record to replace.")],
    attributes: Annotated[str, typer.Argument(help="New record attributes as a JSON object.")],
    identifier: IdentifierOpt = "id",
) -> None:
    """
    Replace a stored record with new attributes.

    Example:
        $ localstore update users 1 '{"name": "bar", "age": 19}'
    """
    state: CliState = ctx.obj
    try:
        model = model_for(table, identifier)
        data = _parse_json_object(attributes, "attributes")
        record = model.from_record({**data, identifier: record_id})
        _run(state, lambda c: c.save(record))
    except Exception as e:
        _fail(state, e)
    console.print(f"[green]✓[/green] Updated {table} {identifier}={record_id}")


@app.command()
def delete(
    ctx: typer.Context,
    table: TableArg,
    record_id: Annotated[int, typer.Argument(help="Identifier of the record to delete.")],
    identifier: IdentifierOpt = "id",
) -> None:
    """
    Delete a record by identifier.

    Fails if no record with that identifier is stored.

    Example:
        $ localstore delete users 1
    """
    state: CliState = ctx.obj
    model = model_for(table, identifier)
    record = model.from_record({identifier: record_id})

    async def remove(connector: LocalStorageConnector) -> None:
        if await connector.find(model, record_id) is None:
            raise RecordNotFoundError(
                table=table,
                identifier=identifier,
                value=record_id,
                suggestion=f"List stored records with: localstore query {table}",
            )
        await connector.delete(record)

    try:
        _run(state, remove)
    except Exception as e:
        _fail(state, e)
    console.print(f"[green]✓[/green] Deleted {table} {identifier}={record_id}")


@app.command()
def query(
    ctx: typer.Context,
    table: TableArg,
    where: Annotated[
        Optional[str],
        typer.Option("--where", "-w", help="Scope expression as a JSON object."),
    ] = None,
    order: Annotated[
        Optional[list[str]],
        typer.Option("--order", "-o", help="Sort key as field[:asc|desc]; repeatable."),
    ] = None,
    skip: Annotated[int, typer.Option("--skip", help="Records to skip.", min=0)] = 0,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-n", help="Maximum records to show.", min=0),
    ] = None,
    identifier: IdentifierOpt = "id",
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output records as a JSON array."),
    ] = False,
) -> None:
    """
    List records matching a scope.

    Example:
        $ localstore query users --where '{"$gte": {"age": 18}}' --order age:desc --limit 5
    """
    state: CliState = ctx.obj
    try:
        model = model_for(
            table,
            identifier,
            scope=_parse_json_object(where, "--where") if where else None,
            order=_parse_order(order or []),
            skip=skip,
            limit=limit,
        )
        records = _run(state, lambda c: c.all(model))
    except Exception as e:
        _fail(state, e)

    if json_output:
        print(json.dumps(records, indent=2, default=str))
    elif not records:
        console.print("[dim]No records found.[/dim]")
    else:
        _display_records(records, identifier)


@app.command()
def count(
    ctx: typer.Context,
    table: TableArg,
    where: Annotated[
        Optional[str],
        typer.Option("--where", "-w", help="Scope expression as a JSON object."),
    ] = None,
    identifier: IdentifierOpt = "id",
) -> None:
    """
    Count records matching a scope.

    Example:
        $ localstore count users --where '{"name": "foo"}'
    """
    state: CliState = ctx.obj
    try:
        scope = _parse_json_object(where, "--where") if where else None
        model = model_for(table, identifier, scope=scope)
        total = _run(state, lambda c: c.count(model))
    except Exception as e:
        _fail(state, e)
    console.print(total)


@app.command()
def tables(ctx: typer.Context) -> None:
    """
    List the tables stored in the database.

    Only keys inside the configured prefix/postfix namespace are shown.

    Example:
        $ localstore --config app.yaml tables
    """
    state: CliState = ctx.obj
    prefix, postfix = state.config.prefix, state.config.postfix
    try:
        with SQLiteStorage(state.db_path) as storage:
            rows = []
            for key in storage.keys():
                if not (key.startswith(prefix) and key.endswith(postfix)):
                    continue
                name = key[len(prefix):len(key) - len(postfix)]
                if not name:
                    continue
                rows.append((name, key, len(json.loads(storage.get(key) or "[]"))))
    except Exception as e:
        _fail(state, e)

    if not rows:
        console.print("[dim]No tables found.[/dim]")
        raise typer.Exit(code=0)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Table", style="cyan")
    table.add_column("Key")
    table.add_column("Records", justify="right")
    for name, key, size in rows:
        table.add_row(name, key, str(size))
    console.print(table)


if __name__ == "__main__":
    app()
