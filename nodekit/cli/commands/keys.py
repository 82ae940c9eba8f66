"""``keys`` commands: manage keys in the client keyring."""

import json
from dataclasses import asdict
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from nodekit.client.cmd import cmd_err, cmd_out, get_client_context_from_cmd
from nodekit.errors import KeyringError
from nodekit.keyring import KeyRecord, Keyring


def _keyring(ctx: typer.Context) -> Keyring:
    client_ctx = get_client_context_from_cmd(ctx)
    if client_ctx.keyring is None:
        return Keyring(client_ctx.keyring_backend, client_ctx.effective_keyring_dir)
    return client_ctx.keyring


def _print_records(ctx: typer.Context, records: list[KeyRecord]) -> None:
    console = Console(file=cmd_out(ctx), soft_wrap=True)
    if get_client_context_from_cmd(ctx).output_format == "json":
        console.print(json.dumps([asdict(r) for r in records]), markup=False, highlight=False)
        return

    table = Table(title="Keys")
    table.add_column("Name", style="cyan")
    table.add_column("Address")
    table.add_column("Created")
    for record in records:
        table.add_row(record.name, record.address, record.created_at)
    console.print(table)


def _fail(ctx: typer.Context, exc: KeyringError) -> NoReturn:
    Console(file=cmd_err(ctx)).print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(1) from exc


def add_key_command(ctx: typer.Context, name: str) -> None:
    try:
        record = _keyring(ctx).add(name)
    except KeyringError as exc:
        _fail(ctx, exc)
    _print_records(ctx, [record])


def list_keys_command(ctx: typer.Context) -> None:
    try:
        records = _keyring(ctx).list()
    except KeyringError as exc:
        _fail(ctx, exc)
    _print_records(ctx, records)


def show_key_command(ctx: typer.Context, name: str) -> None:
    try:
        record = _keyring(ctx).get(name)
    except KeyringError as exc:
        _fail(ctx, exc)
    _print_records(ctx, [record])


def delete_key_command(ctx: typer.Context, name: str) -> None:
    try:
        _keyring(ctx).delete(name)
    except KeyringError as exc:
        _fail(ctx, exc)
    Console(file=cmd_out(ctx)).print(f"Key {name} deleted", markup=False)
