# profilehub/cli/commands/storage.py
# Storage subcommands (info/backup/restore/switch/reset/clear)

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from ...config.settings import get_settings, settings_manager
from ...core.constants import StorageBackend
from ...core.exceptions import StorageError
from ...hub_io.console import console, ok
from ...hub_io.generics import read_text, write_text
from ...storage.factory import create_gateway
from ..app import app
from ..decorators import handle_hub_error
from ..helpers import confirm_or_abort, run_store_action

storage_app = typer.Typer(rich_markup_mode="rich", help="Inspect, back up & switch persistence backends")
app.add_typer(storage_app, name="storage")


def _human(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} GB"


# * Show the active backend & how much of its capacity is used
@storage_app.command()
@handle_hub_error
def info(ctx: typer.Context) -> None:
    settings = get_settings(ctx)
    gateway = create_gateway(settings.storage_backend, settings)
    result = asyncio.run(gateway.info())
    if not result.success or result.data is None:
        raise StorageError(result.error)

    usage = result.data
    console.print(f"Backend: [hub.id]{usage.backend}[/]")
    if usage.available:
        console.print(
            f"Used: {_human(usage.used)} of {_human(usage.available)} ({usage.percentage:.1f}%)"
        )
    else:
        console.print(f"Used: {_human(usage.used)}")


# * Print a backup envelope, or write it to a file
@storage_app.command()
@handle_hub_error
def backup(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write backup to file"),
) -> None:
    settings = get_settings(ctx)
    store, envelope = run_store_action(settings, lambda s: s.backup_data())
    if envelope is None:
        raise StorageError(store.error or "Failed to create backup")

    if output is None:
        console.print(envelope, markup=False, highlight=False, soft_wrap=True)
        return
    write_text(envelope, output)
    ok(f"Backup written to {output}")


# * Replace stored state w/ a backup file's contents (validated first)
@storage_app.command()
@handle_hub_error
def restore(
    ctx: typer.Context,
    backup_file: Path,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    settings = get_settings(ctx)
    text = read_text(backup_file)
    confirm_or_abort("Replace all stored profiles & data with this backup?", yes)

    store, restored = run_store_action(settings, lambda s: s.restore_data(text))
    if not restored:
        raise StorageError(store.error or "Failed to restore backup")
    ok(f"Restored {len(store.profiles)} profile(s) from {backup_file}")


# * Make another backend active, copying everything over first by default
@storage_app.command()
@handle_hub_error
def switch(
    ctx: typer.Context,
    backend: StorageBackend,
    migrate: bool = typer.Option(
        True, "--migrate/--no-migrate", help="Copy current data to the new backend first"
    ),
) -> None:
    settings = get_settings(ctx)
    if backend.value == settings.storage_backend:
        console.print(f"[dim]Already using {backend.value} storage[/]")
        return

    destination = create_gateway(backend, settings)
    store, switched = run_store_action(
        settings, lambda s: s.switch_backend(destination, migrate=migrate)
    )
    if not switched:
        raise StorageError(store.error or f"Could not switch to {backend.value} storage")

    settings_manager.set("storage_backend", backend.value)
    verb = "Migrated to" if migrate else "Switched to"
    ok(f"{verb} {backend.value} storage ({len(store.profiles)} profile(s))")


# * Replace everything w/ the starter profiles & data
@storage_app.command()
@handle_hub_error
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    settings = get_settings(ctx)
    confirm_or_abort("Reset all profiles & master data to defaults?", yes)
    run_store_action(settings, lambda s: s.reset_all())
    ok("Reset to default profiles & data")


@storage_app.command()
@handle_hub_error
def clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    settings = get_settings(ctx)
    confirm_or_abort("Delete all stored profiles & data?", yes)
    store, cleared = run_store_action(settings, lambda s: s.clear_all_data())
    if not cleared:
        raise StorageError(store.error or "Failed to clear storage")
    ok(f"Cleared {settings.storage_backend} storage")
