# profilehub/cli/commands/data.py
# Master data subcommands (list/add/update/delete/personal)

from __future__ import annotations

from typing import List, Optional

import typer
from rich.table import Table

from ...config.settings import get_settings
from ...core.exceptions import ItemNotFoundError
from ...core.models import Category
from ...hub_io.console import console, ok
from ..app import app
from ..decorators import handle_hub_error
from ..helpers import confirm_or_abort, parse_assignments, run_store_action

data_app = typer.Typer(rich_markup_mode="rich", help="Manage master data shared by all profiles")
app.add_typer(data_app, name="data")


async def _noop(store) -> None:
    return None


def _summary(item) -> str:
    text = getattr(item, "title", None) or getattr(item, "name", "")
    company = getattr(item, "company", "")
    return f"{text} ({company})" if company else text


# * List master items, optionally for one category
@data_app.command(name="list")
@handle_hub_error
def list_items(
    ctx: typer.Context,
    category: Optional[str] = typer.Argument(None, help="experience, project, skill or education"),
) -> None:
    settings = get_settings(ctx)
    store, _ = run_store_action(settings, _noop)
    categories = [Category.parse(category)] if category else list(Category)

    # how many profiles reference each id
    usage: dict[tuple[Category, str], int] = {}
    for profile in store.profiles:
        for kind in Category:
            for item_id in set(profile.ids_for(kind)):
                usage[(kind, item_id)] = usage.get((kind, item_id), 0) + 1

    for kind in categories:
        table = Table(title=kind.collection.title())
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Item")
        table.add_column("Profiles", justify="right")
        for item in store.data.items(kind):
            table.add_row(item.id, _summary(item), str(usage.get((kind, item.id), 0)))
        console.print(table)


# * Add a starter item at the top of a category
@data_app.command()
@handle_hub_error
def add(ctx: typer.Context, category: str) -> None:
    settings = get_settings(ctx)
    kind = Category.parse(category)
    _, item = run_store_action(settings, lambda s: s.add_item(kind))
    ok(f"Added {kind.value} [hub.id]{item.id}[/]")


@data_app.command()
@handle_hub_error
def update(ctx: typer.Context, category: str, item_id: str, assignments: List[str]) -> None:
    settings = get_settings(ctx)
    kind = Category.parse(category)
    changes = parse_assignments(assignments)
    _, item = run_store_action(settings, lambda s: s.update_item(kind, item_id, **changes))
    if item is None:
        raise ItemNotFoundError(f"No {kind.value} with id '{item_id}'", kind.value, item_id)
    ok(f"Updated {kind.value} [hub.id]{item_id}[/]")


# * Delete a master item; profiles keep their (now skipped) references
@data_app.command()
@handle_hub_error
def delete(
    ctx: typer.Context,
    category: str,
    item_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    settings = get_settings(ctx)
    kind = Category.parse(category)
    confirm_or_abort(f"Delete {kind.value} {item_id}?", yes)
    _, deleted = run_store_action(settings, lambda s: s.delete_item(kind, item_id))
    if not deleted:
        raise ItemNotFoundError(f"No {kind.value} with id '{item_id}'", kind.value, item_id)
    ok(f"Deleted {kind.value} [hub.id]{item_id}[/]")


# * Edit master personal info (FIELD=VALUE ...)
@data_app.command()
@handle_hub_error
def personal(ctx: typer.Context, assignments: List[str]) -> None:
    settings = get_settings(ctx)
    changes = parse_assignments(assignments)
    run_store_action(settings, lambda s: s.update_master_personal_info(**changes))
    ok(f"Updated master personal info ({', '.join(changes)})")
