# profilehub/cli/commands/overrides.py
# Per-profile item override subcommands (set/reset/show)

from __future__ import annotations

import json
from typing import List, Optional

import typer

from ...config.settings import get_settings
from ...core.exceptions import ItemNotFoundError
from ...core.merge import resolve_item
from ...core.models import Category
from ...hub_io.console import console, ok
from ..app import app
from ..decorators import handle_hub_error
from ..helpers import parse_assignments, require_profile, run_store_action

overrides_app = typer.Typer(
    rich_markup_mode="rich", help="Change how one profile renders a master data item"
)
app.add_typer(overrides_app, name="overrides")


# * Set override fields (FIELD=VALUE ...); list fields take JSON arrays
@overrides_app.command(name="set")
@handle_hub_error
def set_cmd(
    ctx: typer.Context,
    profile_id: str,
    category: str,
    item_id: str,
    assignments: List[str] = typer.Argument(..., help='e.g. title=Lead bullets=\'["Did Y"]\''),
) -> None:
    settings = get_settings(ctx)
    kind = Category.parse(category)
    changes = parse_assignments(assignments)

    async def _set(store):
        require_profile(store, profile_id)
        return await store.set_override(profile_id, kind, item_id, **changes)

    _, profile = run_store_action(settings, _set)
    fields = ", ".join(profile.overrides_for(kind)[item_id].values)
    ok(f"Override for {kind.value} [hub.id]{item_id}[/]: {fields}")


# * Drop an override (or only the named fields of it)
@overrides_app.command()
@handle_hub_error
def reset(
    ctx: typer.Context,
    profile_id: str,
    category: str,
    item_id: str,
    field: Optional[List[str]] = typer.Option(
        None, "--field", "-f", help="Only reset this field (repeatable)"
    ),
) -> None:
    settings = get_settings(ctx)
    kind = Category.parse(category)
    names = tuple(field or ())

    async def _reset(store):
        require_profile(store, profile_id)
        return await store.reset_override(profile_id, kind, item_id, *names)

    run_store_action(settings, _reset)
    what = ", ".join(names) if names else "all fields"
    ok(f"Reset {what} of {kind.value} [hub.id]{item_id}[/] in {profile_id}")


# * Print the override & the resolved item as JSON
@overrides_app.command()
@handle_hub_error
def show(ctx: typer.Context, profile_id: str, category: str, item_id: str) -> None:
    settings = get_settings(ctx)
    kind = Category.parse(category)

    async def _noop(store) -> None:
        return None

    store, _ = run_store_action(settings, _noop)
    profile = require_profile(store, profile_id)
    resolved = resolve_item(kind, item_id, profile, store.data)
    if resolved is None:
        raise ItemNotFoundError(f"No {kind.value} with id '{item_id}'", kind.value, item_id)

    override = profile.overrides_for(kind).get(item_id)
    console.print("[bold]Override[/]")
    console.print_json(json.dumps(override.to_dict() if override else {}))
    console.print("[bold]Resolved[/]")
    console.print_json(json.dumps(resolved.to_dict()))
