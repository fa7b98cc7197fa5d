# profilehub/cli/commands/profiles.py
# Profile subcommands (list/show/create/clone/rename/delete/template/sections/personal/add-item/remove-item/reorder)

from __future__ import annotations

from typing import List, Optional

import typer
from rich.table import Table

from ...config.settings import get_settings
from ...core.constants import DEFAULT_SECTION_ORDER, NEW_PROFILE_NAME, Template
from ...core.exceptions import ValidationError
from ...core.merge import dangling_ids, has_override, resolve_profile
from ...core.models import Category, Experience, Item, Project
from ...hub_io.console import console, ok
from ..app import app
from ..decorators import handle_hub_error
from ..helpers import (
    confirm_or_abort,
    parse_assignments,
    require_profile,
    run_store_action,
)

# * Sub-app for profile commands; registered on root app
profiles_app = typer.Typer(rich_markup_mode="rich", help="Create, edit & inspect profiles")
app.add_typer(profiles_app, name="profiles")


def _item_heading(item: Item) -> str:
    if isinstance(item, Experience):
        return f"{item.title} | {item.company} | {item.date}"
    if isinstance(item, Project):
        return f"{item.title}" + (f" | {item.link}" if item.link else "")
    return getattr(item, "title", None) or getattr(item, "name", "")


def _item_lines(item: Item) -> list[str]:
    bullets = getattr(item, "bullets", None)
    if bullets is not None:
        return [f"• {b}" for b in bullets]
    return [item.details] if getattr(item, "details", "") else []


# read-only commands load the store & change nothing
async def _noop(store) -> None:
    return None


# * List profiles w/ item counts per category
@profiles_app.command(name="list")
@handle_hub_error
def list_profiles(ctx: typer.Context) -> None:
    settings = get_settings(ctx)
    store, _ = run_store_action(settings, _noop)

    if not store.profiles:
        console.print("[dim]No profiles yet. Create one with [/][cyan]profilehub profiles create[/]")
        return

    table = Table(title="Profiles", show_lines=False)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Template")
    for category in Category:
        table.add_column(category.collection.title(), justify="right")
    table.add_column("Optimized", justify="center")

    for profile in store.profiles:
        counts = [str(len(profile.ids_for(c))) for c in Category]
        optimized = "✓" if profile.ai_optimization is not None else ""
        table.add_row(profile.id, profile.name, profile.template.value, *counts, optimized)
    console.print(table)


# * Show a profile as it renders: resolved personal info & sections in order
@profiles_app.command()
@handle_hub_error
def show(ctx: typer.Context, profile_id: str) -> None:
    settings = get_settings(ctx)
    store, _ = run_store_action(settings, _noop)
    profile = require_profile(store, profile_id)
    resolved = resolve_profile(profile, store.data)

    info = resolved.personal_info
    console.print(f"[bold]{info.full_name}[/]  [dim]({profile.name}, {profile.template.value})[/]")
    contact = [v for v in (info.email, info.phone, info.location, info.linkedin, info.github, info.website) if v]
    if contact:
        console.print(" | ".join(contact))
    if info.summary:
        console.print(f"\n{info.summary}")

    for category, items in resolved.sections:
        console.print(f"\n[bold cyan]{category.collection.upper()}[/]")
        for item in items:
            marker = " [yellow]*[/]" if has_override(profile, category, item.id) else ""
            console.print(f"[bold]{_item_heading(item)}[/]{marker}")
            for line in _item_lines(item):
                console.print(f"  {line}")

    for category, missing in dangling_ids(profile, store.data).items():
        console.print(
            f"[yellow]Missing {category.collection}: {', '.join(missing)} (skipped)[/]"
        )


@profiles_app.command()
@handle_hub_error
def create(
    ctx: typer.Context,
    name: str = typer.Option(NEW_PROFILE_NAME, "--name", "-n", help="Profile name"),
) -> None:
    settings = get_settings(ctx)
    _, profile = run_store_action(settings, lambda s: s.create_profile(name))
    ok(f"Created profile [hub.id]{profile.id}[/] ({profile.name})")


@profiles_app.command()
@handle_hub_error
def clone(ctx: typer.Context, profile_id: str) -> None:
    settings = get_settings(ctx)
    store, cloned = run_store_action(settings, lambda s: s.clone_profile(profile_id))
    if cloned is None:
        require_profile(store, profile_id)
    ok(f"Cloned into [hub.id]{cloned.id}[/] ({cloned.name})")


async def _update(store, profile_id: str, **changes):
    require_profile(store, profile_id)
    return await store.update_profile(profile_id, **changes)


@profiles_app.command()
@handle_hub_error
def rename(ctx: typer.Context, profile_id: str, name: str) -> None:
    settings = get_settings(ctx)
    run_store_action(settings, lambda s: _update(s, profile_id, name=name))
    ok(f"Renamed [hub.id]{profile_id}[/] to {name}")


@profiles_app.command()
@handle_hub_error
def delete(
    ctx: typer.Context,
    profile_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    settings = get_settings(ctx)
    confirm_or_abort(f"Delete profile {profile_id}?", yes)

    async def _delete(store):
        require_profile(store, profile_id)
        return await store.delete_profile(profile_id)

    run_store_action(settings, _delete)
    ok(f"Deleted profile [hub.id]{profile_id}[/]")


@profiles_app.command()
@handle_hub_error
def template(ctx: typer.Context, profile_id: str, name: Template) -> None:
    settings = get_settings(ctx)
    run_store_action(settings, lambda s: _update(s, profile_id, template=name))
    ok(f"Template set to {name.value}")


# * Set the section render order; no sections resets to the default order
@profiles_app.command()
@handle_hub_error
def sections(
    ctx: typer.Context,
    profile_id: str,
    order: Optional[List[str]] = typer.Argument(
        None, help=f"Section names ({', '.join(DEFAULT_SECTION_ORDER)})"
    ),
) -> None:
    settings = get_settings(ctx)
    section_order = [Category.parse(s).collection for s in order] if order else None
    run_store_action(settings, lambda s: _update(s, profile_id, section_order=section_order))
    shown = ", ".join(section_order or DEFAULT_SECTION_ORDER)
    ok(f"Section order: {shown}")


# * Edit a profile's own personal info (FIELD=VALUE ...)
@profiles_app.command()
@handle_hub_error
def personal(ctx: typer.Context, profile_id: str, assignments: List[str]) -> None:
    settings = get_settings(ctx)
    changes = parse_assignments(assignments)

    async def _personal(store):
        require_profile(store, profile_id)
        return await store.update_personal_info(profile_id, **changes)

    run_store_action(settings, _personal)
    ok(f"Updated personal info for [hub.id]{profile_id}[/]")


@profiles_app.command(name="add-item")
@handle_hub_error
def add_item(
    ctx: typer.Context,
    profile_id: str,
    category: str,
    item_id: str,
    position: Optional[int] = typer.Option(None, "--position", "-p", help="Insert position"),
) -> None:
    settings = get_settings(ctx)
    kind = Category.parse(category)

    async def _add(store):
        require_profile(store, profile_id)
        if item_id not in store.data.index(kind):
            raise ValidationError(f"No {kind.value} with id '{item_id}' in master data")
        return await store.add_profile_item(profile_id, kind, item_id, position)

    run_store_action(settings, _add)
    ok(f"Added {kind.value} [hub.id]{item_id}[/] to {profile_id}")


@profiles_app.command(name="remove-item")
@handle_hub_error
def remove_item(ctx: typer.Context, profile_id: str, category: str, item_id: str) -> None:
    settings = get_settings(ctx)
    kind = Category.parse(category)

    async def _remove(store):
        require_profile(store, profile_id)
        return await store.remove_profile_item(profile_id, kind, item_id)

    run_store_action(settings, _remove)
    ok(f"Removed {kind.value} [hub.id]{item_id}[/] from {profile_id}")


# * Move one id within a profile's category list
@profiles_app.command()
@handle_hub_error
def reorder(
    ctx: typer.Context, profile_id: str, category: str, from_index: int, to_index: int
) -> None:
    settings = get_settings(ctx)
    kind = Category.parse(category)

    async def _reorder(store):
        require_profile(store, profile_id)
        return await store.reorder_items(profile_id, kind, from_index, to_index)

    _, profile = run_store_action(settings, _reorder)
    ok(f"{kind.collection}: {', '.join(profile.ids_for(kind))}")
