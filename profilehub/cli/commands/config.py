# profilehub/cli/commands/config.py
# Settings mgmt subcommands (list/get/set/reset/path) w/ JSON-backed storage

from __future__ import annotations

import json
from dataclasses import fields
from typing import Any
import typer
from builtins import list as builtin_list

from ...config.settings import settings_manager, HubSettings
from ...hub_io.console import console, ok
from ..app import app

config_app = typer.Typer(rich_markup_mode="rich", help="Manage profilehub settings")
app.add_typer(config_app, name="config")


def _known_keys() -> set[str]:
    return {f.name for f in fields(HubSettings)}


# coerce string value to JSON value (numbers, bools, null) or keep raw string
def _coerce_value(
    raw: str,
) -> str | int | float | bool | None | builtin_list[Any] | dict[str, Any]:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _print_current_settings() -> None:
    data = settings_manager.list_settings()

    console.print()
    console.print("[bold]Current Configuration[/]")
    console.print(f"[dim]Config file: {settings_manager.config_path}[/]")
    console.print()
    for key, value in data.items():
        console.print(f"  [hub.id]{key}[/]: {json.dumps(value)}")
    console.print()
    console.print("[dim]Use [/][cyan]profilehub config --help[/][dim] to see available commands[/]")


# * default callback: show current settings when no subcommand is given
@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        _print_current_settings()


# * Get a specific setting value & print as JSON
@config_app.command()
def get(key: str) -> None:
    if key not in _known_keys():
        raise typer.BadParameter(f"Unknown setting: {key}")
    console.print(json.dumps(settings_manager.get(key)))


# * Set a specific setting value; values are JSON-coerced when possible
@config_app.command(name="set")
def set_cmd(key: str, value: str) -> None:
    if key not in _known_keys():
        raise typer.BadParameter(f"Unknown setting: {key}")

    coerced = _coerce_value(value)
    # string settings keep the raw text ("true" stays a model name)
    if isinstance(getattr(HubSettings(), key), str):
        coerced = value
    try:
        settings_manager.set(key, coerced)
    except Exception as e:
        raise typer.BadParameter(str(e))
    ok(f"Set {key} = {json.dumps(coerced)}")


@config_app.command()
def reset() -> None:
    settings_manager.reset()
    ok("Reset settings to defaults")


@config_app.command()
def path() -> None:
    console.print(str(settings_manager.config_path), soft_wrap=True)


# * Explicit 'list' command to show current settings
@config_app.command(name="list")
def list_cmd() -> None:
    _print_current_settings()
