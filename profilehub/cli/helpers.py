# profilehub/cli/helpers.py
# Shared CLI helpers: run store actions, parse FIELD=VALUE assignments & resolve categories

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, TypeVar

import click
import typer

from ..config.settings import HubSettings
from ..core.exceptions import ProfileNotFoundError, StorageError, ValidationError
from ..core.models import Profile
from ..core.verbose import begin_action, end_action
from ..store.profiles import ProfilesStore
from ..storage.factory import create_gateway

T = TypeVar("T")

# ---------------------------------------------------------------------------
# STORE ACCESS PATTERN
# ---------------------------------------------------------------------------
# Commands that read or change profiles run one async action against a store
# loaded from the configured backend:
#   settings = get_settings(ctx)
#   store, result = run_store_action(settings, lambda s: s.clone_profile(pid))
# A save the action triggered that failed raises StorageError afterwards, so
# the command exits 1 w/ the store's message.
# ---------------------------------------------------------------------------


def build_store(settings: HubSettings) -> ProfilesStore:
    return ProfilesStore(create_gateway(settings.storage_backend, settings))


# "profiles clone" for `profilehub profiles clone ...`; outside a CLI invocation
# the action is just "store action"
def _action_name() -> str:
    ctx = click.get_current_context(silent=True)
    names: list[str] = []
    while ctx is not None and ctx.parent is not None:
        if ctx.info_name:
            names.insert(0, ctx.info_name)
        ctx = ctx.parent
    return " ".join(names) or "store action"


# * Load a store, run one action against it & surface any failed save
def run_store_action(
    settings: HubSettings,
    action: Callable[[ProfilesStore], Awaitable[T]],
    *,
    check_saved: bool = True,
) -> tuple[ProfilesStore, T]:
    async def _run() -> tuple[ProfilesStore, T]:
        store = build_store(settings)
        await store.load_from_storage()
        return store, await action(store)

    name = _action_name()
    begin_action(name, settings.storage_backend)
    try:
        store, result = asyncio.run(_run())
    except Exception as e:
        end_action(name, str(e))
        raise
    end_action(name, store.error)
    if check_saved and store.error:
        raise StorageError(store.error)
    return store, result


def require_profile(store: ProfilesStore, profile_id: str) -> Profile:
    profile = store.get_profile(profile_id)
    if profile is None:
        raise ProfileNotFoundError(f"No profile with id '{profile_id}'", profile_id)
    return profile


# JSON arrays, objects & null are decoded; everything else stays a string
def _assignment_value(raw: str) -> Any:
    text = raw.strip()
    if text == "null" or text.startswith(("[", "{")):
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON value {raw!r}: {e.msg}")
    return raw


# * Parse FIELD=VALUE arguments into a change set (kebab & camel keys -> snake_case)
def parse_assignments(assignments: list[str]) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key.strip():
            raise ValidationError(f"Expected FIELD=VALUE, got {assignment!r}")
        changes[_snake(key.strip())] = _assignment_value(value)
    return changes


def _snake(name: str) -> str:
    out = []
    for ch in name.replace("-", "_"):
        if ch.isupper():
            out.append("_" + ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def confirm_or_abort(message: str, yes: bool) -> None:
    if not yes:
        typer.confirm(message, abort=True)
