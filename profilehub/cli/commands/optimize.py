# profilehub/cli/commands/optimize.py
# Optimize command: tailor one profile to a job description via the configured model

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from ...ai.optimizer import LLMOptimizer, is_optimization_stale
from ...config.settings import get_settings
from ...core.verbose import vlog
from ...hub_io.console import console, ok
from ...hub_io.generics import read_text
from ..app import app
from ..decorators import handle_hub_error
from ..helpers import require_profile, run_store_action


# * Ask the model for a tailored summary, bullet overrides & item order, then apply them
@app.command(help="Tailor a profile to a job description using the configured model")
@handle_hub_error
def optimize(
    ctx: typer.Context,
    profile_id: str,
    job: Path = typer.Option(..., "--job", "-j", help="Path to job description text"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name (defaults to config)"),
    instructions: Optional[str] = typer.Option(
        None, "--instructions", "-i", help="Extra guidance for the model"
    ),
    url: Optional[str] = typer.Option(None, "--url", help="Job posting URL to record"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the suggestion without changing the profile"
    ),
    force: bool = typer.Option(
        False, "--force", help="Re-run even if the profile was optimized for this job recently"
    ),
) -> None:
    settings = get_settings(ctx)
    job_text = read_text(job)
    optimizer = LLMOptimizer(model or settings.model)
    options = {"instructions": instructions} if instructions else {}

    async def _optimize(store):
        profile = require_profile(store, profile_id)
        if not force and not dry_run and not is_optimization_stale(profile, job_text):
            vlog("AI", f"Profile '{profile.name}' already optimized for this job")
            return None, None

        # model call blocks; keep it off the event loop
        suggestion = await asyncio.to_thread(
            optimizer.optimize, profile, store.data, job_text, options
        )
        if dry_run:
            return suggestion, None
        updated = await store.apply_optimization(profile_id, suggestion, job_text, url)
        return suggestion, updated

    _, (suggestion, updated) = run_store_action(settings, _optimize)

    if suggestion is None:
        console.print(
            "[dim]Already optimized for this job description; use [/][cyan]--force[/][dim] to re-run[/]"
        )
        return

    if dry_run:
        preview = {
            "summary": suggestion.summary,
            "overrides": {
                category.collection: {i: o.to_dict() for i, o in entries.items()}
                for category, entries in suggestion.overrides.items()
            },
            "order": {c.collection: ids for c, ids in suggestion.item_order.items()},
            "keyInsights": suggestion.key_insights,
        }
        console.print(
            json.dumps(preview, indent=2), markup=False, highlight=False, soft_wrap=True
        )
        return

    ok(f"Optimized [hub.id]{profile_id}[/] with {optimizer.model}")
    if updated is not None and updated.ai_optimization is not None:
        for insight in updated.ai_optimization.key_insights:
            console.print(f"  • {insight}")
