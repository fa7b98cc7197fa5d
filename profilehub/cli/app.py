# profilehub/cli/app.py
# Root Typer application & command registration
#
# ! Command imports at bottom of file are deferred to avoid circular dependencies.

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

# load environment variables once at startup
load_dotenv()

from ..config.settings import settings_manager


app = typer.Typer(
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
    help="Manage resume master data & tailored profiles",
    context_settings={"help_option_names": ["--help", "-h"]},
)


# * Load settings & initialize logging for every invocation
@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging for debugging"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Write verbose logs to file (enables verbose mode)"
    ),
) -> None:
    # respect injected ctx.obj from tests/embedding; only load if absent
    if getattr(ctx, "obj", None) is None:
        ctx.obj = settings_manager.load()

    # must be after settings load to check dev_mode
    from ..core.verbose import cleanup_verbose, init_verbose, vlog_config

    verbose_enabled = verbose or log_file is not None
    dev_mode = ctx.obj.dev_mode if hasattr(ctx.obj, "dev_mode") else False
    init_verbose(enabled=verbose_enabled, log_file=log_file, dev_mode=dev_mode)
    ctx.call_on_close(cleanup_verbose)
    vlog_config("storage_backend", getattr(ctx.obj, "storage_backend", None))


# ! import command modules here to avoid circular import w/ app object
from .commands import profiles as _profiles  # noqa: F401,E402
from .commands import overrides as _overrides  # noqa: F401,E402
from .commands import data as _data  # noqa: F401,E402
from .commands import storage as _storage  # noqa: F401,E402
from .commands import config as _config  # noqa: F401,E402
from .commands import optimize as _optimize  # noqa: F401,E402
