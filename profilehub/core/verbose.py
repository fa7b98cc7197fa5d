# profilehub/core/verbose.py
# Verbose logging helpers - delegate to the registered OutputManager w/ categories for store, storage & AI events

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from .output import get_output_manager, set_output_manager, OutputLevel

if TYPE_CHECKING:
    from ..ai.types import GenerateResult


# * Initialize verbose logging for a CLI session
def init_verbose(
    enabled: bool = False,
    log_file: Path | None = None,
    dev_mode: bool = False,
) -> None:
    if enabled and dev_mode:
        requested_level = OutputLevel.DEBUG
    elif enabled:
        requested_level = OutputLevel.VERBOSE
    else:
        requested_level = OutputLevel.NORMAL

    # ! lazy import keeps core free of CLI imports at module load
    from ..cli.output_manager import OutputManager

    set_output_manager(
        OutputManager(level=requested_level, dev_mode=dev_mode, log_file=log_file)
    )


# * Core verbose logging function
def vlog(category: str, message: str, detail: str | None = None) -> None:
    get_output_manager().verbose(message, category, detail)


# * Log a store mutation (before persistence starts)
def vlog_mutation(operation: str, target: str | None = None) -> None:
    suffix = f" ({target})" if target else ""
    get_output_manager().verbose(f"{operation}{suffix}", "STORE")


# * Log a gateway call outcome
def vlog_storage(
    backend: str,
    operation: str,
    success: bool,
    size: int | None = None,
    error: str | None = None,
) -> None:
    if success:
        detail = f"{size:,} bytes" if size is not None else None
        get_output_manager().verbose(f"{operation} via {backend}", "STORAGE", detail)
    else:
        get_output_manager().verbose(
            f"[red]{operation} failed via {backend}[/]", "STORAGE", error
        )


# * Log AI API call (before making the call)
def vlog_ai_request(provider: str, model: str, label: str, prompt_length: int) -> None:
    detail = f"Model: {model}, Prompt: {prompt_length:,} chars"
    get_output_manager().verbose(f"{label}: request to {provider}", "AI", detail)


# * Log the outcome of an AI call from its GenerateResult
def vlog_ai_response(provider: str, label: str, result: GenerateResult) -> None:
    took = f" in {result.duration_ms:.0f}ms" if result.duration_ms is not None else ""
    if result.success:
        keys = ", ".join(sorted(result.data or {})) or "none"
        detail = f"Model: {result.model}, Reply: {len(result.raw_text):,} chars, Keys: {keys}"
        get_output_manager().verbose(f"{label}: reply from {provider}{took}", "AI", detail)
    else:
        detail = f"Model: {result.model or 'n/a'}, Error: {result.error}"
        get_output_manager().verbose(
            f"[red]{label}: {provider} call failed[/]{took}", "AI", detail
        )


# * Log file read operation
def vlog_file_read(path: Path, size: int | None = None) -> None:
    size_str = f" ({size:,} bytes)" if size is not None else ""
    get_output_manager().verbose(f"Read: {path}{size_str}", "FILE")


def vlog_file_write(path: Path, size: int | None = None) -> None:
    size_str = f" ({size:,} bytes)" if size is not None else ""
    get_output_manager().verbose(f"Write: {path}{size_str}", "FILE")


def vlog_config(key: str, value: Any) -> None:
    get_output_manager().verbose(f"{key} = {value}", "CONFIG")


# * Surface a non-fatal problem at normal verbosity
def warn(message: str, category: str = "WARN") -> None:
    get_output_manager().warning(message, category)


# * Dev-mode only logging
def vlog_dev(category: str, message: str, detail: str | None = None) -> None:
    if get_output_manager().is_debug_enabled():
        get_output_manager().verbose(message, f"DEV:{category}", detail)


# * Bracket one store action (load, mutation & save) in the log
def begin_action(action: str, backend: str) -> None:
    get_output_manager().begin_action(action, backend)


def end_action(action: str, error: str | None = None) -> None:
    get_output_manager().end_action(action, error)


def cleanup_verbose() -> None:
    get_output_manager().close()
