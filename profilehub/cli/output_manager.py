# profilehub/cli/output_manager.py
# Rich output manager: categorized verbose lines & a per-action log file

# * Registered via init_verbose() at CLI startup
# * Lower layers reach it only through profilehub.core.output

from __future__ import annotations

import time
from datetime import datetime
from pathlib import Path
from typing import IO, Optional

from rich.markup import escape

from ..core.output import OutputLevel
from ..hub_io.console import console

# categories w/o a theme style fall back to hub.action
_CATEGORY_STYLES = {
    "STORE": "hub.store",
    "STORAGE": "hub.storage",
    "AI": "hub.ai",
    "CONFIG": "hub.config",
    "FILE": "hub.file",
}

_RULE = "-" * 60


class OutputManager:
    # Implements OutputInterface for the core registry
    # Console output via the themed Rich console; plain-text copy to the log file

    def __init__(
        self,
        level: OutputLevel = OutputLevel.NORMAL,
        dev_mode: bool = False,
        log_file: Path | None = None,
    ) -> None:
        # DEBUG requires dev_mode (capped at VERBOSE otherwise)
        ceiling = OutputLevel.DEBUG if dev_mode else OutputLevel.VERBOSE
        self.level = min(level, ceiling)
        self.dev_mode = dev_mode
        self.log_file = log_file
        self._started = time.perf_counter()
        self._action: tuple[str, float] | None = None
        self._handle: IO[str] | None = self._open_log(log_file)
        if self._handle is not None:
            mode = ", dev mode" if dev_mode else ""
            self._write(f"profilehub log opened {_now()} ({self.level.name}{mode})")

    def is_debug_enabled(self) -> bool:
        return self.level >= OutputLevel.DEBUG

    def verbose(
        self, msg: str, category: str = "INFO", detail: Optional[str] = None
    ) -> None:
        if self.level < OutputLevel.VERBOSE:
            return
        style = _CATEGORY_STYLES.get(category.removeprefix("DEV:"), "hub.action")
        console.print(
            f"[hub.muted][{self._elapsed()}][/] [{style}]\\[{category}][/] {msg}"
        )
        self._write(f"[{self._elapsed()}] [{category}] {msg}")
        for line in (detail or "").splitlines():
            console.print(f"  [hub.muted]{line}[/]")
            self._write(f"  {line}")

    # shown at every level
    def warning(self, msg: str, category: str = "WARN") -> None:
        console.print(f"[hub.warn]\\[{category}][/] {msg}")
        self._write(f"[{self._elapsed()}] [{category}] {msg}")

    def begin_action(self, action: str, backend: str) -> None:
        self._action = (action, time.perf_counter())
        self._write(_RULE)
        self._write(f"{action} on {backend} storage ({_now()})")
        self._write(_RULE)
        if self.level >= OutputLevel.VERBOSE:
            console.print(f"[hub.action]» {action}[/] [hub.muted]on {backend} storage[/]")

    def end_action(self, action: str, error: Optional[str] = None) -> None:
        started = self._action[1] if self._action else self._started
        self._action = None
        took = f"{(time.perf_counter() - started) * 1000:.0f}ms"
        outcome = f"failed after {took}: {error}" if error else f"done in {took}"
        self._write(f"{action} {outcome}")
        if self.level >= OutputLevel.VERBOSE:
            style = "hub.fail" if error else "hub.muted"
            console.print(f"[{style}]« {action} {escape(outcome)}[/]")

    def close(self) -> None:
        if self._handle is None:
            return
        if self._action is not None:
            self._write(f"{self._action[0]} interrupted")
        self._write(f"profilehub log closed {_now()}")
        self._handle.close()
        self._handle = None

    def _elapsed(self) -> str:
        return f"{time.perf_counter() - self._started:.2f}s"

    def _open_log(self, log_file: Path | None) -> IO[str] | None:
        if log_file is None:
            return None
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            return open(log_file, "a", encoding="utf-8")
        except OSError as e:
            console.print(f"[hub.warn]\\[FILE][/] Cannot write log to {log_file}: {e}")
            self.log_file = None
            return None

    def _write(self, line: str) -> None:
        if self._handle is not None:
            self._handle.write(f"{line}\n")
            self._handle.flush()


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")
