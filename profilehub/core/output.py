# profilehub/core/output.py
# Logging registry shared by core, storage, store & ai layers
# * Pure module: the Rich-backed implementation lives in profilehub/cli/output_manager.py
# * Lower layers log through the registry so they never import the CLI

from __future__ import annotations

from enum import IntEnum
from typing import Optional, Protocol, runtime_checkable


# NORMAL shows warnings only; DEBUG adds dev-mode detail
class OutputLevel(IntEnum):
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


@runtime_checkable
class OutputInterface(Protocol):
    def is_debug_enabled(self) -> bool: ...

    def verbose(
        self, msg: str, category: str = "INFO", detail: Optional[str] = None
    ) -> None: ...

    def warning(self, msg: str, category: str = "WARN") -> None: ...

    # one store action (a CLI command's load + mutation + save) against a backend
    def begin_action(self, action: str, backend: str) -> None: ...

    def end_action(self, action: str, error: Optional[str] = None) -> None: ...

    def close(self) -> None: ...


# * Used until the CLI registers a manager, & by library callers that want silence
class NullOutputManager:
    def is_debug_enabled(self) -> bool:
        return False

    def verbose(
        self, msg: str, category: str = "INFO", detail: Optional[str] = None
    ) -> None:
        pass

    def warning(self, msg: str, category: str = "WARN") -> None:
        pass

    def begin_action(self, action: str, backend: str) -> None:
        pass

    def end_action(self, action: str, error: Optional[str] = None) -> None:
        pass

    def close(self) -> None:
        pass


_output_manager: OutputInterface = NullOutputManager()


def set_output_manager(manager: OutputInterface) -> None:
    global _output_manager
    _output_manager = manager


def get_output_manager() -> OutputInterface:
    return _output_manager


def reset_output_manager() -> None:
    global _output_manager
    _output_manager = NullOutputManager()
