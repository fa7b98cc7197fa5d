# profilehub/cli/decorators.py
# CLI decorator mapping profilehub errors to a formatted message & exit code 1

import functools

import typer
from typing import Callable, TypeVar, Any, cast

from ..core.exceptions import (
    HubError,
    ValidationError,
    ProfileNotFoundError,
    ItemNotFoundError,
    StorageError,
    ConfigurationError,
    AIError,
    JSONParsingError,
    FileOperationError,
    format_error_message,
)

F = TypeVar("F", bound=Callable[..., Any])

# most specific first
_ERROR_LABELS: list[tuple[type[HubError], str]] = [
    (ValidationError, "Validation Error"),
    (ProfileNotFoundError, "Profile Not Found"),
    (ItemNotFoundError, "Item Not Found"),
    (StorageError, "Storage Error"),
    (ConfigurationError, "Configuration Error"),
    (AIError, "AI Error"),
    (JSONParsingError, "JSON Parsing Error"),
    (FileOperationError, "File Error"),
    (HubError, "Error"),
]


# * Decorator for handling profilehub errors in CLI commands w/ Rich output
def handle_hub_error(func: F) -> F:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        # ! Lazy import to avoid circular dependencies
        from ..hub_io.console import console

        try:
            return func(*args, **kwargs)
        except (typer.Exit, typer.Abort, typer.BadParameter):
            raise
        except HubError as e:
            label = next(name for kind, name in _ERROR_LABELS if isinstance(e, kind))
            console.print(format_error_message(label, str(e)))
            raise SystemExit(1)
        except Exception as e:
            console.print(format_error_message("Unexpected Error", str(e)))
            raise SystemExit(1)

    return cast(F, wrapper)
