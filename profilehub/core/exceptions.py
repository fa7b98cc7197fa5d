# profilehub/core/exceptions.py
# Custom exception hierarchy for profilehub (pure - no I/O operations)

from pathlib import Path
from typing import Any


# * Format error message for display (pure string formatting, no I/O)
def format_error_message(error_type: str, message: str) -> str:
    return f"[red]{error_type}:[/] {message}"


# * Base exception for profilehub
class HubError(Exception):
    pass


# * Malformed or structurally invalid data (records, change sets, overrides)
class ValidationError(HubError):
    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, field={self.field!r})"


# * Lookup errors for profiles & master data items
class ProfileNotFoundError(HubError):
    def __init__(self, message: str, profile_id: str):
        super().__init__(message)
        self.profile_id = profile_id


class ItemNotFoundError(HubError):
    def __init__(self, message: str, category: str, item_id: str):
        super().__init__(message)
        self.category = category
        self.item_id = item_id

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.args[0]!r}, "
            f"category={self.category!r}, item_id={self.item_id!r})"
        )


# * Base error for persistence backends
class StorageError(HubError):
    pass


# * Backend not reachable or not present in this execution context
class StorageUnavailableError(StorageError):
    pass


# * Write would exceed the backend's capacity
class QuotaExceededError(StorageError):
    def __init__(self, message: str, required: int, available: int):
        super().__init__(message)
        self.required = required
        self.available = available

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.args[0]!r}, "
            f"required={self.required!r}, available={self.available!r})"
        )


# * No prior save exists
class SnapshotNotFoundError(StorageError):
    pass


# * Stored data failed structural validation
class SnapshotCorruptError(StorageError):
    pass


# * Backup envelope rejected before restore
class BackupFormatError(StorageError):
    pass


# * Configuration errors
class ConfigurationError(HubError):
    pass


# * Settings value validation failed
class SettingsValidationError(ConfigurationError):
    def __init__(self, message: str, setting_name: str, value: Any):
        super().__init__(message)
        self.setting_name = setting_name
        self.value = value

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.args[0]!r}, "
            f"setting_name={self.setting_name!r}, value={self.value!r})"
        )


# * AI-related exceptions
class AIError(HubError):
    pass


# * Provider-specific error (API errors, rate limits)
class ProviderError(AIError):
    def __init__(self, message: str, provider: str):
        super().__init__(message)
        self.provider = provider

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.args[0]!r}, provider={self.provider!r})"
        )


# * API rate limit exceeded
class RateLimitError(ProviderError):
    def __init__(self, message: str, provider: str, retry_after: int | None = None):
        super().__init__(message, provider)
        self.retry_after = retry_after


# * JSON parsing errors
class JSONParsingError(HubError):
    pass


# * Failed to read or write a user-supplied file
class FileOperationError(HubError):
    def __init__(self, message: str, path: Path | str):
        super().__init__(message)
        self.path = Path(path) if isinstance(path, str) else path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, path={self.path!r})"
