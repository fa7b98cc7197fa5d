# profilehub/config/settings.py
# Configuration management for profilehub: storage backend selection, backend locations & model settings

from pathlib import Path
from typing import Dict, Any, Optional, cast
import typer
from dataclasses import dataclass, asdict

from ..hub_io.generics import read_json_safe, write_json_safe
from ..core.constants import DEFAULT_QUOTA_BYTES, StorageBackend
from ..core.exceptions import JSONParsingError, SettingsValidationError


# * Default settings dataclass w/ storage selection & optimization model configuration
@dataclass
class HubSettings:
    # active persistence backend ("device" or "database")
    storage_backend: str = StorageBackend.DEVICE.value

    # device storage (one file per key) & its capacity
    device_storage_dir: str = "~/.profilehub/storage"
    storage_quota_bytes: int = DEFAULT_QUOTA_BYTES

    # database storage & the user every row is scoped to
    database_path: str = "~/.profilehub/profilehub.db"
    user_id: str = "local"

    # optimization model setting
    model: str = "gpt-5-mini"
    # temp setting (note: GPT-5 models don't support temperature parameter)
    temperature: float = 0.2

    # dev mode setting (enables debug-level logging)
    dev_mode: bool = False

    def __post_init__(self) -> None:
        valid_backends = {b.value for b in StorageBackend}
        if self.storage_backend not in valid_backends:
            raise SettingsValidationError(
                f"storage_backend must be one of {sorted(valid_backends)}, "
                f"got '{self.storage_backend}'",
                "storage_backend",
                self.storage_backend,
            )

        if (
            not isinstance(self.storage_quota_bytes, int)
            or isinstance(self.storage_quota_bytes, bool)
            or self.storage_quota_bytes < 1
        ):
            raise SettingsValidationError(
                f"storage_quota_bytes must be a positive integer, got {self.storage_quota_bytes}",
                "storage_quota_bytes",
                self.storage_quota_bytes,
            )

        if not isinstance(self.user_id, str) or not self.user_id.strip():
            raise SettingsValidationError(
                "user_id must be a non-empty string", "user_id", self.user_id
            )

        # temperature range (OpenAI: 0.0-2.0)
        if not isinstance(self.temperature, (int, float)) or isinstance(
            self.temperature, bool
        ):
            raise SettingsValidationError(
                f"temperature must be a number, got {type(self.temperature).__name__}",
                "temperature",
                self.temperature,
            )
        if not 0.0 <= self.temperature <= 2.0:
            raise SettingsValidationError(
                f"temperature must be 0.0-2.0, got {self.temperature}",
                "temperature",
                self.temperature,
            )

        # strict bool validation (no coercion)
        if not isinstance(self.dev_mode, bool):
            raise SettingsValidationError(
                f"dev_mode must be a boolean (true/false), "
                f"got {type(self.dev_mode).__name__}: {self.dev_mode}",
                "dev_mode",
                self.dev_mode,
            )

    @property
    def backend(self) -> StorageBackend:
        return StorageBackend(self.storage_backend)

    @property
    def device_storage_path(self) -> Path:
        return Path(self.device_storage_dir).expanduser()

    @property
    def database_file(self) -> Path:
        return Path(self.database_path).expanduser()


# * Settings management class w/ JSON persistence for loading, saving, & modifying settings
class SettingsManager:
    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or Path.home() / ".profilehub" / "config.json"
        self._settings: Optional[HubSettings] = None

    # load settings from file or return defaults
    def load(self) -> HubSettings:
        if self._settings is not None:
            return self._settings

        if self.config_path.exists():
            try:
                data = read_json_safe(self.config_path)
                self._settings = HubSettings(**data)
            except (JSONParsingError, SettingsValidationError, TypeError) as e:
                typer.echo(f"Warning: Invalid config file {self.config_path}: {e}")
                typer.echo("Using default settings")
                self._settings = HubSettings()
        else:
            self._settings = HubSettings()

        return self._settings

    def save(self, settings: HubSettings) -> None:
        write_json_safe(asdict(settings), self.config_path)
        self._settings = settings

    def get(self, key: str) -> Any:
        settings = self.load()
        return getattr(settings, key, None)

    # set one value; the whole settings object is re-validated before saving
    def set(self, key: str, value: Any) -> None:
        settings = self.load()
        if not hasattr(settings, key):
            raise SettingsValidationError(f"Unknown setting: {key}", key, value)

        values = asdict(settings)
        values[key] = value
        self.save(HubSettings(**values))

    def reset(self) -> None:
        self.save(HubSettings())

    def list_settings(self) -> Dict[str, Any]:
        return asdict(self.load())


# global settings manager instance
settings_manager = SettingsManager()


# * Retrieve settings preferring injected object from Typer context
def get_settings(
    ctx: typer.Context, provided: Optional[HubSettings] = None
) -> HubSettings:
    if provided is not None:
        return provided

    # search ctx, parent, & root for HubSettings
    candidates: list[typer.Context] = [ctx]
    parent = cast(Optional[typer.Context], getattr(ctx, "parent", None))
    if parent is not None:
        candidates.append(parent)
    find_root = getattr(ctx, "find_root", None)
    root_ctx = (
        cast(Optional[typer.Context], find_root()) if callable(find_root) else None
    )
    if root_ctx is not None:
        candidates.append(root_ctx)

    for c in candidates:
        obj = getattr(c, "obj", None)
        if isinstance(obj, HubSettings):
            return obj

    return settings_manager.load()
