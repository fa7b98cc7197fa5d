# profilehub/storage/factory.py
# Gateway factory routing a backend id to its configured persistence gateway

from __future__ import annotations

from typing import Callable

from ..config.settings import HubSettings
from ..core.constants import StorageBackend
from ..core.exceptions import ConfigurationError
from .base import PersistenceGateway
from .database import DatabaseGateway
from .device import DeviceStorage, DeviceStorageGateway


def _device_gateway(settings: HubSettings) -> PersistenceGateway:
    storage = DeviceStorage(settings.device_storage_path, settings.storage_quota_bytes)
    return DeviceStorageGateway(storage)


def _database_gateway(settings: HubSettings) -> PersistenceGateway:
    return DatabaseGateway(settings.database_file, settings.user_id)


# * Registry mapping backend IDs to gateway builders (tests can patch entries)
GATEWAY_REGISTRY: dict[str, Callable[[HubSettings], PersistenceGateway]] = {
    StorageBackend.DEVICE.value: _device_gateway,
    StorageBackend.DATABASE.value: _database_gateway,
}


# * Build the gateway for a backend id (defaults to the configured backend)
def create_gateway(
    kind: str | StorageBackend | None, settings: HubSettings
) -> PersistenceGateway:
    if kind is None:
        kind = settings.storage_backend
    key = kind.value if isinstance(kind, StorageBackend) else str(kind).lower()
    builder = GATEWAY_REGISTRY.get(key)
    if builder is None:
        valid = ", ".join(GATEWAY_REGISTRY)
        raise ConfigurationError(f"Unknown storage backend: {kind} (expected one of: {valid})")
    return builder(settings)
