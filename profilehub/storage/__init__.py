# profilehub/storage/__init__.py
# Persistence gateway contract & its interchangeable backends

from .types import StorageResult, StorageSnapshot, StorageInfo
from .base import PersistenceGateway
from .device import DeviceStorage, DeviceStorageGateway
from .database import DatabaseGateway
from .factory import create_gateway
from .migration import migrate_between_backends

__all__ = [
    "StorageResult",
    "StorageSnapshot",
    "StorageInfo",
    "PersistenceGateway",
    "DeviceStorage",
    "DeviceStorageGateway",
    "DatabaseGateway",
    "create_gateway",
    "migrate_between_backends",
]
