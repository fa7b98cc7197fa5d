# profilehub/storage/device.py
# Device-local backend: origin-scoped key/value string storage w/ a byte quota

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

from ..core.constants import BACKUP_KEY, DEFAULT_QUOTA_BYTES, PROFILES_KEY
from ..core.exceptions import (
    QuotaExceededError,
    SnapshotNotFoundError,
    StorageUnavailableError,
)
from .base import PersistenceGateway
from .codec import decode_payload
from .types import StorageInfo, StorageSnapshot

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class DeviceStorage:
    """Key/value store of strings kept in one directory, one file per key.

    Mirrors browser origin storage: string values only, a fixed capacity
    shared by all keys, and no availability when no writable root exists
    (e.g. a headless context with no home directory).
    """

    def __init__(self, root: Path | None, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        self.root = Path(root).expanduser() if root is not None else None
        self.quota_bytes = quota_bytes

    def check_available(self) -> None:
        if self.root is None:
            raise StorageUnavailableError(
                "Device storage not available in this environment"
            )
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"Device storage not available: {e}") from e
        if not os.access(self.root, os.W_OK):
            raise StorageUnavailableError(
                f"Device storage not available: {self.root} is not writable"
            )

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        assert self.root is not None
        return self.root / key

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    # * Write a value; all-or-nothing (temp file + atomic replace)
    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        size = len(value.encode("utf-8"))
        current = path.stat().st_size if path.exists() else 0
        projected = self.usage() - current + size
        if projected > self.quota_bytes:
            raise QuotaExceededError(
                f"Storage quota exceeded: {projected:,} bytes needed, "
                f"{self.quota_bytes:,} available",
                required=projected,
                available=self.quota_bytes,
            )

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        if self.root is None or not self.root.exists():
            return []
        return sorted(
            p.name for p in self.root.iterdir() if p.is_file() and not p.name.startswith(".")
        )

    # bytes used by all keys
    def usage(self) -> int:
        return sum(self._path(key).stat().st_size for key in self.keys())


# * Gateway persisting {profiles, data} under one key & the latest backup under another
class DeviceStorageGateway(PersistenceGateway):

    backend_name = "device"

    def __init__(self, storage: DeviceStorage):
        self.storage = storage

    def check_available(self) -> None:
        self.storage.check_available()

    def write_snapshot(self, snapshot: StorageSnapshot, payload_text: str) -> None:
        self.storage.set_item(PROFILES_KEY, payload_text)

    def read_snapshot(self) -> StorageSnapshot:
        raw = self.storage.get_item(PROFILES_KEY)
        if not raw:
            raise SnapshotNotFoundError("No data found")
        return decode_payload(raw)

    def write_backup(self, envelope: str) -> None:
        self.storage.set_item(BACKUP_KEY, envelope)

    def clear_storage(self) -> None:
        self.storage.remove_item(PROFILES_KEY)
        self.storage.remove_item(BACKUP_KEY)

    def storage_info(self) -> StorageInfo:
        return StorageInfo(
            backend=self.backend_name,
            used=self.storage.usage(),
            available=self.storage.quota_bytes,
        )
