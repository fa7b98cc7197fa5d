# profilehub/storage/base.py
# Template-method base for persistence gateways: async public contract over synchronous backend hooks

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, TypeVar

from ..core.exceptions import HubError, SnapshotNotFoundError, StorageError
from ..core.models import DataBundle, Profile
from ..core.verbose import vlog_storage
from .codec import build_backup, encode_payload, parse_backup
from .types import StorageInfo, StorageResult, StorageSnapshot

T = TypeVar("T")


# * Abstract persistence gateway
# Orchestrates: availability check -> (de)serialization -> backend hook -> StorageResult
# Public methods are awaitable & always return StorageResult, never raise to callers
class PersistenceGateway(ABC):

    # * Subclasses set this to their backend id ("device", "database")
    backend_name: str = ""

    # * Save profiles & master data as one unit
    async def save(self, profiles: list[Profile], data: DataBundle) -> StorageResult[None]:
        return await self._run("save", self._save, profiles, data)

    # * Load the last saved unit; fails when nothing was saved or stored data is invalid
    async def load(self) -> StorageResult[StorageSnapshot]:
        return await self._run("load", self._load)

    # * Produce a versioned, timestamped backup string of the stored state
    async def backup(self) -> StorageResult[str]:
        return await self._run("backup", self._backup)

    # * Validate a backup envelope, then replace the stored state with its payload
    async def restore(self, backup: str) -> StorageResult[None]:
        return await self._run("restore", self._restore, backup)

    # * Wipe stored state
    async def clear(self) -> StorageResult[None]:
        return await self._run("clear", self._clear)

    async def info(self) -> StorageResult[StorageInfo]:
        return await self._run("info", self._info)

    # run a synchronous hook off the event loop & convert errors into results
    async def _run(
        self, operation: str, func: Callable[..., T], *args: Any
    ) -> StorageResult[T]:
        try:
            value = await asyncio.to_thread(func, *args)
        except HubError as e:
            vlog_storage(self.backend_name, operation, False, error=str(e))
            return StorageResult(success=False, error=str(e))
        except Exception as e:
            vlog_storage(self.backend_name, operation, False, error=f"Unexpected: {e}")
            return StorageResult(
                success=False,
                error=f"Unexpected error during {self.backend_name} {operation}: {e}",
            )
        vlog_storage(self.backend_name, operation, True)
        return StorageResult(success=True, data=value)

    def _save(self, profiles: list[Profile], data: DataBundle) -> None:
        self.check_available()
        try:
            payload_text = encode_payload(profiles, data)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to serialize data: {e}") from e
        self.write_snapshot(StorageSnapshot(profiles=profiles, data=data), payload_text)

    def _load(self) -> StorageSnapshot:
        self.check_available()
        return self.read_snapshot()

    def _backup(self) -> str:
        self.check_available()
        try:
            snapshot = self.read_snapshot()
        except SnapshotNotFoundError as e:
            raise SnapshotNotFoundError("No data to backup") from e
        envelope = build_backup(encode_payload(snapshot.profiles, snapshot.data))
        self.write_backup(envelope)
        return envelope

    def _restore(self, backup: str) -> None:
        self.check_available()
        # parse_backup raises before anything is written
        snapshot = parse_backup(backup)
        self.write_snapshot(snapshot, encode_payload(snapshot.profiles, snapshot.data))

    def _clear(self) -> None:
        self.check_available()
        self.clear_storage()

    def _info(self) -> StorageInfo:
        self.check_available()
        return self.storage_info()

    # raise StorageUnavailableError when the backend cannot be used here
    def check_available(self) -> None:
        pass

    # * Persist the snapshot atomically (subclasses must implement)
    @abstractmethod
    def write_snapshot(self, snapshot: StorageSnapshot, payload_text: str) -> None:
        pass

    # * Read & validate the stored snapshot (subclasses must implement)
    @abstractmethod
    def read_snapshot(self) -> StorageSnapshot:
        pass

    # keep a copy of the latest backup envelope (default: not kept)
    def write_backup(self, envelope: str) -> None:
        pass

    @abstractmethod
    def clear_storage(self) -> None:
        pass

    @abstractmethod
    def storage_info(self) -> StorageInfo:
        pass
