# profilehub/storage/migration.py
# Copy the full stored state from one backend to another

from __future__ import annotations

from ..core.verbose import vlog
from .base import PersistenceGateway
from .types import StorageResult, StorageSnapshot


async def migrate_between_backends(
    source: PersistenceGateway, destination: PersistenceGateway
) -> StorageResult[StorageSnapshot]:
    """Load everything from ``source`` and save it to ``destination``.

    Returns the migrated snapshot on success. On failure the failing
    result's error is returned and the caller keeps its active backend.
    """
    vlog("STORAGE", f"Migrating {source.backend_name} -> {destination.backend_name}")

    loaded = await source.load()
    if not loaded.success or loaded.data is None:
        return StorageResult(
            success=False,
            error=f"Migration failed reading {source.backend_name}: {loaded.error}",
        )

    snapshot = loaded.data
    saved = await destination.save(snapshot.profiles, snapshot.data)
    if not saved.success:
        return StorageResult(
            success=False,
            error=f"Migration failed writing {destination.backend_name}: {saved.error}",
        )
    return StorageResult(success=True, data=snapshot)
