# profilehub/storage/types.py
# Shared result & snapshot types for persistence gateways

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from ..core.models import DataBundle, Profile

T = TypeVar("T")


# * Result object for gateway operations (errors are values, never raised past the gateway)
@dataclass(slots=True)
class StorageResult(Generic[T]):
    success: bool  # indicates if the operation completed
    data: T | None = None  # payload on success (snapshot, backup string, info)
    error: str = ""  # user-facing error message on failure


# * The unit every backend persists atomically
@dataclass(slots=True)
class StorageSnapshot:
    profiles: list[Profile] = field(default_factory=list)
    data: DataBundle = field(default_factory=DataBundle)


# * Capacity report (bytes); available is 0 when the backend has no fixed quota
@dataclass(slots=True)
class StorageInfo:
    backend: str
    used: int
    available: int

    @property
    def percentage(self) -> float:
        if self.available <= 0:
            return 0.0
        return self.used / self.available * 100
