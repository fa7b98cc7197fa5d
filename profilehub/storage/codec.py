# profilehub/storage/codec.py
# JSON codec for the persisted {profiles, data} payload & the versioned backup envelope

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from ..core.constants import BACKUP_VERSION
from ..core.exceptions import BackupFormatError, SnapshotCorruptError, ValidationError
from ..core.models import DataBundle, Profile, profiles_from_list
from .types import StorageSnapshot


# * Serialize profiles & master data as one JSON document
def encode_payload(profiles: list[Profile], data: DataBundle) -> str:
    payload = {
        "profiles": [p.to_dict() for p in profiles],
        "data": data.to_dict(),
    }
    return json.dumps(payload, ensure_ascii=False)


# check the top-level shape before decoding records
def _check_structure(parsed: Any) -> None:
    if not isinstance(parsed, dict):
        raise SnapshotCorruptError("Invalid data structure: expected an object")
    if not isinstance(parsed.get("profiles"), list):
        raise SnapshotCorruptError("Invalid data structure: profiles must be an array")
    data = parsed.get("data")
    if not isinstance(data, dict):
        raise SnapshotCorruptError("Invalid data structure: data must be an object")
    if not isinstance(data.get("personalInfo"), dict):
        raise SnapshotCorruptError("Invalid data structure: missing personalInfo")
    for key in ("experiences", "projects", "skills", "education"):
        if not isinstance(data.get(key), list):
            raise SnapshotCorruptError(f"Invalid data structure: {key} must be an array")


# * Parse & validate a stored payload; corrupt or foreign data raises SnapshotCorruptError
def decode_payload(text: str) -> StorageSnapshot:
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise SnapshotCorruptError(f"Stored data is not valid JSON: {e}") from e

    _check_structure(parsed)
    try:
        return StorageSnapshot(
            profiles=profiles_from_list(parsed["profiles"]),
            data=DataBundle.from_dict(parsed["data"]),
        )
    except ValidationError as e:
        raise SnapshotCorruptError(f"Invalid data structure: {e}") from e


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# * Wrap a serialized payload in the versioned, timestamped backup envelope
def build_backup(payload_text: str, timestamp: str | None = None) -> str:
    envelope = {
        "version": BACKUP_VERSION,
        "timestamp": timestamp or utc_timestamp(),
        "data": payload_text,
    }
    return json.dumps(envelope, ensure_ascii=False)


# * Validate a backup envelope & its payload; returns the snapshot it carries
def parse_backup(text: str) -> StorageSnapshot:
    try:
        envelope = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise BackupFormatError(f"Invalid backup format: {e}") from e

    if not isinstance(envelope, dict) or not envelope.get("version") or not envelope.get("data"):
        raise BackupFormatError("Invalid backup format")
    if envelope["version"] != BACKUP_VERSION:
        raise BackupFormatError(
            f"Unsupported backup version: {envelope['version']!r} (expected {BACKUP_VERSION})"
        )
    if not isinstance(envelope["data"], str):
        raise BackupFormatError("Invalid backup format: data must be a serialized string")

    try:
        return decode_payload(envelope["data"])
    except SnapshotCorruptError as e:
        raise BackupFormatError(f"Backup payload rejected: {e}") from e
