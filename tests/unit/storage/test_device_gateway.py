# tests/unit/storage/test_device_gateway.py
# Unit tests for device key/value storage & its gateway (quota, availability, backup/restore)

import asyncio
import json

import pytest

from profilehub.core.constants import BACKUP_KEY, PROFILES_KEY
from profilehub.core.exceptions import QuotaExceededError, StorageUnavailableError
from profilehub.core.seed import default_profiles
from profilehub.storage.device import DeviceStorage, DeviceStorageGateway


@pytest.fixture
def storage(tmp_path):
    return DeviceStorage(tmp_path / "device")


@pytest.fixture
def gateway(storage):
    return DeviceStorageGateway(storage)


@pytest.fixture
def profiles(sample_data):
    ids = iter(["p1", "p2"])
    return default_profiles(sample_data, lambda: next(ids))


class TestDeviceStorage:

    def test_set_get_remove(self, storage):
        storage.check_available()
        storage.set_item("key", "value")
        assert storage.get_item("key") == "value"
        assert storage.keys() == ["key"]
        storage.remove_item("key")
        assert storage.get_item("key") is None

    # * Verify writes past the quota fail & leave the old value in place
    def test_quota_exceeded(self, tmp_path):
        storage = DeviceStorage(tmp_path / "small", quota_bytes=10)
        storage.check_available()
        storage.set_item("a", "12345")
        with pytest.raises(QuotaExceededError) as exc:
            storage.set_item("b", "1234567890")
        assert exc.value.available == 10
        assert storage.get_item("b") is None
        assert storage.get_item("a") == "12345"

    def test_overwrite_counts_only_new_size(self, tmp_path):
        storage = DeviceStorage(tmp_path / "small", quota_bytes=10)
        storage.check_available()
        storage.set_item("a", "1234567890")
        storage.set_item("a", "0987654321")
        assert storage.usage() == 10

    def test_unavailable_without_root(self):
        with pytest.raises(StorageUnavailableError):
            DeviceStorage(None).check_available()

    def test_invalid_key_rejected(self, storage):
        storage.check_available()
        with pytest.raises(ValueError):
            storage.set_item("../escape", "x")


class TestDeviceStorageGateway:

    # * Verify save then load returns the same profiles & data
    def test_save_load_round_trip(self, gateway, storage, profiles, sample_data):
        saved = asyncio.run(gateway.save(profiles, sample_data))
        assert saved.success

        loaded = asyncio.run(gateway.load())
        assert loaded.success
        assert loaded.data.profiles == profiles
        assert loaded.data.data == sample_data
        assert PROFILES_KEY in storage.keys()

    def test_load_without_data_fails(self, gateway):
        result = asyncio.run(gateway.load())
        assert not result.success
        assert result.error == "No data found"

    def test_load_corrupt_payload_fails(self, gateway, storage):
        storage.check_available()
        storage.set_item(PROFILES_KEY, "{not json")
        result = asyncio.run(gateway.load())
        assert not result.success
        assert "not valid JSON" in result.error

    # * Verify an unavailable backend reports failure instead of raising
    def test_unavailable_reports_error(self, profiles, sample_data):
        gateway = DeviceStorageGateway(DeviceStorage(None))
        result = asyncio.run(gateway.save(profiles, sample_data))
        assert not result.success
        assert "not available" in result.error

    def test_quota_failure_reported(self, tmp_path, profiles, sample_data):
        gateway = DeviceStorageGateway(DeviceStorage(tmp_path / "tiny", quota_bytes=100))
        result = asyncio.run(gateway.save(profiles, sample_data))
        assert not result.success
        assert "quota exceeded" in result.error

    def test_backup_without_data(self, gateway):
        result = asyncio.run(gateway.backup())
        assert not result.success
        assert result.error == "No data to backup"

    # * Verify backups are stored under their own key & restore round-trips
    def test_backup_then_restore(self, gateway, storage, profiles, sample_data):
        asyncio.run(gateway.save(profiles, sample_data))
        backup = asyncio.run(gateway.backup())
        assert backup.success
        assert json.loads(backup.data)["version"] == "v2"
        assert storage.get_item(BACKUP_KEY) == backup.data

        asyncio.run(gateway.save(profiles[:1], sample_data))
        restored = asyncio.run(gateway.restore(backup.data))
        assert restored.success
        assert len(asyncio.run(gateway.load()).data.profiles) == 2

    # * Verify a rejected envelope leaves stored state untouched
    def test_restore_rejects_without_writing(self, gateway, storage, profiles, sample_data):
        asyncio.run(gateway.save(profiles, sample_data))
        before = storage.get_item(PROFILES_KEY)

        bad = json.dumps({"version": "v9", "timestamp": "t", "data": "{}"})
        result = asyncio.run(gateway.restore(bad))

        assert not result.success
        assert "Unsupported backup version" in result.error
        assert storage.get_item(PROFILES_KEY) == before

    def test_clear_removes_both_keys(self, gateway, storage, profiles, sample_data):
        asyncio.run(gateway.save(profiles, sample_data))
        asyncio.run(gateway.backup())
        assert asyncio.run(gateway.clear()).success
        assert storage.keys() == []

    def test_info_reports_usage(self, gateway, profiles, sample_data):
        asyncio.run(gateway.save(profiles, sample_data))
        info = asyncio.run(gateway.info()).data
        assert info.backend == "device"
        assert 0 < info.used < info.available
        assert 0 < info.percentage < 100
