# tests/unit/config/test_settings.py
# Unit tests for HubSettings validation & JSON-backed SettingsManager

import json
from pathlib import Path

import pytest

from profilehub.config.settings import HubSettings, SettingsManager, get_settings
from profilehub.core.constants import DEFAULT_QUOTA_BYTES, StorageBackend
from profilehub.core.exceptions import SettingsValidationError


# * Test HubSettings dataclass behavior
class TestHubSettings:

    # * Test default values are correctly set
    def test_default_settings(self):
        settings = HubSettings()

        assert settings.storage_backend == "device"
        assert settings.backend is StorageBackend.DEVICE
        assert settings.storage_quota_bytes == DEFAULT_QUOTA_BYTES
        assert settings.user_id == "local"
        assert settings.model == "gpt-5-mini"
        assert settings.temperature == 0.2
        assert settings.dev_mode is False

    def test_paths_expand_home(self, isolate_config, monkeypatch):
        monkeypatch.setenv("HOME", str(isolate_config))
        settings = HubSettings(device_storage_dir="~/store", database_path="~/hub.db")
        assert settings.device_storage_path == isolate_config / "store"
        assert settings.database_file == isolate_config / "hub.db"

    @pytest.mark.parametrize(
        "kwargs, setting",
        [
            ({"storage_backend": "cloud"}, "storage_backend"),
            ({"storage_quota_bytes": 0}, "storage_quota_bytes"),
            ({"storage_quota_bytes": True}, "storage_quota_bytes"),
            ({"user_id": "  "}, "user_id"),
            ({"temperature": 2.5}, "temperature"),
            ({"temperature": "hot"}, "temperature"),
            ({"dev_mode": "yes"}, "dev_mode"),
        ],
    )
    # * Verify invalid values raise w/ the offending setting name
    def test_validation(self, kwargs, setting):
        with pytest.raises(SettingsValidationError) as exc:
            HubSettings(**kwargs)
        assert exc.value.setting_name == setting


# * Test SettingsManager persistence
class TestSettingsManager:

    def test_load_missing_file_gives_defaults(self, tmp_path):
        manager = SettingsManager(tmp_path / "none" / "config.json")
        assert manager.load() == HubSettings()

    def test_load_reads_file(self, isolate_config):
        manager = SettingsManager(isolate_config / ".profilehub" / "config.json")
        assert manager.load().user_id == "test-user"

    # * Verify an invalid file falls back to defaults w/ a warning
    def test_invalid_file_falls_back(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"storage_backend": "cloud"}))

        settings = SettingsManager(path).load()

        assert settings == HubSettings()
        assert "Invalid config file" in capsys.readouterr().out

    def test_unknown_key_in_file_falls_back(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"theme": "dark"}))
        assert SettingsManager(path).load() == HubSettings()

    def test_set_persists(self, tmp_path):
        path = tmp_path / "config.json"
        manager = SettingsManager(path)
        manager.set("storage_backend", "database")

        assert json.loads(path.read_text())["storage_backend"] == "database"
        assert SettingsManager(path).load().backend is StorageBackend.DATABASE

    # * Verify set re-validates & leaves the stored file alone on failure
    def test_set_invalid_value(self, tmp_path):
        path = tmp_path / "config.json"
        manager = SettingsManager(path)
        with pytest.raises(SettingsValidationError):
            manager.set("temperature", 9)
        with pytest.raises(SettingsValidationError):
            manager.set("nope", 1)
        assert not path.exists()

    def test_reset(self, tmp_path):
        manager = SettingsManager(tmp_path / "config.json")
        manager.set("model", "gpt-4o")
        manager.reset()
        assert manager.get("model") == "gpt-5-mini"
        assert manager.list_settings()["model"] == "gpt-5-mini"


def test_get_settings_prefers_provided():
    provided = HubSettings(user_id="explicit")
    assert get_settings(None, provided) is provided


def test_default_config_path_under_home(isolate_config):
    assert SettingsManager().config_path == Path(isolate_config) / ".profilehub" / "config.json"
