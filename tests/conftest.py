# tests/conftest.py
# Pytest configuration w/ isolation fixtures for deterministic test runs

import asyncio
import itertools
import json
from pathlib import Path

import pytest

from profilehub.core.exceptions import (
    SnapshotNotFoundError,
    StorageError,
    StorageUnavailableError,
)
from profilehub.core.models import DataBundle, Profile
from profilehub.core.seed import default_data
from profilehub.storage.base import PersistenceGateway
from profilehub.storage.codec import decode_payload
from profilehub.storage.types import StorageInfo, StorageSnapshot


@pytest.fixture(autouse=True)
def isolate_config(tmp_path, monkeypatch):
    # Patch Path.home() to isolated temp directory
    fake_home = tmp_path / "fake_home"
    fake_home.mkdir()

    # Create isolated .profilehub directory
    hub_dir = fake_home / ".profilehub"
    hub_dir.mkdir()

    # Create minimal config.json w/ test defaults; storage lives under the temp dir
    config_data = {
        "storage_backend": "device",
        "device_storage_dir": str(hub_dir / "storage"),
        "storage_quota_bytes": 5 * 1024 * 1024,
        "database_path": str(hub_dir / "profilehub.db"),
        "user_id": "test-user",
        "model": "gpt-5-mini",
        "temperature": 0.2,
        "dev_mode": False,
    }

    config_file = hub_dir / "config.json"
    with open(config_file, "w") as f:
        json.dump(config_data, f, indent=2)

    monkeypatch.setattr(Path, "home", lambda: fake_home)

    # ! reset global settings_manager state & patch its config_path to use isolated location
    from profilehub.config.settings import settings_manager

    settings_manager._settings = None
    settings_manager.config_path = config_file

    # ! reset output manager to NullOutputManager for test isolation
    from profilehub.core.output import reset_output_manager

    reset_output_manager()

    yield fake_home

    reset_output_manager()


@pytest.fixture(autouse=True)
def block_network():
    # Block all network calls by default w/ pytest-socket
    # tests requiring network must explicitly enable w/ pytest.mark.enable_socket
    try:
        pytest_socket = pytest.importorskip("pytest_socket")
        pytest_socket.disable_socket(allow_unix_socket=True)
    except pytest.skip.Exception:
        # Pytest-socket not installed, skip network blocking
        pass


@pytest.fixture
def mock_env_vars(monkeypatch):
    # Seed test environment w/ required API keys
    test_env = {"OPENAI_API_KEY": "test-openai-key-12345"}

    for key, value in test_env.items():
        monkeypatch.setenv(key, value)

    return test_env


# * In-memory gateway: keeps the last saved payload text & can be told to fail
class MemoryGateway(PersistenceGateway):

    backend_name = "memory"

    def __init__(self, payload: str | None = None):
        self.payload = payload
        self.backup_text: str | None = None
        self.fail_writes: str | None = None
        self.unavailable: str | None = None
        self.saves = 0

    def check_available(self) -> None:
        if self.unavailable:
            raise StorageUnavailableError(self.unavailable)

    def write_snapshot(self, snapshot: StorageSnapshot, payload_text: str) -> None:
        if self.fail_writes:
            raise StorageError(self.fail_writes)
        self.payload = payload_text
        self.saves += 1

    def read_snapshot(self) -> StorageSnapshot:
        if not self.payload:
            raise SnapshotNotFoundError("No data found")
        return decode_payload(self.payload)

    def write_backup(self, envelope: str) -> None:
        self.backup_text = envelope

    def clear_storage(self) -> None:
        self.payload = None
        self.backup_text = None

    def storage_info(self) -> StorageInfo:
        return StorageInfo(self.backend_name, len(self.payload or ""), 0)


@pytest.fixture
def memory_gateway():
    return MemoryGateway()


# a second, independent backend (migration targets)
@pytest.fixture
def other_gateway():
    return MemoryGateway()


# * Deterministic id factory: "id-1", "id-2", ...
@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def sample_data() -> DataBundle:
    return default_data()


@pytest.fixture
def make_store(memory_gateway, id_factory):
    # build a loaded ProfilesStore over the in-memory gateway
    from profilehub.store.profiles import ProfilesStore

    def _make(gateway=None, **kwargs):
        store = ProfilesStore(gateway or memory_gateway, id_factory=id_factory, **kwargs)
        asyncio.run(store.load_from_storage())
        return store

    return _make


@pytest.fixture
def sample_profile() -> Profile:
    return Profile(
        id="p1",
        name="Backend",
        experience_ids=["experience-1", "experience-2"],
        project_ids=["project-1"],
        skill_ids=["languages"],
        education_ids=["education-1"],
    )


@pytest.fixture
def sample_job_description():
    # Provide sample job posting for testing
    return """Backend Engineer - Python

We are looking for a Python developer to join our platform team.

Requirements:
• 3+ years experience w/ Python
• Experience w/ REST APIs
• AWS knowledge preferred"""
