# tests/unit/storage/test_database_gateway.py
# Unit tests for the SQLite backend: normalized rows, user scoping & snapshot reassembly

import asyncio
import json
import sqlite3

import pytest

from profilehub.core.constants import Template
from profilehub.core.models import AIOptimization, Category, ItemOverride, PersonalInfo
from profilehub.core.seed import default_profiles
from profilehub.storage.database import DatabaseGateway


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "db" / "hub.db"


@pytest.fixture
def gateway(db_path):
    return DatabaseGateway(db_path, "user-a")


@pytest.fixture
def profiles(sample_data):
    ids = iter(["p1", "p2"])
    profiles = default_profiles(sample_data, lambda: next(ids))
    first = profiles[0].with_overrides(
        Category.EXPERIENCE,
        {
            "experience-1": ItemOverride.create(
                Category.EXPERIENCE, {"title": "Lead Engineer", "bullets": ["Did Y"]}
            )
        },
    )
    first.section_order = ["experiences", "skills"]
    first.formatting = {"fontSize": 10}
    first.ai_optimization = AIOptimization("2026-01-01T00:00:00+00:00", ["Python"], "abc123")
    return [first, profiles[1]]


# * Verify a save/load cycle reassembles the exact in-memory shapes
def test_round_trip(gateway, profiles, sample_data):
    assert asyncio.run(gateway.save(profiles, sample_data)).success

    loaded = asyncio.run(gateway.load())
    assert loaded.success
    assert loaded.data.data == sample_data
    assert loaded.data.profiles == profiles
    assert loaded.data.profiles[1].template is Template.COMPACT


def test_rows_are_normalized(gateway, profiles, sample_data):
    asyncio.run(gateway.save(profiles, sample_data))

    bullets = gateway.query(
        "SELECT content FROM experience_bullets WHERE item_id = ? ORDER BY entry_order",
        ("experience-1",),
    )
    assert [r["content"] for r in bullets] == sample_data.experiences[0].bullets

    items = gateway.query(
        "SELECT item_id, title_override FROM profile_items "
        "WHERE profile_id = 'p1' AND item_type = 'EXPERIENCE' ORDER BY item_order"
    )
    assert [r["item_id"] for r in items] == ["experience-1", "experience-2"]
    assert items[0]["title_override"] == "Lead Engineer"

    config = json.loads(gateway.query("SELECT config FROM profiles WHERE id = 'p1'")[0]["config"])
    assert "experienceIds" not in config
    assert config["experienceOverrides"]["experience-1"]["bullets"] == ["Did Y"]


def test_load_without_rows(gateway):
    result = asyncio.run(gateway.load())
    assert not result.success
    assert result.error == "No data found"


# * Verify rows are scoped to the gateway's user
def test_users_are_isolated(db_path, profiles, sample_data):
    alice = DatabaseGateway(db_path, "alice")
    bob = DatabaseGateway(db_path, "bob")

    asyncio.run(alice.save(profiles, sample_data))
    assert not asyncio.run(bob.load()).success

    asyncio.run(bob.save(profiles[:1], sample_data))
    asyncio.run(bob.clear())
    assert len(asyncio.run(alice.load()).data.profiles) == 2


def test_save_replaces_previous_rows(gateway, profiles, sample_data):
    asyncio.run(gateway.save(profiles, sample_data))
    trimmed = sample_data.with_items(Category.SKILL, sample_data.skills[:1])
    asyncio.run(gateway.save(profiles[1:], trimmed))

    loaded = asyncio.run(gateway.load()).data
    assert [p.id for p in loaded.profiles] == ["p2"]
    assert [s.id for s in loaded.data.skills] == ["languages"]


# * Verify repeated ids in one profile list collapse to the first occurrence
def test_duplicate_ids_collapse(gateway, profiles, sample_data):
    profiles[1].skill_ids = ["tools", "languages", "tools"]
    asyncio.run(gateway.save(profiles, sample_data))
    loaded = asyncio.run(gateway.load()).data
    assert loaded.profiles[1].skill_ids == ["tools", "languages"]


def test_profile_personal_info_kept_in_config(gateway, profiles, sample_data):
    profiles[1].personal_info = PersonalInfo(full_name="Alt Name", email="alt@x.io")
    asyncio.run(gateway.save(profiles, sample_data))
    loaded = asyncio.run(gateway.load()).data
    assert loaded.profiles[1].personal_info.full_name == "Alt Name"


def test_empty_user_id_unavailable(db_path, profiles, sample_data):
    result = asyncio.run(DatabaseGateway(db_path, "").save(profiles, sample_data))
    assert not result.success
    assert "user id" in result.error


def test_corrupt_config_reported(gateway, profiles, sample_data):
    asyncio.run(gateway.save(profiles, sample_data))
    with sqlite3.connect(gateway.db_path) as conn:
        conn.execute("UPDATE profiles SET config = '[1]' WHERE id = 'p1'")
    result = asyncio.run(gateway.load())
    assert not result.success
    assert "Invalid data structure" in result.error


# * Verify backups from the database restore into the database
def test_backup_restore(gateway, profiles, sample_data):
    asyncio.run(gateway.save(profiles, sample_data))
    backup = asyncio.run(gateway.backup()).data
    asyncio.run(gateway.clear())

    assert asyncio.run(gateway.restore(backup)).success
    assert asyncio.run(gateway.load()).data.profiles == profiles


def test_info_has_no_quota(gateway, profiles, sample_data):
    asyncio.run(gateway.save(profiles, sample_data))
    info = asyncio.run(gateway.info()).data
    assert info.backend == "database"
    assert info.used > 0
    assert info.available == 0
    assert info.percentage == 0.0


# * Verify item subtitles are stored as columns & survive a load
def test_subtitles_round_trip(gateway, profiles, sample_data):
    experiences = [
        sample_data.experiences[0].patched(subtitle="Platform team"),
        *sample_data.experiences[1:],
    ]
    data = sample_data.with_items(Category.EXPERIENCE, experiences)
    asyncio.run(gateway.save(profiles, data))

    row = gateway.query("SELECT subtitle FROM experiences WHERE id = ?", ("experience-1",))
    assert row[0]["subtitle"] == "Platform team"
    loaded = asyncio.run(gateway.load()).data.data
    assert loaded.experiences[0].subtitle == "Platform team"
    assert loaded.experiences[1].subtitle is None
