# tests/unit/store/test_store_persistence.py
# Unit tests for ProfilesStore persistence: load fallback, failed saves, backups, backend switching & optimization

import asyncio
from datetime import datetime, timezone

from profilehub.ai.optimizer import OptimizationSuggestion, job_description_hash
from profilehub.core.models import Category, ItemOverride
from profilehub.core.seed import default_data, default_profiles
from profilehub.storage.codec import decode_payload, encode_payload
from profilehub.store.profiles import ProfilesStore

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestLoad:

    # * Verify stored state is loaded as-is
    def test_load_existing_payload(self, memory_gateway, sample_data):
        ids = iter(["a", "b"])
        memory_gateway.payload = encode_payload(
            default_profiles(sample_data, lambda: next(ids)), sample_data
        )
        store = ProfilesStore(memory_gateway)
        asyncio.run(store.load_from_storage())

        assert [p.id for p in store.profiles] == ["a", "b"]
        assert store.loading is False
        assert memory_gateway.saves == 0

    # * Verify a failed load falls back to defaults & saves them
    def test_first_run_seeds_defaults(self, make_store, memory_gateway):
        store = make_store()
        assert len(store.profiles) == 2
        assert store.data == default_data()
        assert memory_gateway.saves == 1
        assert store.last_saved is not None

    def test_corrupt_payload_replaced_by_defaults(self, make_store, memory_gateway):
        memory_gateway.payload = '{"profiles": "nope"}'
        store = make_store()
        assert len(store.profiles) == 2
        assert len(decode_payload(memory_gateway.payload).profiles) == 2

    def test_unavailable_backend_keeps_defaults_in_memory(self, make_store, memory_gateway):
        memory_gateway.unavailable = "no storage here"
        store = make_store()
        assert len(store.profiles) == 2
        assert store.error == "no storage here"


class TestSave:

    # * Verify a failed save keeps the in-memory change & records the error
    def test_failed_save_keeps_change(self, make_store, memory_gateway):
        store = make_store()
        memory_gateway.fail_writes = "disk full"

        profile = asyncio.run(store.create_profile("Kept"))

        assert store.profiles[0] is profile
        assert store.error == "disk full"
        assert store.saving is False
        assert len(decode_payload(memory_gateway.payload).profiles) == 2

    def test_next_successful_save_clears_error(self, make_store, memory_gateway):
        store = make_store()
        memory_gateway.fail_writes = "disk full"
        asyncio.run(store.create_profile("A"))
        memory_gateway.fail_writes = None

        asyncio.run(store.create_profile("B"))

        assert store.error is None
        assert len(decode_payload(memory_gateway.payload).profiles) == 4

    def test_clear_error(self, make_store, memory_gateway):
        store = make_store()
        memory_gateway.fail_writes = "disk full"
        asyncio.run(store.delete_profile("id-2"))
        store.clear_error()
        assert store.error is None

    # * Verify overlapping mutations persist the latest state last
    def test_concurrent_mutations_last_write_wins(self, make_store, memory_gateway):
        store = make_store()

        async def both():
            await asyncio.gather(store.create_profile("A"), store.create_profile("B"))

        asyncio.run(both())

        stored = decode_payload(memory_gateway.payload)
        assert [p.name for p in stored.profiles[:2]] == ["B", "A"]
        assert len(stored.profiles) == 4


class TestBackupRestore:

    def test_backup_then_restore(self, make_store):
        store = make_store()
        backup = asyncio.run(store.backup_data())
        asyncio.run(store.delete_profile("id-1"))

        assert asyncio.run(store.restore_data(backup))
        assert [p.id for p in store.profiles] == ["id-1", "id-2"]

    # * Verify a rejected backup changes nothing & reports why
    def test_restore_rejects_foreign_backup(self, make_store, memory_gateway):
        store = make_store()
        before = memory_gateway.payload

        assert not asyncio.run(store.restore_data('{"version": "v1", "data": "{}"}'))

        assert "Unsupported backup version" in store.error
        assert memory_gateway.payload == before
        assert len(store.profiles) == 2

    def test_backup_failure_sets_error(self, make_store, memory_gateway):
        store = make_store()
        memory_gateway.payload = None
        assert asyncio.run(store.backup_data()) is None
        assert store.error == "No data to backup"

    def test_clear_all_data(self, make_store, memory_gateway):
        store = make_store()
        assert asyncio.run(store.clear_all_data())
        assert store.profiles == []
        assert store.data.experiences == []
        assert memory_gateway.payload is None

    def test_reset_all(self, make_store):
        store = make_store()
        asyncio.run(store.delete_profile("id-1"))
        asyncio.run(store.delete_item(Category.SKILL, "tools"))

        asyncio.run(store.reset_all())

        assert len(store.profiles) == 2
        assert store.data == default_data()


class TestSwitchBackend:

    # * Verify migration copies everything before the active backend changes
    def test_switch_with_migration(self, make_store, memory_gateway, other_gateway):
        store = make_store()
        asyncio.run(store.create_profile("Extra"))

        assert asyncio.run(store.switch_backend(other_gateway))

        assert store.gateway is other_gateway
        assert decode_payload(other_gateway.payload) == decode_payload(memory_gateway.payload)
        assert len(store.profiles) == 3

    def test_failed_migration_keeps_backend(self, make_store, memory_gateway, other_gateway):
        store = make_store()
        other_gateway.fail_writes = "read-only"

        assert not asyncio.run(store.switch_backend(other_gateway))

        assert store.gateway is memory_gateway
        assert store.error == "Migration failed writing memory: read-only"

    def test_switch_without_migration_loads_destination(self, make_store, other_gateway):
        store = make_store()
        asyncio.run(store.create_profile("Only here"))

        assert asyncio.run(store.switch_backend(other_gateway, migrate=False))

        assert store.gateway is other_gateway
        assert "Only here" not in [p.name for p in store.profiles]


class TestApplyOptimization:

    # * Verify a suggestion becomes an ordinary profile update w/ metadata
    def test_apply_optimization(self, make_store, memory_gateway, sample_job_description):
        store = make_store(clock=lambda: FIXED_NOW)
        suggestion = OptimizationSuggestion(
            summary="Python platform engineer",
            overrides={
                Category.EXPERIENCE: {
                    "experience-1": ItemOverride.create(
                        Category.EXPERIENCE, {"bullets": ["Built Python APIs"]}
                    )
                }
            },
            item_order={Category.SKILL: ["cloud", "languages"]},
            key_insights=["Python", "AWS"],
        )

        profile = asyncio.run(
            store.apply_optimization(
                "id-1", suggestion, sample_job_description, "https://jobs.example/1"
            )
        )

        assert profile.personal_info.summary == "Python platform engineer"
        assert profile.experience_overrides["experience-1"].values["bullets"] == [
            "Built Python APIs"
        ]
        assert profile.skill_ids == ["cloud", "languages", "tools"]
        assert profile.ai_optimization.timestamp == FIXED_NOW.isoformat()
        assert profile.ai_optimization.job_description_hash == job_description_hash(
            sample_job_description
        )
        assert profile.ai_optimization.job_url == "https://jobs.example/1"
        stored = decode_payload(memory_gateway.payload).profiles
        assert stored[0].ai_optimization.key_insights == ["Python", "AWS"]

    def test_apply_to_unknown_profile(self, make_store):
        store = make_store()
        suggestion = OptimizationSuggestion(summary="x")
        assert asyncio.run(store.apply_optimization("missing", suggestion, "job")) is None
