# profilehub/store/profiles.py
# Profiles store: the single mutation surface over profiles & master data, persisting after every change

from __future__ import annotations

import asyncio
import copy
from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Mapping

from ..core.constants import CLONE_SUFFIX, NEW_PROFILE_NAME, Template
from ..core.exceptions import ValidationError
from ..core.models import (
    AIOptimization,
    Category,
    DataBundle,
    Item,
    ItemOverride,
    PersonalInfo,
    Profile,
    new_id,
    validate_section_order,
)
from ..core.seed import default_data, default_profiles
from ..core.verbose import vlog_mutation, warn
from ..storage.base import PersistenceGateway
from ..storage.migration import migrate_between_backends

if TYPE_CHECKING:
    from ..ai.optimizer import OptimizationSuggestion

SAVE_ERROR = "Failed to save data"
BACKUP_ERROR = "Failed to create backup"
RESTORE_ERROR = "Failed to restore backup"

# profile fields update_profile may change (id is fixed for a profile's lifetime)
PROFILE_FIELDS = tuple(f.name for f in fields(Profile) if f.name != "id")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _check_fields(owner: type, changes: Mapping[str, Any], fixed: tuple[str, ...] = ()) -> None:
    allowed = {f.name for f in fields(owner)} - set(fixed)
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValidationError(
            f"Unknown {owner.__name__} field(s): {', '.join(unknown)}", field=unknown[0]
        )


def _coerce_overrides(category: Category, raw: Any) -> dict[str, ItemOverride]:
    if not isinstance(raw, Mapping):
        raise ValidationError(
            f"{category.overrides_attr} must be a mapping of item id to override",
            field=category.overrides_attr,
        )
    out: dict[str, ItemOverride] = {}
    for item_id, value in raw.items():
        if isinstance(value, ItemOverride):
            if value.category is not category:
                raise ValidationError(
                    f"{value.category.value} override given for {category.overrides_attr}",
                    field=category.overrides_attr,
                )
            out[item_id] = value
        else:
            out[item_id] = ItemOverride.create(category, value)
    return out


def _coerce_profile_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Validate an update_profile change set and normalize it to Profile field values.

    Override maps accept ``ItemOverride`` values or plain field mappings;
    ``template`` accepts the enum or its string value. Unknown field names
    and badly typed values raise ``ValidationError``.
    """
    unknown = sorted(set(changes) - set(PROFILE_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown profile field(s): {', '.join(unknown)}", field=unknown[0])

    out: dict[str, Any] = {}
    for name, value in changes.items():
        if name == "name":
            if not isinstance(value, str):
                raise ValidationError("Profile name must be a string", field=name)
        elif name == "personal_info":
            if value is not None and not isinstance(value, PersonalInfo):
                raise ValidationError("personal_info must be PersonalInfo or None", field=name)
        elif name.endswith("_ids"):
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValidationError(f"{name} must be a list of item ids", field=name)
            value = list(value)
        elif name.endswith("_overrides"):
            value = _coerce_overrides(Category(name.removesuffix("_overrides")), value)
        elif name == "template":
            try:
                value = Template(value)
            except ValueError as e:
                raise ValidationError(f"Unknown template: {value!r}", field=name) from e
        elif name == "section_order":
            value = None if value is None else validate_section_order(value)
        elif name == "formatting":
            if value is not None and not isinstance(value, dict):
                raise ValidationError("formatting must be an object", field=name)
            value = copy.deepcopy(value)
        elif name == "ai_optimization":
            if value is not None and not isinstance(value, AIOptimization):
                raise ValidationError("ai_optimization must be AIOptimization or None", field=name)
        out[name] = value
    return out


class ProfilesStore:
    """In-memory profiles & master data, persisted through an injected gateway.

    Every mutator computes new objects, assigns them to the store, and only
    then awaits a save. A failed save keeps the in-memory change and records
    the gateway's message in ``error`` until a later save succeeds or
    ``clear_error`` is called. Mutators addressed at an unknown profile id do
    nothing and return ``None``.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        id_factory: Callable[[], str] = new_id,
        seed_data: Callable[[], DataBundle] = default_data,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.gateway = gateway
        self._id_factory = id_factory
        self._seed_data = seed_data
        self._clock = clock

        self.profiles: list[Profile] = []
        self.data: DataBundle = DataBundle()
        self.loading = False
        self.saving = False
        self.error: str | None = None
        self.last_saved: datetime | None = None

        # saves run one at a time, in the order they were issued
        self._save_lock = asyncio.Lock()

    # * Lookups

    def get_profile(self, profile_id: str) -> Profile | None:
        for profile in self.profiles:
            if profile.id == profile_id:
                return profile
        return None

    def _index_of(self, profile_id: str) -> int | None:
        for i, profile in enumerate(self.profiles):
            if profile.id == profile_id:
                return i
        return None

    # id from the factory that is not already taken
    def _fresh_id(self, taken: set[str]) -> str:
        candidate = self._id_factory()
        while candidate in taken:
            candidate = self._id_factory()
        return candidate

    def _seed(self) -> None:
        self.data = self._seed_data()
        issued: set[str] = set()

        def next_id() -> str:
            value = self._fresh_id(issued)
            issued.add(value)
            return value

        self.profiles = default_profiles(self.data, next_id)

    # * Persistence

    async def load_from_storage(self) -> None:
        self.loading = True
        self.error = None
        try:
            result = await self.gateway.load()
            if result.success and result.data is not None:
                self.profiles = result.data.profiles
                self.data = result.data.data
                self.last_saved = None
                return
            # nothing usable stored: start from defaults so the store is never empty
            warn(f"Starting from defaults: {result.error}", "STORE")
            self.profiles = []
            self._seed()
            await self.save_to_storage()
        finally:
            self.loading = False

    async def save_to_storage(self) -> bool:
        async with self._save_lock:
            self.saving = True
            try:
                # snapshot taken after acquiring the lock: the last issued save writes the latest state
                result = await self.gateway.save(self.profiles, self.data)
            finally:
                self.saving = False
        if result.success:
            self.last_saved = self._clock()
            self.error = None
            return True
        self.error = result.error or SAVE_ERROR
        return False

    async def _commit(self, operation: str, target: str | None = None) -> bool:
        vlog_mutation(operation, target)
        return await self.save_to_storage()

    def _set_profile(self, index: int, profile: Profile) -> None:
        updated = list(self.profiles)
        updated[index] = profile
        self.profiles = updated

    # * Profile operations

    async def create_profile(self, name: str = NEW_PROFILE_NAME) -> Profile:
        profile = Profile(
            id=self._fresh_id({p.id for p in self.profiles}),
            name=name,
            personal_info=replace(self.data.personal_info, summary=""),
        )
        self.profiles = [profile, *self.profiles]
        await self._commit("create_profile", profile.id)
        return profile

    async def update_profile(self, profile_id: str, **changes: Any) -> Profile | None:
        values = _coerce_profile_changes(changes)
        index = self._index_of(profile_id)
        if index is None:
            return None
        profile = replace(self.profiles[index], **values)
        # keep empty override entries out of the stored maps
        for category in Category:
            if category.overrides_attr in values:
                profile = profile.with_overrides(category, profile.overrides_for(category))
        self._set_profile(index, profile)
        await self._commit("update_profile", profile_id)
        return profile

    async def delete_profile(self, profile_id: str) -> bool:
        if self._index_of(profile_id) is None:
            return False
        self.profiles = [p for p in self.profiles if p.id != profile_id]
        await self._commit("delete_profile", profile_id)
        return True

    async def clone_profile(self, profile_id: str) -> Profile | None:
        source = self.get_profile(profile_id)
        if source is None:
            return None
        cloned = replace(
            copy.deepcopy(source),
            id=self._fresh_id({p.id for p in self.profiles}),
            name=source.name + CLONE_SUFFIX,
        )
        self.profiles = [cloned, *self.profiles]
        await self._commit("clone_profile", f"{profile_id} -> {cloned.id}")
        return cloned

    async def reorder_items(
        self, profile_id: str, category: Category, from_index: int, to_index: int
    ) -> Profile | None:
        index = self._index_of(profile_id)
        if index is None:
            return None
        profile = self.profiles[index]
        ids = list(profile.ids_for(category))
        if not 0 <= from_index < len(ids):
            raise ValidationError(
                f"from_index {from_index} out of range for {len(ids)} {category.value} id(s)",
                field="from_index",
            )
        moved = ids.pop(from_index)
        ids.insert(to_index, moved)
        profile = profile.with_ids(category, ids)
        self._set_profile(index, profile)
        await self._commit("reorder_items", f"{profile_id}/{category.value}")
        return profile

    async def add_profile_item(
        self, profile_id: str, category: Category, item_id: str, position: int | None = None
    ) -> Profile | None:
        index = self._index_of(profile_id)
        if index is None:
            return None
        profile = self.profiles[index]
        ids = list(profile.ids_for(category))
        if item_id in ids:
            return profile
        ids.insert(len(ids) if position is None else position, item_id)
        profile = profile.with_ids(category, ids)
        self._set_profile(index, profile)
        await self._commit("add_profile_item", f"{profile_id}/{category.value}/{item_id}")
        return profile

    # overrides for the removed id stay in place, inert
    async def remove_profile_item(
        self, profile_id: str, category: Category, item_id: str
    ) -> Profile | None:
        index = self._index_of(profile_id)
        if index is None:
            return None
        profile = self.profiles[index]
        ids = [i for i in profile.ids_for(category) if i != item_id]
        profile = profile.with_ids(category, ids)
        self._set_profile(index, profile)
        await self._commit("remove_profile_item", f"{profile_id}/{category.value}/{item_id}")
        return profile

    # * Personal info

    async def update_personal_info(self, profile_id: str, **changes: Any) -> Profile | None:
        _check_fields(PersonalInfo, changes)
        index = self._index_of(profile_id)
        if index is None:
            return None
        profile = self.profiles[index]
        # a profile w/o its own personal info starts from a copy of master's
        base = profile.personal_info or self.data.personal_info
        info = base.patched(**changes)
        profile = replace(profile, personal_info=info)
        self._set_profile(index, profile)
        await self._commit("update_personal_info", profile_id)
        return profile

    async def update_master_personal_info(self, **changes: Any) -> PersonalInfo:
        _check_fields(PersonalInfo, changes)
        info = self.data.personal_info.patched(**changes)
        self.data = replace(self.data, personal_info=info)
        await self._commit("update_master_personal_info")
        return info

    # * Overrides

    async def set_override(
        self, profile_id: str, category: Category, item_id: str, **changes: Any
    ) -> Profile | None:
        # validate before touching state, even for unknown profiles
        patch = ItemOverride.create(category, changes)
        index = self._index_of(profile_id)
        if index is None:
            return None
        profile = self.profiles[index]
        overrides = dict(profile.overrides_for(category))
        existing = overrides.get(item_id)
        overrides[item_id] = existing.merged_with(patch.values) if existing else patch
        profile = profile.with_overrides(category, overrides)
        self._set_profile(index, profile)
        await self._commit("set_override", f"{profile_id}/{category.value}/{item_id}")
        return profile

    async def reset_override(
        self, profile_id: str, category: Category, item_id: str, *field_names: str
    ) -> Profile | None:
        """Drop a profile's override for one item.

        With ``field_names`` only those fields are dropped; an override left
        with no fields is removed entirely.
        """
        index = self._index_of(profile_id)
        if index is None:
            return None
        profile = self.profiles[index]
        overrides = dict(profile.overrides_for(category))
        if field_names and item_id in overrides:
            overrides[item_id] = overrides[item_id].without(*field_names)
        else:
            overrides.pop(item_id, None)
        profile = profile.with_overrides(category, overrides)
        self._set_profile(index, profile)
        await self._commit("reset_override", f"{profile_id}/{category.value}/{item_id}")
        return profile

    # * Master data

    async def update_data(self, **collections: Any) -> DataBundle:
        _check_fields(DataBundle, collections)
        updated = self.data
        for name, value in collections.items():
            if name == "personal_info":
                if not isinstance(value, PersonalInfo):
                    raise ValidationError("personal_info must be PersonalInfo", field=name)
                updated = replace(updated, personal_info=value)
                continue
            category = Category.parse(name)
            items = list(value)
            if not all(isinstance(i, category.item_class) for i in items):
                raise ValidationError(
                    f"{name} must contain {category.item_class.__name__} records", field=name
                )
            ids = [i.id for i in items]
            if len(ids) != len(set(ids)):
                raise ValidationError(f"Duplicate ids in {name}", field=name)
            updated = updated.with_items(category, items)
        self.data = updated
        await self._commit("update_data", ", ".join(collections))
        return updated

    async def add_item(self, category: Category) -> Item:
        taken = set(self.data.index(category))
        item = category.item_class.starter(self._fresh_id(taken))
        self.data = self.data.with_items(category, [item, *self.data.items(category)])
        await self._commit("add_item", f"{category.value}/{item.id}")
        return item

    async def update_item(self, category: Category, item_id: str, **changes: Any) -> Item | None:
        _check_fields(category.item_class, changes, fixed=("id",))
        items = self.data.items(category)
        position = next((i for i, item in enumerate(items) if item.id == item_id), None)
        if position is None:
            return None
        updated_item = items[position].patched(**changes)
        updated = list(items)
        updated[position] = updated_item
        self.data = self.data.with_items(category, updated)
        await self._commit("update_item", f"{category.value}/{item_id}")
        return updated_item

    # profiles keep their references to the deleted id (rendering skips it)
    async def delete_item(self, category: Category, item_id: str) -> bool:
        items = self.data.items(category)
        if not any(item.id == item_id for item in items):
            return False
        self.data = self.data.with_items(category, [i for i in items if i.id != item_id])
        await self._commit("delete_item", f"{category.value}/{item_id}")
        return True

    # * Whole-state operations

    async def reset_all(self) -> None:
        self.profiles = []
        self._seed()
        self.error = None
        self.last_saved = None
        await self._commit("reset_all")

    async def backup_data(self) -> str | None:
        result = await self.gateway.backup()
        if not result.success:
            self.error = result.error or BACKUP_ERROR
            return None
        return result.data

    async def restore_data(self, backup: str) -> bool:
        self.loading = True
        self.error = None
        try:
            result = await self.gateway.restore(backup)
        finally:
            self.loading = False
        if not result.success:
            self.error = result.error or RESTORE_ERROR
            return False
        vlog_mutation("restore_data")
        await self.load_from_storage()
        return True

    async def clear_all_data(self) -> bool:
        result = await self.gateway.clear()
        if not result.success:
            self.error = result.error
            return False
        vlog_mutation("clear_all_data")
        self.profiles = []
        self.data = DataBundle()
        self.last_saved = None
        return True

    async def switch_backend(
        self, destination: PersistenceGateway, migrate: bool = True
    ) -> bool:
        """Make ``destination`` the active gateway.

        With ``migrate`` the current backend's stored state is copied over
        first and the pointer only moves once that copy fully succeeded.
        Without it the store reloads from the destination.
        """
        if migrate:
            result = await migrate_between_backends(self.gateway, destination)
            if not result.success or result.data is None:
                self.error = result.error
                return False
            self.gateway = destination
            self.profiles = result.data.profiles
            self.data = result.data.data
            self.error = None
            vlog_mutation("switch_backend", destination.backend_name)
            return True

        self.gateway = destination
        vlog_mutation("switch_backend", destination.backend_name)
        await self.load_from_storage()
        return self.error is None

    # * Optimization

    async def apply_optimization(
        self,
        profile_id: str,
        suggestion: OptimizationSuggestion,
        job_text: str,
        job_url: str | None = None,
    ) -> Profile | None:
        profile = self.get_profile(profile_id)
        if profile is None:
            return None
        patch = suggestion.to_profile_patch(
            profile, self.data, job_text, now=self._clock(), job_url=job_url
        )
        return await self.update_profile(profile_id, **patch)

    def clear_error(self) -> None:
        self.error = None
