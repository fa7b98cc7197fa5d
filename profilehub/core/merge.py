# profilehub/core/merge.py
# Merge resolver: combines master data, profile id lists & overrides into renderable items (pure)

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from .constants import DEFAULT_SECTION_ORDER
from .models import Category, DataBundle, Item, PersonalInfo, Profile


# * Effective, render-ready view of one profile
@dataclass
class ResolvedProfile:
    profile_id: str
    name: str
    personal_info: PersonalInfo
    # (category, items) in effective section order; empty sections omitted
    sections: list[tuple[Category, list[Item]]] = field(default_factory=list)


# * Resolve one (profile, category, id) triple; None when id is absent from master data
def resolve_item(
    category: Category,
    item_id: str,
    profile: Profile,
    data: DataBundle,
    _index: dict[str, Item] | None = None,
) -> Item | None:
    index = _index if _index is not None else data.index(category)
    base = index.get(item_id)
    if base is None:
        return None
    override = profile.overrides_for(category).get(item_id)
    if override is None or override.is_empty:
        # copy so callers never alias master lists
        return copy.deepcopy(base)
    return override.apply(base)


# * Resolve a profile's category list in profile order, dropping dangling ids
def resolve_list(category: Category, profile: Profile, data: DataBundle) -> list[Item]:
    index = data.index(category)
    resolved = (
        resolve_item(category, item_id, profile, data, _index=index)
        for item_id in profile.ids_for(category)
    )
    return [item for item in resolved if item is not None]


# profile personal info wins wholesale (no field-level merge)
def resolve_personal_info(profile: Profile, data: DataBundle) -> PersonalInfo:
    info = profile.personal_info if profile.personal_info is not None else data.personal_info
    return copy.deepcopy(info)


def has_override(profile: Profile, category: Category, item_id: str) -> bool:
    override = profile.overrides_for(category).get(item_id)
    return override is not None and not override.is_empty


# * Report ids a profile references that master data no longer holds (never repairs)
def dangling_ids(profile: Profile, data: DataBundle) -> dict[Category, list[str]]:
    report: dict[Category, list[str]] = {}
    for category in Category:
        index = data.index(category)
        missing = [i for i in profile.ids_for(category) if i not in index]
        if missing:
            report[category] = missing
    return report


def effective_section_order(profile: Profile) -> list[Category]:
    order = profile.section_order or list(DEFAULT_SECTION_ORDER)
    return [Category.parse(name) for name in order]


def resolve_profile(profile: Profile, data: DataBundle) -> ResolvedProfile:
    resolved = ResolvedProfile(
        profile_id=profile.id,
        name=profile.name,
        personal_info=resolve_personal_info(profile, data),
    )
    for category in effective_section_order(profile):
        items = resolve_list(category, profile, data)
        if items:
            resolved.sections.append((category, items))
    return resolved
