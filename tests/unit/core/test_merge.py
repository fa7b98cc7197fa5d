# tests/unit/core/test_merge.py
# Unit tests for the merge resolver: overrides, dangling ids, personal info & section order

from profilehub.core.constants import DEFAULT_SECTION_ORDER
from profilehub.core.merge import (
    dangling_ids,
    effective_section_order,
    has_override,
    resolve_item,
    resolve_list,
    resolve_personal_info,
    resolve_profile,
)
from profilehub.core.models import (
    Category,
    DataBundle,
    Experience,
    ItemOverride,
    PersonalInfo,
    Profile,
)


def _master() -> DataBundle:
    return DataBundle(
        personal_info=PersonalInfo(full_name="Master Name", summary="Master summary"),
        experiences=[Experience(id="e1", title="Engineer", bullets=["Did X"])],
    )


def _profile_with_override() -> Profile:
    profile = Profile(id="p", name="P", experience_ids=["e1"])
    return profile.with_overrides(
        Category.EXPERIENCE,
        {"e1": ItemOverride.create(Category.EXPERIENCE, {"bullets": ["Did Y"]})},
    )


# * Verify override fields win & the rest comes from master
def test_override_replaces_only_its_fields():
    resolved = resolve_list(Category.EXPERIENCE, _profile_with_override(), _master())
    assert len(resolved) == 1
    assert resolved[0].id == "e1"
    assert resolved[0].title == "Engineer"
    assert resolved[0].bullets == ["Did Y"]


# * Verify deleting a master item drops it from the view but keeps the profile reference
def test_deleted_master_item_is_skipped_not_repaired():
    profile = _profile_with_override()
    data = _master().with_items(Category.EXPERIENCE, [])

    assert resolve_list(Category.EXPERIENCE, profile, data) == []
    assert profile.experience_ids == ["e1"]
    assert dangling_ids(profile, data) == {Category.EXPERIENCE: ["e1"]}


def test_resolve_item_returns_none_for_missing_id():
    assert resolve_item(Category.EXPERIENCE, "nope", _profile_with_override(), _master()) is None


# * Verify resolved items never alias master lists
def test_resolved_item_is_a_copy():
    data = _master()
    profile = Profile(id="p", name="P", experience_ids=["e1"])
    item = resolve_item(Category.EXPERIENCE, "e1", profile, data)
    item.bullets.append("mutated")
    assert data.experiences[0].bullets == ["Did X"]


def test_resolve_list_keeps_profile_order_and_duplicates():
    data = _master().with_items(
        Category.EXPERIENCE,
        [Experience(id="e1", title="One"), Experience(id="e2", title="Two")],
    )
    profile = Profile(id="p", name="P", experience_ids=["e2", "e1", "e2"])
    titles = [i.title for i in resolve_list(Category.EXPERIENCE, profile, data)]
    assert titles == ["Two", "One", "Two"]


# * Verify an override equal to the base value still counts as present
def test_override_equal_to_base_is_still_an_override():
    profile = Profile(id="p", name="P", experience_ids=["e1"]).with_overrides(
        Category.EXPERIENCE,
        {"e1": ItemOverride.create(Category.EXPERIENCE, {"title": "Engineer"})},
    )
    assert has_override(profile, Category.EXPERIENCE, "e1")
    assert not has_override(profile, Category.EXPERIENCE, "e2")


def test_profile_personal_info_wins_wholesale():
    data = _master()
    own = PersonalInfo(full_name="Profile Name")
    profile = Profile(id="p", name="P", personal_info=own)

    assert resolve_personal_info(profile, data) == own
    # no field-level fallback to master
    assert resolve_personal_info(profile, data).summary is None
    assert resolve_personal_info(Profile(id="q", name="Q"), data).full_name == "Master Name"


# * Verify edits to resolved personal info never reach stored profiles or master data
def test_resolved_personal_info_is_a_copy():
    data = _master()
    profile = Profile(id="p", name="P", personal_info=PersonalInfo(full_name="Profile Name"))

    resolve_personal_info(profile, data).full_name = "Changed"
    resolve_personal_info(Profile(id="q", name="Q"), data).full_name = "Changed"

    assert profile.personal_info.full_name == "Profile Name"
    assert data.personal_info.full_name == "Master Name"


def test_effective_section_order_defaults():
    profile = Profile(id="p", name="P")
    assert [c.collection for c in effective_section_order(profile)] == list(DEFAULT_SECTION_ORDER)

    profile.section_order = ["projects", "experiences"]
    assert effective_section_order(profile) == [Category.PROJECT, Category.EXPERIENCE]


# * Verify the resolved view follows section order & omits empty sections
def test_resolve_profile_sections(sample_data):
    profile = Profile(
        id="p",
        name="P",
        experience_ids=["experience-2"],
        skill_ids=["cloud", "missing"],
        section_order=["experiences", "skills", "projects"],
    )
    resolved = resolve_profile(profile, sample_data)

    assert [c for c, _ in resolved.sections] == [Category.EXPERIENCE, Category.SKILL]
    assert [s.id for s in resolved.sections[1][1]] == ["cloud"]
    assert resolved.personal_info == sample_data.personal_info
