# profilehub/core/models.py
# Data model: master data items, DataBundle, per-profile overrides & Profile w/ camelCase JSON codecs

from __future__ import annotations

import copy
import secrets
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Mapping, Union

from .constants import DEFAULT_SECTION_ORDER, Template
from .exceptions import ValidationError


# * Short URL-safe random id for profiles & items
def new_id(size: int = 10) -> str:
    return secrets.token_urlsafe(size)[:size]


# snake_case attribute -> camelCase JSON key
def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _check_value(owner: type, name: str, value: Any) -> Any:
    # validate a field value against its annotation (str, list[str], optional variants)
    annotation = {f.name: str(f.type) for f in fields(owner)}.get(name, "")
    label = f"{owner.__name__}.{name}"
    if value is None:
        if "None" in annotation:
            return None
        raise ValidationError(f"{label} must not be null", field=name)
    if annotation.startswith("list"):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValidationError(f"{label} must be a list of strings", field=name)
        return list(value)
    if annotation.startswith("str") and not isinstance(value, str):
        raise ValidationError(
            f"{label} must be a string, got {type(value).__name__}", field=name
        )
    return value


def _require_object(raw: Any, label: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValidationError(f"{label} must be an object, got {type(raw).__name__}")
    return raw


def _string_list(raw: Any, label: str) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        raise ValidationError(f"{label} must be a list of strings", field=label)
    return list(raw)


# * Shared camelCase codec for flat dataclass records
class _Record:
    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is None:
                continue
            out[_camel(f.name)] = list(value) if isinstance(value, list) else value
        return out

    # new record w/ the given fields changed; names & types are validated
    def patched(self, **changes: Any):
        cls = type(self)
        unknown = sorted(set(changes) - set(cls.field_names()))
        if unknown:
            raise ValidationError(
                f"Unknown {cls.__name__} field(s): {', '.join(unknown)}", field=unknown[0]
            )
        checked = {k: _check_value(cls, k, v) for k, v in changes.items()}
        return replace(self, **copy.deepcopy(checked))

    @classmethod
    def from_dict(cls, raw: Any):
        data = _require_object(raw, cls.__name__)
        kwargs: dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            key = _camel(f.name)
            if key in data and data[key] is not None:
                kwargs[f.name] = _check_value(cls, f.name, data[key])
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ValidationError(f"Invalid {cls.__name__} record: {e}") from e


@dataclass
class PersonalInfo(_Record):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str | None = None
    github: str | None = None
    website: str | None = None
    summary: str | None = None


@dataclass
class Experience(_Record):
    id: str
    title: str = ""
    company: str = ""
    date: str = ""
    bullets: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    subtitle: str | None = None

    @classmethod
    def starter(cls, item_id: str) -> "Experience":
        return cls(item_id, "New Role", "Company", "2025", ["Achievement one"], [])


@dataclass
class Project(_Record):
    id: str
    title: str = ""
    link: str | None = None
    bullets: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    subtitle: str | None = None

    @classmethod
    def starter(cls, item_id: str) -> "Project":
        return cls(item_id, "New Project", "", ["Did something cool"], [])


@dataclass
class Skill(_Record):
    id: str
    name: str = ""
    details: str = ""
    subtitle: str | None = None

    @classmethod
    def starter(cls, item_id: str) -> "Skill":
        return cls(item_id, "New Category", "List, of, skills")


@dataclass
class Education(_Record):
    id: str
    title: str = ""
    details: str = ""
    subtitle: str | None = None

    @classmethod
    def starter(cls, item_id: str) -> "Education":
        return cls(item_id, "New Program", "Institution & year")


Item = Union[Experience, Project, Skill, Education]


# * Master data categories & the names each one uses across profiles, bundles & the database
class Category(str, Enum):
    EXPERIENCE = "experience"
    PROJECT = "project"
    SKILL = "skill"
    EDUCATION = "education"

    @property
    def ids_attr(self) -> str:
        return f"{self.value}_ids"

    @property
    def overrides_attr(self) -> str:
        return f"{self.value}_overrides"

    # DataBundle attribute & section name ("experiences", ..., "education")
    @property
    def collection(self) -> str:
        return _COLLECTIONS[self]

    @property
    def item_class(self) -> type:
        return _ITEM_CLASSES[self]

    @property
    def db_type(self) -> str:
        return self.value.upper()

    # accept "experience", "experiences", "experienceIds", "EXPERIENCE"
    @classmethod
    def parse(cls, raw: str) -> "Category":
        text = raw.strip()
        for category in cls:
            if text.lower() in (
                category.value,
                category.collection,
                category.ids_attr,
                _camel(category.ids_attr).lower(),
            ):
                return category
        valid = ", ".join(c.value for c in cls)
        raise ValidationError(f"Unknown category '{raw}' (expected one of: {valid})")


_COLLECTIONS: dict[Category, str] = {
    Category.EXPERIENCE: "experiences",
    Category.PROJECT: "projects",
    Category.SKILL: "skills",
    Category.EDUCATION: "education",
}

_ITEM_CLASSES: dict[Category, type] = {
    Category.EXPERIENCE: Experience,
    Category.PROJECT: Project,
    Category.SKILL: Skill,
    Category.EDUCATION: Education,
}


# * Explicit per-item override: records exactly which fields a profile changes
@dataclass(frozen=True)
class ItemOverride:
    category: Category
    values: Mapping[str, Any]

    @classmethod
    def create(cls, category: Category, patch: Mapping[str, Any]) -> "ItemOverride":
        item_class = category.item_class
        allowed = set(item_class.field_names()) - {"id"}
        unknown = sorted(set(patch) - allowed)
        if unknown:
            raise ValidationError(
                f"Unknown {category.value} field(s) for override: {', '.join(unknown)}",
                field=unknown[0],
            )
        checked = {name: _check_value(item_class, name, v) for name, v in patch.items()}
        return cls(category, copy.deepcopy(checked))

    @property
    def is_empty(self) -> bool:
        return not self.values

    # later patch wins field by field; arrays are replaced, not merged
    def merged_with(self, patch: Mapping[str, Any]) -> "ItemOverride":
        return ItemOverride.create(self.category, {**self.values, **patch})

    def without(self, *names: str) -> "ItemOverride":
        return ItemOverride(
            self.category, {k: v for k, v in self.values.items() if k not in names}
        )

    def apply(self, base: Item) -> Item:
        return replace(base, **copy.deepcopy(dict(self.values)))

    def to_dict(self) -> dict[str, Any]:
        return {_camel(k): copy.deepcopy(v) for k, v in self.values.items()}

    @classmethod
    def from_dict(cls, category: Category, raw: Any) -> "ItemOverride":
        data = _require_object(raw, f"{category.value} override")
        by_camel = {_camel(name): name for name in category.item_class.field_names()}
        return cls.create(category, {by_camel.get(k, k): v for k, v in data.items()})


# * Metadata recorded when an optimization suggestion is applied
@dataclass
class AIOptimization(_Record):
    timestamp: str = ""
    key_insights: list[str] = field(default_factory=list)
    job_description_hash: str = ""
    job_url: str | None = None


# * Master data snapshot persisted alongside the profile list
@dataclass
class DataBundle:
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    experiences: list[Experience] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    skills: list[Skill] = field(default_factory=list)
    education: list[Education] = field(default_factory=list)

    def items(self, category: Category) -> list[Item]:
        return getattr(self, category.collection)

    def index(self, category: Category) -> dict[str, Item]:
        return {item.id: item for item in self.items(category)}

    def with_items(self, category: Category, items: list[Item]) -> "DataBundle":
        return replace(self, **{category.collection: list(items)})

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"personalInfo": self.personal_info.to_dict()}
        for category in Category:
            out[category.collection] = [i.to_dict() for i in self.items(category)]
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> "DataBundle":
        data = _require_object(raw, "DataBundle")
        if not isinstance(data.get("personalInfo"), dict):
            raise ValidationError("DataBundle.personalInfo must be an object")
        kwargs: dict[str, Any] = {
            "personal_info": PersonalInfo.from_dict(data["personalInfo"])
        }
        for category in Category:
            records = data.get(category.collection)
            if not isinstance(records, list):
                raise ValidationError(
                    f"DataBundle.{category.collection} must be an array",
                    field=category.collection,
                )
            items = [category.item_class.from_dict(r) for r in records]
            _ensure_unique([i.id for i in items], category.collection)
            kwargs[category.collection] = items
        return cls(**kwargs)


def _ensure_unique(ids: list[str], label: str) -> None:
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            raise ValidationError(f"Duplicate id '{item_id}' in {label}", field=label)
        seen.add(item_id)


# * Named, orderable, overridable view over master data
@dataclass
class Profile:
    id: str
    name: str
    personal_info: PersonalInfo | None = None
    experience_ids: list[str] = field(default_factory=list)
    project_ids: list[str] = field(default_factory=list)
    skill_ids: list[str] = field(default_factory=list)
    education_ids: list[str] = field(default_factory=list)
    experience_overrides: dict[str, ItemOverride] = field(default_factory=dict)
    project_overrides: dict[str, ItemOverride] = field(default_factory=dict)
    skill_overrides: dict[str, ItemOverride] = field(default_factory=dict)
    education_overrides: dict[str, ItemOverride] = field(default_factory=dict)
    template: Template = Template.CLASSIC
    section_order: list[str] | None = None
    formatting: dict[str, Any] | None = None
    ai_optimization: AIOptimization | None = None

    def ids_for(self, category: Category) -> list[str]:
        return getattr(self, category.ids_attr)

    def overrides_for(self, category: Category) -> dict[str, ItemOverride]:
        return getattr(self, category.overrides_attr)

    def with_ids(self, category: Category, ids: list[str]) -> "Profile":
        return replace(self, **{category.ids_attr: list(ids)})

    # empty entries are dropped so they never count as overrides
    def with_overrides(
        self, category: Category, overrides: Mapping[str, ItemOverride]
    ) -> "Profile":
        kept = {k: v for k, v in overrides.items() if not v.is_empty}
        return replace(self, **{category.overrides_attr: kept})

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.personal_info is not None:
            out["personalInfo"] = self.personal_info.to_dict()
        for category in Category:
            out[_camel(category.ids_attr)] = list(self.ids_for(category))
        for category in Category:
            overrides = {
                k: v.to_dict()
                for k, v in self.overrides_for(category).items()
                if not v.is_empty
            }
            if overrides:
                out[_camel(category.overrides_attr)] = overrides
        out["template"] = self.template.value
        if self.section_order is not None:
            out["sectionOrder"] = list(self.section_order)
        if self.formatting is not None:
            out["formatting"] = copy.deepcopy(self.formatting)
        if self.ai_optimization is not None:
            out["aiOptimization"] = self.ai_optimization.to_dict()
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> "Profile":
        data = _require_object(raw, "Profile")
        profile_id = data.get("id")
        if not isinstance(profile_id, str) or not profile_id:
            raise ValidationError("Profile.id must be a non-empty string", field="id")
        name = data.get("name", "")
        if not isinstance(name, str):
            raise ValidationError("Profile.name must be a string", field="name")

        kwargs: dict[str, Any] = {"id": profile_id, "name": name}
        if data.get("personalInfo") is not None:
            kwargs["personal_info"] = PersonalInfo.from_dict(data["personalInfo"])
        for category in Category:
            key = _camel(category.ids_attr)
            kwargs[category.ids_attr] = _string_list(data.get(key, []), key)
            key = _camel(category.overrides_attr)
            raw_overrides = _require_object(data.get(key) or {}, key)
            overrides = {
                item_id: ItemOverride.from_dict(category, patch)
                for item_id, patch in raw_overrides.items()
            }
            kwargs[category.overrides_attr] = {
                k: v for k, v in overrides.items() if not v.is_empty
            }
        try:
            kwargs["template"] = Template(data.get("template") or Template.CLASSIC.value)
        except ValueError as e:
            raise ValidationError(f"Unknown template: {data.get('template')!r}") from e
        if data.get("sectionOrder") is not None:
            kwargs["section_order"] = validate_section_order(data["sectionOrder"])
        if data.get("formatting") is not None:
            kwargs["formatting"] = copy.deepcopy(
                _require_object(data["formatting"], "Profile.formatting")
            )
        if data.get("aiOptimization") is not None:
            kwargs["ai_optimization"] = AIOptimization.from_dict(data["aiOptimization"])
        return cls(**kwargs)


def validate_section_order(raw: Any) -> list[str]:
    order = _string_list(raw, "sectionOrder")
    unknown = [name for name in order if name not in DEFAULT_SECTION_ORDER]
    if unknown:
        raise ValidationError(
            f"Unknown section(s) in sectionOrder: {', '.join(unknown)}",
            field="sectionOrder",
        )
    return order


def profiles_from_list(raw: Any) -> list[Profile]:
    if not isinstance(raw, list):
        raise ValidationError("profiles must be an array", field="profiles")
    profiles = [Profile.from_dict(p) for p in raw]
    _ensure_unique([p.id for p in profiles], "profiles")
    return profiles
