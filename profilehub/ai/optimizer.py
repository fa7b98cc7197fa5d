# profilehub/ai/optimizer.py
# Optimization collaborator boundary: suggestion shape, profile patch mapping & the LLM-backed optimizer

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Protocol

from ..core.exceptions import AIError, ValidationError
from ..core.merge import resolve_profile
from ..core.models import AIOptimization, Category, DataBundle, ItemOverride, Profile
from .prompts import build_optimization_prompt

# categories a suggestion may override or reorder, w/ their response keys
_OVERRIDE_KEYS: dict[Category, tuple[str, str | None]] = {
    Category.EXPERIENCE: ("experienceOverrides", "experienceOptimizations"),
    Category.PROJECT: ("projectOverrides", "projectOptimizations"),
    Category.SKILL: ("skillOverrides", None),
    Category.EDUCATION: ("educationOverrides", None),
}
_ORDER_KEYS: dict[Category, str] = {
    Category.EXPERIENCE: "recommendedExperienceOrder",
    Category.PROJECT: "recommendedProjectOrder",
    Category.SKILL: "recommendedSkillOrder",
    Category.EDUCATION: "recommendedEducationOrder",
}


# * Stable fingerprint of the job text an optimization was produced for
def job_description_hash(job_text: str) -> str:
    return hashlib.sha256(job_text.strip().encode("utf-8")).hexdigest()[:20]


def _id_list(raw: Any, key: str) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        raise AIError(f"Optimization response field '{key}' must be a list of ids")
    return list(raw)


def _read_overrides(
    category: Category, raw: Mapping[str, Any]
) -> dict[str, ItemOverride]:
    map_key, list_key = _OVERRIDE_KEYS[category]
    entries: dict[str, Any] = {}
    if isinstance(raw.get(map_key), dict):
        entries.update(raw[map_key])
    # list form: [{"id": ..., "bullets": [...], "tags": [...]}, ...]
    if list_key and isinstance(raw.get(list_key), list):
        for entry in raw[list_key]:
            if not isinstance(entry, dict) or not isinstance(entry.get("id"), str):
                raise AIError(f"Optimization response field '{list_key}' has an entry without an id")
            entries[entry["id"]] = {k: v for k, v in entry.items() if k != "id"}

    out: dict[str, ItemOverride] = {}
    for item_id, patch in entries.items():
        try:
            override = ItemOverride.from_dict(category, patch)
        except ValidationError as e:
            raise AIError(f"Invalid {category.value} override for '{item_id}': {e}") from e
        if not override.is_empty:
            out[item_id] = override
    return out


# keep the recommended order for ids the profile already lists; ids the model left out stay at the end
def _reordered(current: list[str], recommended: list[str]) -> list[str]:
    ordered = [i for i in dict.fromkeys(recommended) if i in current]
    return ordered + [i for i in current if i not in ordered]


@dataclass
class OptimizationSuggestion:
    """A proposed profile change produced outside the store.

    Applied through ``ProfilesStore.apply_optimization``, which turns it into
    an ordinary ``update_profile`` change set.
    """

    summary: str | None = None
    overrides: dict[Category, dict[str, ItemOverride]] = field(default_factory=dict)
    item_order: dict[Category, list[str]] = field(default_factory=dict)
    key_insights: list[str] = field(default_factory=list)

    # * Read the collaborator's JSON reply; raises AIError on a malformed reply
    @classmethod
    def from_response(cls, raw: Any) -> "OptimizationSuggestion":
        if not isinstance(raw, dict):
            raise AIError(f"Optimization response must be an object, got {type(raw).__name__}")

        summary = None
        personal = raw.get("personalInfo")
        if isinstance(personal, dict) and personal.get("summary") is not None:
            if not isinstance(personal["summary"], str):
                raise AIError("Optimization response field 'personalInfo.summary' must be a string")
            summary = personal["summary"]

        overrides = {}
        for category in _OVERRIDE_KEYS:
            found = _read_overrides(category, raw)
            if found:
                overrides[category] = found

        item_order = {
            category: _id_list(raw[key], key)
            for category, key in _ORDER_KEYS.items()
            if raw.get(key) is not None
        }

        insights = raw.get("keyInsights") or []
        if not isinstance(insights, list) or not all(isinstance(v, str) for v in insights):
            raise AIError("Optimization response field 'keyInsights' must be a list of strings")

        return cls(
            summary=summary,
            overrides=overrides,
            item_order=item_order,
            key_insights=list(insights),
        )

    # * Build the update_profile change set this suggestion stands for
    def to_profile_patch(
        self,
        profile: Profile,
        data: DataBundle,
        job_text: str,
        now: datetime | None = None,
        job_url: str | None = None,
    ) -> dict[str, Any]:
        patch: dict[str, Any] = {}

        if self.summary is not None:
            base = profile.personal_info or data.personal_info
            patch["personal_info"] = base.patched(summary=self.summary)

        # suggested fields merge into any existing override, like a manual edit
        for category, suggested in self.overrides.items():
            merged = dict(profile.overrides_for(category))
            for item_id, override in suggested.items():
                existing = merged.get(item_id)
                merged[item_id] = (
                    existing.merged_with(override.values) if existing else override
                )
            patch[category.overrides_attr] = merged

        for category, recommended in self.item_order.items():
            patch[category.ids_attr] = _reordered(list(profile.ids_for(category)), recommended)

        stamp = now or datetime.now(timezone.utc)
        patch["ai_optimization"] = AIOptimization(
            timestamp=stamp.isoformat(),
            key_insights=list(self.key_insights),
            job_description_hash=job_description_hash(job_text),
            job_url=job_url,
        )
        return patch


# * True when a profile has no optimization for this job text, or it is older than max_age
def is_optimization_stale(
    profile: Profile,
    job_text: str,
    max_age: timedelta = timedelta(hours=24),
    now: datetime | None = None,
) -> bool:
    meta = profile.ai_optimization
    if meta is None:
        return True
    try:
        stamp = datetime.fromisoformat(meta.timestamp)
    except ValueError:
        return True
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    if (now or datetime.now(timezone.utc)) - stamp > max_age:
        return True
    return meta.job_description_hash != job_description_hash(job_text)


class Optimizer(Protocol):
    def optimize(
        self,
        profile: Profile,
        data: DataBundle,
        job_text: str,
        options: Mapping[str, Any] | None = None,
    ) -> OptimizationSuggestion: ...


class LLMOptimizer:
    """Optimizer backed by a chat model.

    Sends one prompt built from the profile's resolved content and the job
    text, then maps the JSON reply into an ``OptimizationSuggestion``.
    """

    def __init__(self, model: str):
        self.model = model

    def optimize(
        self,
        profile: Profile,
        data: DataBundle,
        job_text: str,
        options: Mapping[str, Any] | None = None,
    ) -> OptimizationSuggestion:
        from .clients.factory import run_generate

        if not job_text.strip():
            raise AIError("Job description is empty")

        options = options or {}
        prompt = build_optimization_prompt(
            resolve_profile(profile, data), job_text, options.get("instructions")
        )
        result = run_generate(prompt, self.model, label=f"optimize '{profile.name}'")
        if not result.success or result.data is None:
            raise AIError(f"Optimization failed for model '{self.model}': {result.error}")
        return OptimizationSuggestion.from_response(result.data)
