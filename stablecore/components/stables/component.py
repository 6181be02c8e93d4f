"""
Stables component - creating stables and editing their details and settings.

Updates are applied to a working copy and committed as a whole; a rejected
update never changes the stored stable list.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from stablecore.domain.entities import EventVisibility, Membership, Stable, StableSettings
from stablecore.domain.errors import describe_validation_error
from stablecore.domain.policy import PolicyEngine
from stablecore.ports.ids import IdGeneratorPort
from stablecore.ports.store import StorePort

from .models import (
    SetOnboardingDismissedInput,
    StableOutput,
    UpdateStableInput,
    UpsertStableInput,
)

UPDATABLE_FIELDS = frozenset({"name", "location", "description", "farm_id", "ride_types", "settings"})
SETTINGS_FIELDS = frozenset({"event_visibility", "onboarding_dismissed"})

# Both snake_case and the client's camelCase keys map to field names.
_VISIBILITY_KEYS: dict[str, str] = {
    **{name: name for name in EventVisibility.model_fields},
    **{
        info.alias: name
        for name, info in EventVisibility.model_fields.items()
        if info.alias
    },
}


def resolve_stable_settings(stable: Stable | None) -> StableSettings:
    """Settings with every event-visibility toggle present (missing means visible)."""
    if stable is None:
        return StableSettings()
    return StableSettings.model_validate(stable.settings.model_dump())


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _merge_settings(current: StableSettings, incoming: Any) -> dict[str, Any] | str:
    """Merge a partial settings payload; returns an error message on bad keys."""
    if not isinstance(incoming, dict):
        return "Settings must be a mapping"

    unknown = sorted(set(incoming) - SETTINGS_FIELDS - {"eventVisibility", "onboardingDismissed"})
    if unknown:
        return f"Unknown setting(s): {', '.join(unknown)}"

    merged = current.model_dump()
    visibility = incoming.get("event_visibility", incoming.get("eventVisibility"))
    if visibility is not None:
        if not isinstance(visibility, dict):
            return "Event visibility must be a mapping"
        bad = sorted(key for key in visibility if key not in _VISIBILITY_KEYS)
        if bad:
            return f"Unknown event kind(s): {', '.join(bad)}"
        for key, value in visibility.items():
            merged["event_visibility"][_VISIBILITY_KEYS[key]] = value

    dismissed = incoming.get("onboarding_dismissed", incoming.get("onboardingDismissed"))
    if dismissed is not None:
        merged["onboarding_dismissed"] = dismissed

    return merged


def run_upsert(
    inp: UpsertStableInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
) -> StableOutput:
    name = inp.name.strip()
    if not name:
        return StableOutput(success=False, reason="Stable name is required", code="invalid")

    state = store.snapshot()
    actor = state.users.get(inp.actor_id) if inp.actor_id else None
    existing = state.find_stable(inp.stable_id)

    if existing:
        if not policy.resolve(actor, existing.id).can_manage_stable:
            return StableOutput(
                success=False, reason="Insufficient access to edit this stable", code="forbidden"
            )
        existing.name = name
        if inp.location is not None:
            existing.location = inp.location.strip()
        if inp.description is not None:
            existing.description = _optional_text(inp.description)
        if inp.farm_id is not None:
            existing.farm_id = _optional_text(inp.farm_id)
        store.commit(state)
        return StableOutput(stable=existing, success=True)

    if not actor:
        return StableOutput(success=False, reason="Sign in to create a stable", code="forbidden")

    stable = Stable(
        id=(inp.stable_id or "").strip() or ids.new_id("stable"),
        name=name,
        location=(inp.location or "").strip(),
        description=_optional_text(inp.description),
        farm_id=_optional_text(inp.farm_id),
        settings=StableSettings(
            event_visibility=EventVisibility.model_validate(
                policy.rules.event_visibility_defaults
            )
        ),
    )
    state.stables.append(stable)
    # The creator runs the new stable.
    actor.membership.append(Membership(stable_id=stable.id, role="admin", access="owner"))
    if not state.selection.current_stable_id:
        state.selection.current_stable_id = stable.id

    store.commit(state)
    return StableOutput(stable=stable, success=True)


def run_update(
    inp: UpdateStableInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
) -> StableOutput:
    state = store.snapshot()
    stable = state.find_stable(inp.stable_id)
    if not stable:
        return StableOutput(success=False, reason="No such stable", code="not_found")

    actor = state.users.get(inp.actor_id) if inp.actor_id else None
    if not policy.resolve(actor, stable.id).can_manage_stable:
        return StableOutput(
            success=False, reason="Insufficient access to update this stable", code="forbidden"
        )

    unknown = sorted(set(inp.updates) - UPDATABLE_FIELDS)
    if unknown:
        return StableOutput(
            success=False, reason=f"Unknown stable field(s): {', '.join(unknown)}", code="invalid"
        )

    data = stable.model_dump()
    for key, value in inp.updates.items():
        if key == "settings":
            merged = _merge_settings(stable.settings, value)
            if isinstance(merged, str):
                return StableOutput(success=False, reason=merged, code="invalid")
            data["settings"] = merged
        elif key == "name":
            if not isinstance(value, str) or not value.strip():
                return StableOutput(success=False, reason="Stable name is required", code="invalid")
            data["name"] = value.strip()
        elif key in ("description", "farm_id"):
            data[key] = _optional_text(value) if isinstance(value, str) else value
        elif key == "location":
            data[key] = value.strip() if isinstance(value, str) else value
        elif key == "ride_types" and isinstance(value, list):
            data[key] = [
                {**entry, "id": entry.get("id") or ids.new_id("ride-type")}
                if isinstance(entry, dict)
                else entry
                for entry in value
            ]
        else:
            data[key] = value

    try:
        updated = Stable.model_validate(data)
    except ValidationError as e:
        return StableOutput(success=False, reason=describe_validation_error(e), code="invalid")

    index = next(i for i, s in enumerate(state.stables) if s.id == stable.id)
    state.stables[index] = updated
    store.commit(state)
    return StableOutput(stable=updated, success=True)


def run_set_onboarding_dismissed(
    inp: SetOnboardingDismissedInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
) -> StableOutput:
    state = store.snapshot()
    stable_id = inp.stable_id or state.selection.current_stable_id
    stable = state.find_stable(stable_id)
    if not stable:
        return StableOutput(success=False, reason="No stable selected", code="not_found")

    actor = state.users.get(inp.actor_id) if inp.actor_id else None
    if not policy.resolve(actor, stable.id).can_manage_onboarding:
        return StableOutput(
            success=False, reason="Only stable owners and admins can manage setup", code="forbidden"
        )

    stable.settings.onboarding_dismissed = inp.dismissed
    store.commit(state)
    return StableOutput(stable=stable, success=True)


def run(
    inp: UpsertStableInput | UpdateStableInput | SetOnboardingDismissedInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort | None = None,
) -> StableOutput:
    if isinstance(inp, UpsertStableInput):
        assert ids
        return run_upsert(inp, store=store, policy=policy, ids=ids)
    elif isinstance(inp, UpdateStableInput):
        assert ids
        return run_update(inp, store=store, policy=policy, ids=ids)
    elif isinstance(inp, SetOnboardingDismissedInput):
        return run_set_onboarding_dismissed(inp, store=store, policy=policy)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
