"""
Members component - memberships, roles and profile edits.

Every stable keeps at least one owner: demoting or removing the last one
is refused.
"""

from __future__ import annotations

from pydantic import ValidationError

from stablecore.domain.entities import (
    ACCESS_LEVELS,
    ROLES,
    SLOTS,
    DefaultPass,
    Membership,
    StoreState,
    User,
)
from stablecore.domain.errors import describe_validation_error
from stablecore.domain.policy import PolicyEngine
from stablecore.ports.ids import IdGeneratorPort
from stablecore.ports.store import StorePort

from .models import (
    AddMemberInput,
    MemberOutput,
    RemoveMemberInput,
    ToggleDefaultPassInput,
    UpdateMemberRoleInput,
    UpdateProfileInput,
)

PROFILE_FIELDS = frozenset({"name", "email", "phone", "location", "horses", "responsibilities"})
RIDER_ROLES = ("owner", "medryttare", "other")


def _owner_count(state: StoreState, stable_id: str) -> int:
    count = 0
    for user in state.users.values():
        entry = user.membership_for(stable_id)
        if entry and entry.access == "owner":
            count += 1
    return count


def _check_role_fields(role: str | None, access: str | None, rider_role: str | None) -> str | None:
    if role is not None and role not in ROLES:
        return f"Unknown role: {role}"
    if access is not None and access not in ACCESS_LEVELS:
        return f"Unknown access level: {access}"
    if rider_role is not None and rider_role not in RIDER_ROLES:
        return f"Unknown rider role: {rider_role}"
    return None


def run_add_member(
    inp: AddMemberInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
) -> MemberOutput:
    name = inp.name.strip()
    if not name:
        return MemberOutput(success=False, reason="Member name is required", code="invalid")

    stable_ids = list(dict.fromkeys(s.strip() for s in inp.stable_ids if s.strip()))
    if not stable_ids:
        return MemberOutput(success=False, reason="Choose at least one stable", code="invalid")

    problem = _check_role_fields(inp.role, inp.access, inp.rider_role)
    if problem:
        return MemberOutput(success=False, reason=problem, code="invalid")

    state = store.snapshot()
    actor = state.users.get(inp.actor_id) if inp.actor_id else None

    for stable_id in stable_ids:
        if not state.find_stable(stable_id):
            return MemberOutput(success=False, reason="No such stable", code="not_found")
        if not policy.resolve(actor, stable_id).can_manage_members:
            return MemberOutput(
                success=False, reason="Insufficient access to add members", code="forbidden"
            )

    email = (inp.email or "").strip() or None
    target: User | None = None
    if email:
        for user in state.users.values():
            if user.email and user.email.strip().lower() == email.lower():
                target = user
                break

    if target is None:
        target = User(
            id=ids.new_id("user"),
            name=name,
            email=email,
            phone=(inp.phone or "").strip(),
        )
        state.users[target.id] = target

    for stable_id in stable_ids:
        if target.membership_for(stable_id):
            stable = state.find_stable(stable_id)
            stable_name = stable.name if stable else stable_id
            return MemberOutput(
                success=False,
                reason=f"{target.name} is already a member of {stable_name}",
                code="conflict",
            )
        target.membership.append(
            Membership(
                stable_id=stable_id,
                role=inp.role,  # type: ignore[arg-type]
                access=inp.access,  # type: ignore[arg-type]
                custom_role=(inp.custom_role or "").strip() or None,
                rider_role=inp.rider_role,  # type: ignore[arg-type]
            )
        )

    store.commit(state)
    return MemberOutput(
        user=target, membership=target.membership_for(stable_ids[0]), success=True
    )


def run_update_member_role(
    inp: UpdateMemberRoleInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
) -> MemberOutput:
    problem = _check_role_fields(inp.role, inp.access, inp.rider_role)
    if problem:
        return MemberOutput(success=False, reason=problem, code="invalid")

    state = store.snapshot()
    if not state.find_stable(inp.stable_id):
        return MemberOutput(success=False, reason="No such stable", code="not_found")

    target = state.users.get(inp.user_id)
    entry = target.membership_for(inp.stable_id) if target else None
    if target is None or entry is None:
        return MemberOutput(
            success=False, reason="User is not a member of this stable", code="not_found"
        )

    actor = state.users.get(inp.actor_id) if inp.actor_id else None
    if not policy.resolve(actor, inp.stable_id).can_manage_members:
        return MemberOutput(
            success=False, reason="Insufficient access to change roles", code="forbidden"
        )

    if (
        entry.access == "owner"
        and inp.access is not None
        and inp.access != "owner"
        and _owner_count(state, inp.stable_id) <= 1
    ):
        return MemberOutput(
            success=False, reason="A stable must keep at least one owner", code="conflict"
        )

    if inp.role is not None:
        entry.role = inp.role  # type: ignore[assignment]
    if inp.access is not None:
        entry.access = inp.access  # type: ignore[assignment]
    if inp.custom_role is not None:
        entry.custom_role = inp.custom_role.strip() or None
    if inp.rider_role is not None:
        entry.rider_role = inp.rider_role  # type: ignore[assignment]

    store.commit(state)
    return MemberOutput(user=target, membership=entry, success=True)


def run_remove_member(
    inp: RemoveMemberInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
) -> MemberOutput:
    state = store.snapshot()
    if not state.find_stable(inp.stable_id):
        return MemberOutput(success=False, reason="No such stable", code="not_found")

    target = state.users.get(inp.user_id)
    entry = target.membership_for(inp.stable_id) if target else None
    if target is None or entry is None:
        return MemberOutput(
            success=False, reason="User is not a member of this stable", code="not_found"
        )

    actor = state.users.get(inp.actor_id) if inp.actor_id else None
    leaving = actor is not None and actor.id == target.id
    if not leaving and not policy.resolve(actor, inp.stable_id).can_manage_members:
        return MemberOutput(
            success=False, reason="Insufficient access to remove members", code="forbidden"
        )

    if entry.access == "owner" and _owner_count(state, inp.stable_id) <= 1:
        return MemberOutput(
            success=False, reason="A stable must keep at least one owner", code="conflict"
        )

    target.membership = [m for m in target.membership if m.stable_id != inp.stable_id]
    selection = state.selection
    if (
        selection.current_user_id == target.id
        and selection.current_stable_id == inp.stable_id
        and target.membership
    ):
        selection.current_stable_id = target.membership[0].stable_id
    store.commit(state)
    return MemberOutput(user=target, membership=entry, success=True)


def run_update_profile(
    inp: UpdateProfileInput,
    *,
    store: StorePort,
) -> MemberOutput:
    state = store.snapshot()
    user = state.users.get(inp.actor_id) if inp.actor_id else None
    if not user:
        return MemberOutput(success=False, reason="No signed-in user", code="forbidden")

    unknown = sorted(set(inp.updates) - PROFILE_FIELDS)
    if unknown:
        return MemberOutput(
            success=False, reason=f"Unknown profile field(s): {', '.join(unknown)}", code="invalid"
        )

    data = user.model_dump()
    for key, value in inp.updates.items():
        if isinstance(value, str):
            value = value.strip()
        if key == "name" and not value:
            return MemberOutput(success=False, reason="Name is required", code="invalid")
        if key == "email":
            value = value or None
        data[key] = value

    try:
        updated = User.model_validate(data)
    except ValidationError as e:
        return MemberOutput(success=False, reason=describe_validation_error(e), code="invalid")

    state.users[updated.id] = updated
    store.commit(state)
    return MemberOutput(user=updated, success=True)


def run_toggle_default_pass(
    inp: ToggleDefaultPassInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
) -> MemberOutput:
    if inp.slot not in SLOTS:
        return MemberOutput(success=False, reason=f"Unknown slot: {inp.slot}", code="invalid")
    if not 0 <= inp.weekday <= 6:
        return MemberOutput(success=False, reason="Weekday must be 0-6", code="invalid")

    state = store.snapshot()
    actor = state.users.get(inp.actor_id) if inp.actor_id else None
    target = state.users.get(inp.user_id or (inp.actor_id or ""))
    if not target:
        return MemberOutput(success=False, reason="User not found", code="not_found")

    if actor is None or actor.id != target.id:
        # Managing someone else's passes needs member rights in a shared stable.
        shared = [m.stable_id for m in target.membership]
        if not any(policy.resolve(actor, stable_id).can_manage_members for stable_id in shared):
            return MemberOutput(
                success=False,
                reason="Insufficient access to edit this member's passes",
                code="forbidden",
            )

    entry = DefaultPass(weekday=inp.weekday, slot=inp.slot)  # type: ignore[arg-type]
    if entry in target.default_passes:
        target.default_passes = [p for p in target.default_passes if p != entry]
    else:
        target.default_passes = [*target.default_passes, entry]

    store.commit(state)
    return MemberOutput(user=target, success=True)


def run(
    inp: AddMemberInput
    | UpdateMemberRoleInput
    | RemoveMemberInput
    | UpdateProfileInput
    | ToggleDefaultPassInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort | None = None,
) -> MemberOutput:
    if isinstance(inp, AddMemberInput):
        assert ids
        return run_add_member(inp, store=store, policy=policy, ids=ids)
    elif isinstance(inp, UpdateMemberRoleInput):
        return run_update_member_role(inp, store=store, policy=policy)
    elif isinstance(inp, RemoveMemberInput):
        return run_remove_member(inp, store=store, policy=policy)
    elif isinstance(inp, UpdateProfileInput):
        return run_update_profile(inp, store=store)
    elif isinstance(inp, ToggleDefaultPassInput):
        return run_toggle_default_pass(inp, store=store, policy=policy)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
