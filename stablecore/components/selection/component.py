"""
Selection component - switching the current user and stable.

Both pointers only ever move to entities that exist; an unknown id leaves
the selection as it was and reports failure.
"""

from __future__ import annotations

from stablecore.ports.store import StorePort

from .models import SelectionOutput, SetCurrentStableInput, SetCurrentUserInput


def run_set_current_user(inp: SetCurrentUserInput, *, store: StorePort) -> SelectionOutput:
    user_id = inp.user_id.strip()
    if not user_id:
        return SelectionOutput(success=False, reason="User id is required", code="invalid")

    state = store.snapshot()
    user = state.users.get(user_id)
    if not user:
        return SelectionOutput(success=False, reason="No such user", code="not_found")

    state.selection.current_user_id = user.id

    # Keep the stable pointer on a stable the new user belongs to.
    current_stable_id = state.selection.current_stable_id
    if user.membership and (
        not current_stable_id or user.membership_for(current_stable_id) is None
    ):
        state.selection.current_stable_id = user.membership[0].stable_id

    store.commit(state)
    return SelectionOutput(selection=state.selection, success=True)


def run_set_current_stable(inp: SetCurrentStableInput, *, store: StorePort) -> SelectionOutput:
    stable_id = inp.stable_id.strip()
    if not stable_id:
        return SelectionOutput(success=False, reason="Stable id is required", code="invalid")

    state = store.snapshot()
    stable = state.find_stable(stable_id)
    if not stable:
        return SelectionOutput(success=False, reason="No such stable", code="not_found")

    actor = state.users.get(inp.actor_id) if inp.actor_id else None
    # Users without any membership yet may browse every stable.
    if actor and actor.membership and actor.membership_for(stable.id) is None:
        return SelectionOutput(
            success=False, reason="You are not a member of this stable", code="forbidden"
        )

    state.selection.current_stable_id = stable.id
    store.commit(state)
    return SelectionOutput(selection=state.selection, success=True)


def run(
    inp: SetCurrentUserInput | SetCurrentStableInput,
    *,
    store: StorePort,
) -> SelectionOutput:
    if isinstance(inp, SetCurrentUserInput):
        return run_set_current_user(inp, store=store)
    elif isinstance(inp, SetCurrentStableInput):
        return run_set_current_stable(inp, store=store)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
