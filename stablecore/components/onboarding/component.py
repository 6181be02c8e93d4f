"""
Onboarding component - the setup wizard and its entry guard.

Entry is re-checked on every call to ``run_enter``; a user who lost their
owner or admin membership is turned away even mid-flow.
"""

from __future__ import annotations

import logging
from typing import Any

from stablecore.components.stables.component import run_set_onboarding_dismissed
from stablecore.components.stables.models import SetOnboardingDismissedInput
from stablecore.domain import onboarding as machine
from stablecore.domain.policy import PolicyEngine
from stablecore.ports.store import StorePort

from .models import (
    AdvanceInput,
    EnterOnboardingInput,
    FinishInput,
    OnboardingOutput,
    SetHasFarmInput,
    SetModeInput,
)

logger = logging.getLogger(__name__)

MODES = ("quick", "guided")


def run_enter(
    inp: EnterOnboardingInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
) -> OnboardingOutput:
    state = store.snapshot()
    actor = state.users.get(inp.actor_id) if inp.actor_id else None
    if not policy.can_manage_onboarding_any(actor):
        logger.info("Onboarding entry denied for %s", inp.actor_id)
        return OnboardingOutput(
            success=False,
            reason="Setup requires owner or admin access in a stable",
            code="forbidden",
        )
    return OnboardingOutput(state=machine.reset(), success=True)


def run_set_mode(inp: SetModeInput) -> OnboardingOutput:
    if inp.mode not in MODES:
        return OnboardingOutput(
            state=inp.state, success=False, reason=f"Unknown mode: {inp.mode}", code="invalid"
        )
    try:
        updated = machine.set_mode(inp.state, inp.mode)  # type: ignore[arg-type]
    except ValueError as e:
        return OnboardingOutput(state=inp.state, success=False, reason=str(e), code="conflict")
    return OnboardingOutput(state=updated, success=True)


def run_set_has_farm(inp: SetHasFarmInput) -> OnboardingOutput:
    try:
        updated = machine.set_has_farm(inp.state, inp.has_farm)
    except ValueError as e:
        return OnboardingOutput(state=inp.state, success=False, reason=str(e), code="conflict")
    return OnboardingOutput(state=updated, success=True)


def run_advance(inp: AdvanceInput) -> OnboardingOutput:
    target = inp.step or machine.next_step(inp.state)
    if target is None:
        return OnboardingOutput(
            state=inp.state, success=False, reason="Onboarding is already complete", code="conflict"
        )
    try:
        updated = machine.transition(inp.state, target)  # type: ignore[arg-type]
    except ValueError as e:
        return OnboardingOutput(state=inp.state, success=False, reason=str(e), code="conflict")
    return OnboardingOutput(state=updated, success=True)


def run_finish(
    inp: FinishInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
) -> OnboardingOutput:
    """Complete the wizard and hide the setup prompt on the stable."""
    try:
        completed = machine.transition(inp.state, "complete")
    except ValueError as e:
        return OnboardingOutput(state=inp.state, success=False, reason=str(e), code="conflict")

    if inp.stable_id:
        dismissed = run_set_onboarding_dismissed(
            SetOnboardingDismissedInput(
                actor_id=inp.actor_id, dismissed=True, stable_id=inp.stable_id
            ),
            store=store,
            policy=policy,
        )
        if not dismissed.success:
            return OnboardingOutput(
                state=inp.state, success=False, reason=dismissed.reason, code=dismissed.code
            )

    return OnboardingOutput(state=completed, success=True)


def run(
    inp: Any,
    *,
    store: StorePort | None = None,
    policy: PolicyEngine | None = None,
) -> OnboardingOutput:
    if isinstance(inp, EnterOnboardingInput):
        assert store and policy
        return run_enter(inp, store=store, policy=policy)
    elif isinstance(inp, SetModeInput):
        return run_set_mode(inp)
    elif isinstance(inp, SetHasFarmInput):
        return run_set_has_farm(inp)
    elif isinstance(inp, AdvanceInput):
        return run_advance(inp)
    elif isinstance(inp, FinishInput):
        assert store and policy
        return run_finish(inp, store=store, policy=policy)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
