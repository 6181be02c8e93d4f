import pytest

from stablecore.components.onboarding import (
    AdvanceInput,
    EnterOnboardingInput,
    FinishInput,
    SetHasFarmInput,
    SetModeInput,
    run_advance,
    run_enter,
    run_finish,
    run_set_has_farm,
    run_set_mode,
)
from stablecore.domain.onboarding import (
    OnboardingState,
    can_transition,
    next_step,
    reset,
    set_has_farm,
    set_mode,
    transition,
)

# --- State machine ---


def test_initial_state():
    state = reset()
    assert state.step == "not_started"
    assert state.mode == "guided"
    assert state.has_farm is None


def test_choosing_mode_starts_the_flow():
    state = set_mode(reset(), "quick")
    assert state.step == "mode_selected"
    assert state.mode == "quick"


def test_guided_flow_needs_farm_decision_before_stables():
    state = set_mode(reset(), "guided")

    assert can_transition(state, "farm_decision") is True
    assert can_transition(state, "stables") is False

    decided = set_has_farm(state, True)
    assert decided.step == "stables"
    assert decided.has_farm is True


def test_undecided_farm_does_not_advance():
    state = set_has_farm(set_mode(reset(), "guided"), None)
    assert state.step == "mode_selected"


def test_quick_flow_skips_farm_decision():
    state = set_mode(reset(), "quick")

    assert next_step(state) == "stables"
    assert can_transition(state, "farm_decision") is False
    state = transition(state, "stables")
    assert can_transition(state, "complete") is True


def test_events_step_is_optional():
    state = OnboardingState(step="members", mode="guided", has_farm=False)

    assert can_transition(state, "events") is True
    assert can_transition(state, "complete") is True


def test_going_back_is_allowed():
    state = OnboardingState(step="paddocks", mode="guided", has_farm=True)
    assert transition(state, "stables").step == "stables"


def test_cannot_jump_ahead():
    state = OnboardingState(step="mode_selected", mode="guided")
    with pytest.raises(ValueError, match="Invalid onboarding transition"):
        transition(state, "paddocks")


def test_complete_is_final():
    state = OnboardingState(step="complete", mode="quick")

    assert can_transition(state, "stables") is False
    assert next_step(state) is None
    with pytest.raises(ValueError):
        set_mode(state, "guided")


def test_switching_to_guided_asks_about_farm_again():
    state = OnboardingState(step="stables", mode="quick", has_farm=True)

    switched = set_mode(state, "guided")
    assert switched.step == "mode_selected"
    assert switched.has_farm is None


def test_state_is_immutable():
    state = reset()
    with pytest.raises(Exception):
        state.step = "complete"


# --- Component ---


def test_enter_allowed_for_owner(store, policy):
    out = run_enter(EnterOnboardingInput(actor_id="user-anna"), store=store, policy=policy)

    assert out.success
    assert out.state == reset()


def test_enter_denied_for_rider(store, policy):
    out = run_enter(EnterOnboardingInput(actor_id="user-cia"), store=store, policy=policy)

    assert out.success is False
    assert out.code == "forbidden"
    assert out.state is None


def test_enter_denied_without_user(store, policy):
    out = run_enter(EnterOnboardingInput(actor_id=None), store=store, policy=policy)
    assert out.code == "forbidden"


def test_set_mode_validates_mode():
    out = run_set_mode(SetModeInput(reset(), "turbo"))
    assert out.reason == "Unknown mode: turbo"
    assert out.state == reset()


def test_advance_follows_flow():
    state = run_set_mode(SetModeInput(reset(), "quick")).state

    out = run_advance(AdvanceInput(state))
    assert out.state.step == "stables"


def test_advance_refuses_invalid_jump():
    state = run_set_mode(SetModeInput(reset(), "guided")).state
    out = run_advance(AdvanceInput(state, "events"))

    assert out.success is False
    assert out.code == "conflict"
    assert out.state == state


def test_set_has_farm_after_completion_fails():
    out = run_set_has_farm(SetHasFarmInput(OnboardingState(step="complete"), True))
    assert out.code == "conflict"


def test_finish_dismisses_onboarding(store, policy):
    state = OnboardingState(step="events", mode="quick")

    out = run_finish(
        FinishInput(actor_id="user-anna", state=state, stable_id="stable-sol"),
        store=store,
        policy=policy,
    )

    assert out.success
    assert out.state.step == "complete"
    assert store.get_stable("stable-sol").settings.onboarding_dismissed is True


def test_finish_without_rights_keeps_state(store, policy):
    state = OnboardingState(step="events", mode="quick")

    out = run_finish(
        FinishInput(actor_id="user-cia", state=state, stable_id="stable-sol"),
        store=store,
        policy=policy,
    )

    assert out.success is False
    assert out.state == state
    assert store.get_stable("stable-sol").settings.onboarding_dismissed is False
