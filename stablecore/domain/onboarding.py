from typing import Literal

from pydantic import BaseModel, ConfigDict

OnboardingMode = Literal["quick", "guided"]
OnboardingStep = Literal[
    "not_started",
    "mode_selected",
    "farm_decision",
    "stables",
    "members",
    "paddocks",
    "events",
    "complete",
]

GUIDED_FLOW: tuple[OnboardingStep, ...] = (
    "mode_selected",
    "farm_decision",
    "stables",
    "members",
    "paddocks",
    "events",
    "complete",
)
QUICK_FLOW: tuple[OnboardingStep, ...] = ("mode_selected", "stables", "events", "complete")

# Steps that may jump straight to the end; the events step is optional.
_SKIPPABLE_TO_COMPLETE: frozenset[str] = frozenset({"stables", "members", "paddocks"})


class OnboardingState(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: OnboardingStep = "not_started"
    mode: OnboardingMode = "guided"
    has_farm: bool | None = None


def flow_for(mode: OnboardingMode) -> tuple[OnboardingStep, ...]:
    return QUICK_FLOW if mode == "quick" else GUIDED_FLOW


def can_transition(state: OnboardingState, new: OnboardingStep) -> bool:
    """
    Determine if moving to ``new`` is allowed from the current state.
    """
    current = state.step
    if current == new:
        return True

    if current == "complete":
        return False

    if current == "not_started":
        return new == "mode_selected"

    flow = flow_for(state.mode)
    if new not in flow:
        return False

    cur_idx = flow.index(current) if current in flow else -1
    new_idx = flow.index(new)

    # Going back to an earlier step is always allowed
    if new_idx < cur_idx:
        return True

    if new == "stables" and state.mode == "guided" and state.has_farm is None:
        # Guided setup needs the farm decision first
        return False

    if new_idx == cur_idx + 1:
        return True

    if new == "events" and current in _SKIPPABLE_TO_COMPLETE:
        return True

    if new == "complete" and current in _SKIPPABLE_TO_COMPLETE:
        return True

    return False


def transition(state: OnboardingState, new: OnboardingStep) -> OnboardingState:
    """
    Return a NEW state at step ``new``.
    Raises ValueError if the transition is invalid.
    """
    if not can_transition(state, new):
        raise ValueError(f"Invalid onboarding transition from {state.step} to {new}")
    return state.model_copy(update={"step": new})


def next_step(state: OnboardingState) -> OnboardingStep | None:
    """Default following step for the state's mode, or None when finished."""
    if state.step == "not_started":
        return "mode_selected"
    flow = flow_for(state.mode)
    if state.step not in flow:
        return None
    idx = flow.index(state.step)
    if idx + 1 >= len(flow):
        return None
    return flow[idx + 1]


def set_mode(state: OnboardingState, mode: OnboardingMode) -> OnboardingState:
    if state.step == "complete":
        raise ValueError("Onboarding is already complete")

    if state.step == "not_started":
        return state.model_copy(update={"mode": mode, "step": "mode_selected"})

    if mode == state.mode:
        return state

    # Switching modes restarts from the mode choice; guided asks about the farm again.
    has_farm = None if mode == "guided" else state.has_farm
    return state.model_copy(update={"mode": mode, "step": "mode_selected", "has_farm": has_farm})


def set_has_farm(state: OnboardingState, value: bool | None) -> OnboardingState:
    if state.step == "complete":
        raise ValueError("Onboarding is already complete")

    updated = state.model_copy(update={"has_farm": value})
    if (
        value is not None
        and state.mode == "guided"
        and state.step in ("mode_selected", "farm_decision")
    ):
        return updated.model_copy(update={"step": "stables"})
    return updated


def reset() -> OnboardingState:
    return OnboardingState()
