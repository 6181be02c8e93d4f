"""
Onboarding component input/output models.

The wizard state itself is never stored; callers hold the current
``OnboardingState`` and pass it back in with each step.
"""

from __future__ import annotations

from dataclasses import dataclass

from stablecore.domain.errors import ErrorCode
from stablecore.domain.onboarding import OnboardingState

# --- Input Models ---


@dataclass(frozen=True)
class EnterOnboardingInput:
    actor_id: str | None


@dataclass(frozen=True)
class SetModeInput:
    state: OnboardingState
    mode: str


@dataclass(frozen=True)
class SetHasFarmInput:
    state: OnboardingState
    has_farm: bool | None


@dataclass(frozen=True)
class AdvanceInput:
    """Move to ``step``, or to the next step of the flow when omitted."""

    state: OnboardingState
    step: str | None = None


@dataclass(frozen=True)
class FinishInput:
    actor_id: str | None
    state: OnboardingState
    stable_id: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class OnboardingOutput:
    state: OnboardingState | None = None
    success: bool = False
    reason: str | None = None
    code: ErrorCode | None = None
