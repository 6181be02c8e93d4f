"""
Onboarding component - setup wizard steps behind the owner/admin guard.
"""

from .component import (
    run,
    run_advance,
    run_enter,
    run_finish,
    run_set_has_farm,
    run_set_mode,
)
from .models import (
    AdvanceInput,
    EnterOnboardingInput,
    FinishInput,
    OnboardingOutput,
    SetHasFarmInput,
    SetModeInput,
)

__all__ = [
    # Entry points
    "run",
    "run_advance",
    "run_enter",
    "run_finish",
    "run_set_has_farm",
    "run_set_mode",
    # Input models
    "AdvanceInput",
    "EnterOnboardingInput",
    "FinishInput",
    "SetHasFarmInput",
    "SetModeInput",
    # Output models
    "OnboardingOutput",
]
