"""
Stables component - stable lifecycle, details and settings.
"""

from .component import (
    resolve_stable_settings,
    run,
    run_set_onboarding_dismissed,
    run_update,
    run_upsert,
)
from .models import (
    SetOnboardingDismissedInput,
    StableOutput,
    UpdateStableInput,
    UpsertStableInput,
)

__all__ = [
    # Entry points
    "run",
    "run_set_onboarding_dismissed",
    "run_update",
    "run_upsert",
    # Input models
    "SetOnboardingDismissedInput",
    "UpdateStableInput",
    "UpsertStableInput",
    # Output models
    "StableOutput",
    # Functions
    "resolve_stable_settings",
]
