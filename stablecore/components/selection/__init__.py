"""
Selection component - current user and current stable pointers.
"""

from .component import run, run_set_current_stable, run_set_current_user
from .models import SelectionOutput, SetCurrentStableInput, SetCurrentUserInput

__all__ = [
    # Entry points
    "run",
    "run_set_current_stable",
    "run_set_current_user",
    # Models
    "SelectionOutput",
    "SetCurrentStableInput",
    "SetCurrentUserInput",
]
