"""
Assignments component - dated passes, their staffing and day events.
"""

from .component import (
    run,
    run_add_day_event,
    run_claim,
    run_claim_next_open,
    run_complete,
    run_create,
    run_decline,
    run_delete,
    run_log_next,
    run_reconcile_default_passes,
    run_remove_day_event,
    run_update,
)
from .models import (
    AddDayEventInput,
    AssignmentOutput,
    ClaimAssignmentInput,
    ClaimNextOpenInput,
    CompleteAssignmentInput,
    CreateAssignmentInput,
    DayEventOutput,
    DeclineAssignmentInput,
    DeleteAssignmentInput,
    LogNextAssignmentInput,
    ReconcileDefaultPassesInput,
    ReconcileOutput,
    RemoveDayEventInput,
    UpdateAssignmentInput,
)

__all__ = [
    # Entry points
    "run",
    "run_add_day_event",
    "run_claim",
    "run_claim_next_open",
    "run_complete",
    "run_create",
    "run_decline",
    "run_delete",
    "run_log_next",
    "run_reconcile_default_passes",
    "run_remove_day_event",
    "run_update",
    # Input models
    "AddDayEventInput",
    "ClaimAssignmentInput",
    "ClaimNextOpenInput",
    "CompleteAssignmentInput",
    "CreateAssignmentInput",
    "DeclineAssignmentInput",
    "DeleteAssignmentInput",
    "LogNextAssignmentInput",
    "ReconcileDefaultPassesInput",
    "RemoveDayEventInput",
    "UpdateAssignmentInput",
    # Output models
    "AssignmentOutput",
    "DayEventOutput",
    "ReconcileOutput",
]
