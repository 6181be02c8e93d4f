"""
Assignment component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from stablecore.domain.entities import Assignment, DayEvent
from stablecore.domain.errors import ErrorCode

# --- Input Models ---


@dataclass(frozen=True)
class CreateAssignmentInput:
    actor_id: str | None
    stable_id: str
    date: str
    slot: str
    time: str | None = None
    note: str | None = None
    assign_to_actor: bool = False
    label_override: str | None = None


@dataclass(frozen=True)
class UpdateAssignmentInput:
    """
    Reschedule or edit an assignment. ``None`` leaves a field unchanged.

    ``assign_to_actor=True`` takes the pass, ``False`` hands it back.
    """

    actor_id: str | None
    assignment_id: str
    date: str | None = None
    slot: str | None = None
    time: str | None = None
    note: str | None = None
    assign_to_actor: bool | None = None
    label_override: str | None = None


@dataclass(frozen=True)
class DeleteAssignmentInput:
    actor_id: str | None
    assignment_id: str


@dataclass(frozen=True)
class ClaimAssignmentInput:
    actor_id: str | None
    assignment_id: str


@dataclass(frozen=True)
class ClaimNextOpenInput:
    actor_id: str | None
    stable_id: str


@dataclass(frozen=True)
class DeclineAssignmentInput:
    actor_id: str | None
    assignment_id: str


@dataclass(frozen=True)
class CompleteAssignmentInput:
    actor_id: str | None
    assignment_id: str


@dataclass(frozen=True)
class LogNextAssignmentInput:
    """Complete the actor's next assigned pass in a stable."""

    actor_id: str | None
    stable_id: str


@dataclass(frozen=True)
class AddDayEventInput:
    actor_id: str | None
    stable_id: str
    date: str
    label: str
    tone: str = "info"


@dataclass(frozen=True)
class RemoveDayEventInput:
    actor_id: str | None
    event_id: str


@dataclass(frozen=True)
class ReconcileDefaultPassesInput:
    """Apply members' default passes to upcoming open assignments of a stable."""

    stable_id: str
    today: date


# --- Output Models ---


@dataclass(frozen=True)
class AssignmentOutput:
    assignment: Assignment | None = None
    success: bool = False
    reason: str | None = None
    code: ErrorCode | None = None


@dataclass(frozen=True)
class DayEventOutput:
    event: DayEvent | None = None
    success: bool = False
    reason: str | None = None
    code: ErrorCode | None = None


@dataclass(frozen=True)
class ReconcileOutput:
    assigned_ids: list[str] = field(default_factory=list)
    reopened_ids: list[str] = field(default_factory=list)
    success: bool = False
    reason: str | None = None
    code: ErrorCode | None = None
