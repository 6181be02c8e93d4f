"""
Derived read models over assignments.

Pure helpers shared by the assignment component and the session facade.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime

from stablecore.domain.entities import Assignment, User


def assignment_sort_key(assignment: Assignment) -> tuple[str, str]:
    # ISO date and zero-padded HH:MM sort chronologically as strings.
    return (assignment.date, assignment.time)


def find_next_assigned(assignments: Iterable[Assignment], user_id: str) -> Assignment | None:
    candidates = [
        a for a in assignments if a.assignee_id == user_id and a.status == "assigned"
    ]
    return min(candidates, key=assignment_sort_key, default=None)


def find_next_open(assignments: Iterable[Assignment]) -> Assignment | None:
    candidates = [a for a in assignments if a.status == "open"]
    return min(candidates, key=assignment_sort_key, default=None)


def upcoming_for_user(
    assignments: Iterable[Assignment], user_id: str, limit: int = 5
) -> list[Assignment]:
    """The user's own passes plus open ones, soonest first."""
    relevant = [a for a in assignments if a.assignee_id == user_id or a.status == "open"]
    return sorted(relevant, key=assignment_sort_key)[:limit]


@dataclass(frozen=True)
class AssignmentSummary:
    total: int
    completed: int
    open: int
    open_slots: list[str] = field(default_factory=list)
    last_completed_at: datetime | None = None


def summarize(assignments: Iterable[Assignment]) -> AssignmentSummary:
    items = list(assignments)
    completed_times = [a.completed_at for a in items if a.completed_at]
    return AssignmentSummary(
        total=len(items),
        completed=sum(1 for a in items if a.status == "completed"),
        open=sum(1 for a in items if a.status == "open"),
        open_slots=[a.slot for a in items if a.status == "open"],
        last_completed_at=max(completed_times, default=None),
    )


def weekday_index(iso_date: str) -> int:
    """Monday-first weekday index (0 = Monday)."""
    return date.fromisoformat(iso_date).weekday()


def default_pass_candidates(users: Iterable[User], iso_date: str, slot: str) -> list[User]:
    weekday = weekday_index(iso_date)
    return [
        u
        for u in sorted(users, key=lambda u: u.id)
        if any(p.weekday == weekday and p.slot == slot for p in u.default_passes)
    ]
