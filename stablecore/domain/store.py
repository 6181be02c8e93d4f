"""
Domain store - canonical in-memory state for one session.

Holds users, stables, memberships, paddocks, assignments and the current
selection. Reads hand out deep copies; the only write path is ``commit``,
which re-checks every invariant and swaps the whole state in one step, so a
rejected commit leaves the previous state untouched.
"""

from __future__ import annotations

import logging

from stablecore.domain.entities import (
    Assignment,
    AssignmentHistoryEntry,
    DayEvent,
    Membership,
    Paddock,
    Selection,
    Stable,
    StoreState,
    User,
)
from stablecore.domain.errors import InvariantViolation

logger = logging.getLogger(__name__)


def check_invariants(state: StoreState) -> list[str]:
    """Return a description of every invariant the state violates."""
    violations: list[str] = []

    stable_ids: set[str] = set()
    for stable in state.stables:
        if stable.id in stable_ids:
            violations.append(f"duplicate stable id {stable.id}")
        stable_ids.add(stable.id)

    for key, user in state.users.items():
        if key != user.id:
            violations.append(f"user keyed as {key} has id {user.id}")
        seen: set[str] = set()
        for entry in user.membership:
            if entry.stable_id not in stable_ids:
                violations.append(
                    f"membership of {user.id} references missing stable {entry.stable_id}"
                )
            if entry.stable_id in seen:
                violations.append(
                    f"user {user.id} has more than one membership in {entry.stable_id}"
                )
            seen.add(entry.stable_id)

    for key, paddock in state.paddocks.items():
        if key != paddock.id:
            violations.append(f"paddock keyed as {key} has id {paddock.id}")
        if paddock.stable_id not in stable_ids:
            violations.append(f"paddock {paddock.id} references missing stable {paddock.stable_id}")

    for key, assignment in state.assignments.items():
        if key != assignment.id:
            violations.append(f"assignment keyed as {key} has id {assignment.id}")
        if assignment.stable_id not in stable_ids:
            violations.append(
                f"assignment {assignment.id} references missing stable {assignment.stable_id}"
            )
        if assignment.assignee_id and assignment.assignee_id not in state.users:
            violations.append(
                f"assignment {assignment.id} is assigned to missing user {assignment.assignee_id}"
            )

    for key, event in state.day_events.items():
        if key != event.id:
            violations.append(f"day event keyed as {key} has id {event.id}")
        if event.stable_id not in stable_ids:
            violations.append(f"day event {event.id} references missing stable {event.stable_id}")

    selection = state.selection
    if selection.current_user_id and selection.current_user_id not in state.users:
        violations.append(f"current user {selection.current_user_id} does not exist")
    if selection.current_stable_id and selection.current_stable_id not in stable_ids:
        violations.append(f"current stable {selection.current_stable_id} does not exist")

    return violations


class DomainStore:
    def __init__(self, state: StoreState | None = None):
        state = state if state is not None else StoreState()
        violations = check_invariants(state)
        if violations:
            raise InvariantViolation(violations)
        self._state = state.model_copy(deep=True)
        self._revision = 0

    @classmethod
    def from_seed(
        cls,
        *,
        users: list[User] | None = None,
        stables: list[Stable] | None = None,
        paddocks: list[Paddock] | None = None,
        assignments: list[Assignment] | None = None,
        day_events: list[DayEvent] | None = None,
        current_user_id: str | None = None,
        current_stable_id: str | None = None,
    ) -> DomainStore:
        state = StoreState(
            users={u.id: u for u in users or []},
            stables=list(stables or []),
            paddocks={p.id: p for p in paddocks or []},
            assignments={a.id: a for a in assignments or []},
            day_events={e.id: e for e in day_events or []},
            selection=Selection(
                current_user_id=current_user_id, current_stable_id=current_stable_id
            ),
        )
        return cls(state)

    @property
    def revision(self) -> int:
        """Number of commits applied since construction."""
        return self._revision

    # --- Write path ---

    def snapshot(self) -> StoreState:
        """Deep copy of the whole state; safe to modify as a working copy."""
        return self._state.model_copy(deep=True)

    def commit(self, state: StoreState) -> None:
        violations = check_invariants(state)
        if violations:
            logger.warning("Rejected commit: %s", "; ".join(violations))
            raise InvariantViolation(violations)
        self._state = state.model_copy(deep=True)
        self._revision += 1

    # --- Reads ---

    @property
    def selection(self) -> Selection:
        return self._state.selection.model_copy()

    def get_user(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        user = self._state.users.get(user_id)
        return user.model_copy(deep=True) if user else None

    def list_users(self) -> list[User]:
        return [u.model_copy(deep=True) for u in self._state.users.values()]

    def find_user_by_email(self, email: str) -> User | None:
        needle = email.strip().lower()
        if not needle:
            return None
        for user in self._state.users.values():
            if user.email and user.email.strip().lower() == needle:
                return user.model_copy(deep=True)
        return None

    def get_stable(self, stable_id: str | None) -> Stable | None:
        stable = self._state.find_stable(stable_id)
        return stable.model_copy(deep=True) if stable else None

    def list_stables(self) -> list[Stable]:
        return [s.model_copy(deep=True) for s in self._state.stables]

    def current_user(self) -> User | None:
        return self.get_user(self._state.selection.current_user_id)

    def current_stable(self) -> Stable | None:
        return self.get_stable(self._state.selection.current_stable_id)

    def memberships_for(self, user_id: str) -> list[Membership]:
        user = self._state.users.get(user_id)
        if not user:
            return []
        return [m.model_copy() for m in user.membership]

    def members_of(self, stable_id: str) -> list[tuple[User, Membership]]:
        result: list[tuple[User, Membership]] = []
        for user in self._state.users.values():
            entry = user.membership_for(stable_id)
            if entry:
                result.append((user.model_copy(deep=True), entry.model_copy()))
        return result

    def get_paddock(self, paddock_id: str) -> Paddock | None:
        paddock = self._state.paddocks.get(paddock_id)
        return paddock.model_copy(deep=True) if paddock else None

    def paddocks_for(self, stable_id: str) -> list[Paddock]:
        return [
            p.model_copy(deep=True)
            for p in self._state.paddocks.values()
            if p.stable_id == stable_id
        ]

    def get_assignment(self, assignment_id: str) -> Assignment | None:
        assignment = self._state.assignments.get(assignment_id)
        return assignment.model_copy(deep=True) if assignment else None

    def assignments_for(
        self, stable_id: str, start: str | None = None, end: str | None = None
    ) -> list[Assignment]:
        """Assignments of a stable, optionally limited to an inclusive ISO date range."""
        # ISO dates compare correctly as strings.
        return [
            a.model_copy(deep=True)
            for a in self._state.assignments.values()
            if a.stable_id == stable_id
            and (start is None or a.date >= start)
            and (end is None or a.date <= end)
        ]

    def day_events_for(self, stable_id: str) -> list[DayEvent]:
        return [
            e.model_copy() for e in self._state.day_events.values() if e.stable_id == stable_id
        ]

    def history(self, limit: int | None = None) -> list[AssignmentHistoryEntry]:
        entries = self._state.assignment_history
        if limit is not None:
            entries = entries[:limit]
        return [e.model_copy() for e in entries]
