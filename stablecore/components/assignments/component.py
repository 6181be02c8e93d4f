"""
Assignments component - scheduling passes within a stable.

Status changes (claim, decline, complete) are recorded in the assignment
history, newest first. Reconciling default passes is the only silent change.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from stablecore.domain.derived import (
    assignment_sort_key,
    default_pass_candidates,
    find_next_assigned,
    find_next_open,
)
from stablecore.domain.entities import (
    SLOTS,
    Assignment,
    AssignmentHistoryEntry,
    DayEvent,
    HistoryAction,
    StoreState,
    User,
    parse_iso_date,
)
from stablecore.domain.policy import PolicyEngine
from stablecore.ports.clock import ClockPort
from stablecore.ports.ids import IdGeneratorPort
from stablecore.ports.store import StorePort

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

DAY_EVENT_TONES = (
    "feeding", "cleaning", "rider_away", "farrier_away", "vet_away", "evening", "info"
)


# --- Helpers ---


def _valid_date(value: str) -> bool:
    try:
        parse_iso_date(value)
    except ValueError:
        return False
    return True


def _valid_time(value: str) -> bool:
    hours, sep, minutes = value.partition(":")
    if not sep or len(hours) != 2 or len(minutes) != 2:
        return False
    if not (hours.isdigit() and minutes.isdigit()):
        return False
    return int(hours) <= 23 and int(minutes) <= 59


def _push_history(
    state: StoreState,
    assignment: Assignment,
    action: HistoryAction,
    now: datetime,
    ids: IdGeneratorPort,
) -> None:
    state.assignment_history.insert(
        0,
        AssignmentHistoryEntry(
            id=ids.new_id("history"),
            assignment_id=assignment.id,
            label=f"{assignment.label} {assignment.time}".strip(),
            timestamp=now,
            action=action,
        ),
    )


def _actor(state: StoreState, actor_id: str | None) -> User | None:
    return state.users.get(actor_id) if actor_id else None


def _assign(assignment: Assignment, user_id: str) -> None:
    assignment.status = "assigned"
    assignment.assignee_id = user_id
    assignment.assigned_via = "manual"
    assignment.declined_by_user_ids = [
        uid for uid in assignment.declined_by_user_ids if uid != user_id
    ]
    assignment.completed_at = None


def _release(assignment: Assignment, user_id: str | None) -> None:
    declined = assignment.declined_by_user_ids
    if user_id and assignment.assignee_id == user_id and user_id not in declined:
        assignment.declined_by_user_ids = [*declined, user_id]
    assignment.status = "open"
    assignment.assignee_id = None
    assignment.assigned_via = None
    assignment.completed_at = None


# --- Entry points ---


def run_create(
    inp: CreateAssignmentInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> AssignmentOutput:
    if not inp.date:
        return AssignmentOutput(success=False, reason="A date is required", code="invalid")
    if not _valid_date(inp.date):
        return AssignmentOutput(success=False, reason=f"Invalid date: {inp.date}", code="invalid")
    if inp.slot not in SLOTS:
        return AssignmentOutput(success=False, reason=f"Unknown slot: {inp.slot}", code="invalid")
    if inp.time and not _valid_time(inp.time):
        return AssignmentOutput(success=False, reason=f"Invalid time: {inp.time}", code="invalid")

    state = store.snapshot()
    if not state.find_stable(inp.stable_id):
        return AssignmentOutput(success=False, reason="No such stable", code="not_found")

    actor = _actor(state, inp.actor_id)
    if not policy.resolve(actor, inp.stable_id).can_edit_schedule:
        return AssignmentOutput(
            success=False, reason="Insufficient access to edit the schedule", code="forbidden"
        )

    slot_rules = policy.rules.schedule.slots.get(inp.slot)  # type: ignore[call-overload]
    label = (inp.label_override or "").strip() or (
        slot_rules.title if slot_rules else policy.rules.schedule.default_label
    )
    note = (inp.note or "").strip() or None

    assignment = Assignment(
        id=ids.new_id("assign"),
        stable_id=inp.stable_id,
        date=inp.date,
        slot=inp.slot,  # type: ignore[arg-type]
        label=label,
        time=inp.time or (slot_rules.time if slot_rules else "00:00"),
        note=note,
    )
    if inp.assign_to_actor and actor:
        _assign(assignment, actor.id)

    state.assignments[assignment.id] = assignment
    _push_history(state, assignment, "created", clock.now_utc(), ids)
    store.commit(state)
    return AssignmentOutput(assignment=assignment, success=True)


def run_update(
    inp: UpdateAssignmentInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> AssignmentOutput:
    state = store.snapshot()
    existing = state.assignments.get(inp.assignment_id)
    if not existing:
        return AssignmentOutput(success=False, reason="No such assignment", code="not_found")

    actor = _actor(state, inp.actor_id)
    caps = policy.resolve(actor, existing.stable_id)
    edits_schedule = any(
        value is not None
        for value in (inp.date, inp.slot, inp.time, inp.note, inp.label_override)
    )
    if edits_schedule and not caps.can_edit_schedule:
        return AssignmentOutput(
            success=False, reason="Insufficient access to edit the schedule", code="forbidden"
        )
    if inp.assign_to_actor is not None and not (actor and caps.can_claim_assignments):
        return AssignmentOutput(
            success=False, reason="Insufficient access to take passes", code="forbidden"
        )
    if inp.assign_to_actor is True and existing.status == "completed":
        return AssignmentOutput(
            success=False, reason="This pass is already completed", code="conflict"
        )
    takes_over = (
        inp.assign_to_actor is True
        and actor is not None
        and existing.assignee_id not in (None, actor.id)
    )
    if takes_over and not caps.can_edit_schedule:
        return AssignmentOutput(
            success=False, reason="This pass is already staffed", code="conflict"
        )
    releases_other = (
        inp.assign_to_actor is False
        and existing.assignee_id is not None
        and (actor is None or existing.assignee_id != actor.id)
    )
    if releases_other and not caps.can_edit_schedule:
        return AssignmentOutput(
            success=False, reason="Only the assignee can hand back this pass", code="forbidden"
        )

    if inp.date is not None and not _valid_date(inp.date):
        return AssignmentOutput(success=False, reason=f"Invalid date: {inp.date}", code="invalid")
    if inp.slot is not None and inp.slot not in SLOTS:
        return AssignmentOutput(success=False, reason=f"Unknown slot: {inp.slot}", code="invalid")
    if inp.time and not _valid_time(inp.time):
        return AssignmentOutput(success=False, reason=f"Invalid time: {inp.time}", code="invalid")

    previous_status = existing.status
    slot = inp.slot or existing.slot
    slot_changed = slot != existing.slot
    slot_rules = policy.rules.schedule.slots.get(slot)  # type: ignore[call-overload]

    if inp.date:
        existing.date = inp.date
    if slot_changed:
        existing.slot = slot  # type: ignore[assignment]
    if inp.time or slot_changed:
        existing.time = inp.time or (slot_rules.time if slot_rules else existing.time)
    label_override = (inp.label_override or "").strip()
    if label_override or slot_changed:
        existing.label = label_override or (slot_rules.title if slot_rules else existing.label)
    if inp.note is not None:
        existing.note = inp.note.strip() or None

    if inp.assign_to_actor is True and actor:
        _assign(existing, actor.id)
    elif inp.assign_to_actor is False:
        _release(existing, actor.id if actor else None)

    if existing.status != previous_status:
        action: HistoryAction = {"completed": "completed", "open": "declined"}.get(
            existing.status, "assigned"
        )  # type: ignore[assignment]
        _push_history(state, existing, action, clock.now_utc(), ids)

    store.commit(state)
    return AssignmentOutput(assignment=existing, success=True)


def run_delete(
    inp: DeleteAssignmentInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
) -> AssignmentOutput:
    state = store.snapshot()
    existing = state.assignments.get(inp.assignment_id)
    if not existing:
        return AssignmentOutput(success=False, reason="No such assignment", code="not_found")

    if not policy.resolve(_actor(state, inp.actor_id), existing.stable_id).can_edit_schedule:
        return AssignmentOutput(
            success=False, reason="Insufficient access to edit the schedule", code="forbidden"
        )

    del state.assignments[existing.id]
    store.commit(state)
    return AssignmentOutput(assignment=existing, success=True)


def _claim(
    state: StoreState,
    assignment: Assignment,
    actor: User,
    *,
    store: StorePort,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> AssignmentOutput:
    _assign(assignment, actor.id)
    _push_history(state, assignment, "assigned", clock.now_utc(), ids)
    store.commit(state)
    return AssignmentOutput(assignment=assignment, success=True)


def run_claim(
    inp: ClaimAssignmentInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> AssignmentOutput:
    state = store.snapshot()
    assignment = state.assignments.get(inp.assignment_id)
    if not assignment:
        return AssignmentOutput(success=False, reason="No such assignment", code="not_found")

    actor = _actor(state, inp.actor_id)
    if not actor or not policy.resolve(actor, assignment.stable_id).can_claim_assignments:
        return AssignmentOutput(
            success=False, reason="Insufficient access to take passes", code="forbidden"
        )

    if assignment.status != "open":
        return AssignmentOutput(
            success=False, reason="This pass is already staffed", code="conflict"
        )

    return _claim(state, assignment, actor, store=store, ids=ids, clock=clock)


def run_claim_next_open(
    inp: ClaimNextOpenInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> AssignmentOutput:
    state = store.snapshot()
    if not state.find_stable(inp.stable_id):
        return AssignmentOutput(success=False, reason="No such stable", code="not_found")

    actor = _actor(state, inp.actor_id)
    if not actor or not policy.resolve(actor, inp.stable_id).can_claim_assignments:
        return AssignmentOutput(
            success=False, reason="Insufficient access to take passes", code="forbidden"
        )

    assignment = find_next_open(
        a for a in state.assignments.values() if a.stable_id == inp.stable_id
    )
    if not assignment:
        return AssignmentOutput(
            success=False, reason="All passes are already staffed", code="not_found"
        )

    return _claim(state, assignment, actor, store=store, ids=ids, clock=clock)


def run_decline(
    inp: DeclineAssignmentInput,
    *,
    store: StorePort,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> AssignmentOutput:
    state = store.snapshot()
    assignment = state.assignments.get(inp.assignment_id)
    if not assignment:
        return AssignmentOutput(success=False, reason="No such assignment", code="not_found")

    actor = _actor(state, inp.actor_id)
    if not actor or assignment.assignee_id != actor.id:
        return AssignmentOutput(
            success=False, reason="Only the assignee can decline this pass", code="forbidden"
        )
    if assignment.status == "completed":
        return AssignmentOutput(
            success=False, reason="A completed pass cannot be declined", code="conflict"
        )

    _release(assignment, actor.id)
    _push_history(state, assignment, "declined", clock.now_utc(), ids)
    store.commit(state)
    return AssignmentOutput(assignment=assignment, success=True)


def _complete(
    state: StoreState,
    assignment: Assignment,
    *,
    store: StorePort,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> AssignmentOutput:
    now = clock.now_utc()
    assignment.status = "completed"
    assignment.completed_at = now
    _push_history(state, assignment, "completed", now, ids)
    store.commit(state)
    return AssignmentOutput(assignment=assignment, success=True)


def run_complete(
    inp: CompleteAssignmentInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> AssignmentOutput:
    state = store.snapshot()
    assignment = state.assignments.get(inp.assignment_id)
    if not assignment:
        return AssignmentOutput(success=False, reason="No such assignment", code="not_found")

    actor = _actor(state, inp.actor_id)
    is_assignee = actor is not None and assignment.assignee_id == actor.id
    if not is_assignee and not policy.resolve(actor, assignment.stable_id).can_edit_schedule:
        return AssignmentOutput(
            success=False, reason="Only the assignee can complete this pass", code="forbidden"
        )
    if assignment.status == "completed":
        return AssignmentOutput(
            success=False, reason="This pass is already completed", code="conflict"
        )

    return _complete(state, assignment, store=store, ids=ids, clock=clock)


def run_log_next(
    inp: LogNextAssignmentInput,
    *,
    store: StorePort,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> AssignmentOutput:
    state = store.snapshot()
    actor = _actor(state, inp.actor_id)
    if not actor:
        return AssignmentOutput(success=False, reason="No signed-in user", code="forbidden")

    assignment = find_next_assigned(
        (a for a in state.assignments.values() if a.stable_id == inp.stable_id), actor.id
    )
    if not assignment:
        return AssignmentOutput(
            success=False, reason="No assigned passes to log right now", code="not_found"
        )

    return _complete(state, assignment, store=store, ids=ids, clock=clock)


def run_add_day_event(
    inp: AddDayEventInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
) -> DayEventOutput:
    label = inp.label.strip()
    if not label:
        return DayEventOutput(success=False, reason="Event text is required", code="invalid")
    if not _valid_date(inp.date):
        return DayEventOutput(success=False, reason=f"Invalid date: {inp.date}", code="invalid")
    if inp.tone not in DAY_EVENT_TONES:
        return DayEventOutput(success=False, reason=f"Unknown event kind: {inp.tone}", code="invalid")

    state = store.snapshot()
    if not state.find_stable(inp.stable_id):
        return DayEventOutput(success=False, reason="No such stable", code="not_found")
    if not policy.resolve(_actor(state, inp.actor_id), inp.stable_id).can_edit_schedule:
        return DayEventOutput(
            success=False, reason="Insufficient access to edit the schedule", code="forbidden"
        )

    event = DayEvent(
        id=ids.new_id("day"),
        stable_id=inp.stable_id,
        date=inp.date,
        label=label,
        tone=inp.tone,  # type: ignore[arg-type]
    )
    state.day_events[event.id] = event
    store.commit(state)
    return DayEventOutput(event=event, success=True)


def run_remove_day_event(
    inp: RemoveDayEventInput,
    *,
    store: StorePort,
    policy: PolicyEngine,
) -> DayEventOutput:
    state = store.snapshot()
    event = state.day_events.get(inp.event_id)
    if not event:
        return DayEventOutput(success=False, reason="No such event", code="not_found")
    if not policy.resolve(_actor(state, inp.actor_id), event.stable_id).can_edit_schedule:
        return DayEventOutput(
            success=False, reason="Insufficient access to edit the schedule", code="forbidden"
        )

    del state.day_events[event.id]
    store.commit(state)
    return DayEventOutput(event=event, success=True)


def run_reconcile_default_passes(
    inp: ReconcileDefaultPassesInput,
    *,
    store: StorePort,
) -> ReconcileOutput:
    """
    Hand open passes to the single member whose default pass matches, and
    reopen default-assigned passes whose owner no longer matches.

    Ambiguous matches (several candidates) stay open. Past and completed
    passes are left alone.
    """
    state = store.snapshot()
    if not state.find_stable(inp.stable_id):
        return ReconcileOutput(success=False, reason="No such stable", code="not_found")

    today_iso = inp.today.isoformat()
    members = [u for u in state.users.values() if u.membership_for(inp.stable_id)]
    assigned: list[str] = []
    reopened: list[str] = []

    upcoming = sorted(
        (
            a
            for a in state.assignments.values()
            if a.stable_id == inp.stable_id and a.status != "completed" and a.date >= today_iso
        ),
        key=assignment_sort_key,
    )
    for assignment in upcoming:
        candidates = default_pass_candidates(members, assignment.date, assignment.slot)

        if assignment.status == "open" and not assignment.assignee_id:
            if len(candidates) != 1:
                continue
            candidate = candidates[0]
            if candidate.id in assignment.declined_by_user_ids:
                continue
            assignment.status = "assigned"
            assignment.assignee_id = candidate.id
            assignment.assigned_via = "default"
            assigned.append(assignment.id)
            continue

        if assignment.status == "assigned" and assignment.assigned_via == "default":
            owner_id = assignment.assignee_id
            should_own = len(candidates) == 1 and candidates[0].id == owner_id
            declined = owner_id in assignment.declined_by_user_ids
            if not should_own or declined:
                assignment.status = "open"
                assignment.assignee_id = None
                assignment.assigned_via = None
                reopened.append(assignment.id)

    if assigned or reopened:
        store.commit(state)
    return ReconcileOutput(assigned_ids=assigned, reopened_ids=reopened, success=True)


def run(
    inp: Any,
    *,
    store: StorePort,
    policy: PolicyEngine,
    ids: IdGeneratorPort,
    clock: ClockPort,
) -> AssignmentOutput | DayEventOutput | ReconcileOutput:
    if isinstance(inp, CreateAssignmentInput):
        return run_create(inp, store=store, policy=policy, ids=ids, clock=clock)
    elif isinstance(inp, UpdateAssignmentInput):
        return run_update(inp, store=store, policy=policy, ids=ids, clock=clock)
    elif isinstance(inp, DeleteAssignmentInput):
        return run_delete(inp, store=store, policy=policy)
    elif isinstance(inp, ClaimAssignmentInput):
        return run_claim(inp, store=store, policy=policy, ids=ids, clock=clock)
    elif isinstance(inp, ClaimNextOpenInput):
        return run_claim_next_open(inp, store=store, policy=policy, ids=ids, clock=clock)
    elif isinstance(inp, DeclineAssignmentInput):
        return run_decline(inp, store=store, ids=ids, clock=clock)
    elif isinstance(inp, CompleteAssignmentInput):
        return run_complete(inp, store=store, policy=policy, ids=ids, clock=clock)
    elif isinstance(inp, LogNextAssignmentInput):
        return run_log_next(inp, store=store, ids=ids, clock=clock)
    elif isinstance(inp, AddDayEventInput):
        return run_add_day_event(inp, store=store, policy=policy, ids=ids)
    elif isinstance(inp, RemoveDayEventInput):
        return run_remove_day_event(inp, store=store, policy=policy)
    elif isinstance(inp, ReconcileDefaultPassesInput):
        return run_reconcile_default_passes(inp, store=store)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
