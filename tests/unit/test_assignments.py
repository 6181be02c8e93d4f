"""
Assignments component unit tests.

Covers creation and editing, the claim/decline/complete cycle with its
history entries, day events and default-pass reconciliation.
"""

from datetime import date

import pytest

from stablecore.components import assignments as comp
from stablecore.domain.entities import DefaultPass, Membership, User


def _create(deps, actor_id="user-bo", **kwargs):
    fields = {"stable_id": "stable-sol", "date": "2025-03-12", "slot": "morning", **kwargs}
    return comp.run_create(comp.CreateAssignmentInput(actor_id=actor_id, **fields), **deps)


def _update(deps, assignment_id, actor_id="user-bo", **changes):
    return comp.run_update(
        comp.UpdateAssignmentInput(actor_id=actor_id, assignment_id=assignment_id, **changes),
        **deps,
    )


def _give_default_pass(store, user_id, weekday, slot):
    state = store.snapshot()
    user = state.users[user_id]
    user.default_passes = [*user.default_passes, DefaultPass(weekday=weekday, slot=slot)]
    store.commit(state)


def _add_viewer(store, user_id):
    state = store.snapshot()
    state.users[user_id] = User(
        id=user_id,
        name=user_id,
        membership=[Membership(stable_id="stable-sol", role="rider", access="view")],
    )
    store.commit(state)


# --- Create ---


class TestCreate:
    def test_slot_defaults(self, store, deps, clock):
        out = _create(deps)

        assert out.success
        assert out.assignment.id == "assign-1"
        assert out.assignment.label == "Morgon"
        assert out.assignment.time == "07:00"
        assert out.assignment.status == "open"

        entry = store.history()[0]
        assert entry.action == "created"
        assert entry.label == "Morgon 07:00"
        assert entry.timestamp == clock.now_utc()

    def test_overrides_and_assign_to_self(self, deps):
        out = _create(
            deps,
            slot="evening",
            time="19:30",
            note="  Fodra extra  ",
            label_override="Kvällsfodring",
            assign_to_actor=True,
        )

        assignment = out.assignment
        assert assignment.label == "Kvällsfodring"
        assert assignment.time == "19:30"
        assert assignment.note == "Fodra extra"
        assert assignment.status == "assigned"
        assert assignment.assignee_id == "user-bo"
        assert assignment.assigned_via == "manual"

    @pytest.mark.parametrize(
        "fields, reason",
        [
            ({"date": "2025-13-01"}, "Invalid date: 2025-13-01"),
            ({"date": ""}, "A date is required"),
            ({"slot": "night"}, "Unknown slot: night"),
            ({"time": "7:00"}, "Invalid time: 7:00"),
            ({"time": "24:00"}, "Invalid time: 24:00"),
        ],
    )
    def test_invalid_fields(self, store, deps, fields, reason):
        out = _create(deps, **fields)

        assert out.success is False
        assert out.code == "invalid"
        assert out.reason == reason
        assert store.revision == 0

    def test_viewer_cannot_create(self, deps):
        out = _create(deps, actor_id="user-cia")
        assert out.code == "forbidden"

    def test_unknown_stable(self, deps):
        out = _create(deps, stable_id="nope")
        assert out.code == "not_found"


# --- Update ---


class TestUpdate:
    def test_slot_change_resets_time_and_label(self, store, deps):
        out = _update(deps, "assign-a", slot="evening")

        assert out.success
        assert out.assignment.slot == "evening"
        assert out.assignment.time == "18:00"
        assert out.assignment.label == "Kväll"

    def test_explicit_time_wins_over_slot_default(self, deps):
        out = _update(deps, "assign-a", slot="lunch", time="12:30")
        assert out.assignment.time == "12:30"
        assert out.assignment.label == "Lunch"

    def test_blank_note_clears_it(self, store, deps):
        _update(deps, "assign-a", note="Mocka boxar")
        assert store.get_assignment("assign-a").note == "Mocka boxar"

        _update(deps, "assign-a", note="   ")
        assert store.get_assignment("assign-a").note is None

    def test_viewer_cannot_reschedule(self, deps):
        out = _update(deps, "assign-a", actor_id="user-cia", date="2025-03-14")
        assert out.code == "forbidden"

    def test_viewer_may_take_pass(self, store, deps):
        out = _update(deps, "assign-a", actor_id="user-cia", assign_to_actor=True)

        assert out.success
        assert out.assignment.assignee_id == "user-cia"
        assert store.history()[0].action == "assigned"

    def test_handing_back_own_pass_records_decline(self, store, deps):
        out = _update(deps, "assign-b", actor_id="user-cia", assign_to_actor=False)

        assert out.assignment.status == "open"
        assert out.assignment.assignee_id is None
        assert out.assignment.declined_by_user_ids == ["user-cia"]
        assert store.history()[0].action == "declined"

    def test_viewer_cannot_release_someone_elses_pass(self, deps):
        _update(deps, "assign-a", actor_id="user-bo", assign_to_actor=True)

        out = _update(deps, "assign-a", actor_id="user-cia", assign_to_actor=False)
        assert out.code == "forbidden"
        assert out.reason == "Only the assignee can hand back this pass"

    def test_editor_may_release_any_pass(self, deps):
        out = _update(deps, "assign-b", actor_id="user-bo", assign_to_actor=False)

        assert out.assignment.status == "open"
        assert out.assignment.declined_by_user_ids == []

    def test_missing_assignment(self, deps):
        assert _update(deps, "nope", note="x").code == "not_found"

    def test_viewer_cannot_take_over_staffed_pass(self, store, deps):
        _add_viewer(store, "user-fia")

        out = _update(deps, "assign-b", actor_id="user-fia", assign_to_actor=True)

        assert out.success is False
        assert out.code == "conflict"
        assert store.get_assignment("assign-b").assignee_id == "user-cia"

    def test_editor_may_reassign_to_self(self, deps):
        out = _update(deps, "assign-b", assign_to_actor=True)

        assert out.success
        assert out.assignment.assignee_id == "user-bo"

    def test_completed_pass_cannot_be_taken(self, store, deps):
        comp.run_complete(
            comp.CompleteAssignmentInput(actor_id="user-cia", assignment_id="assign-b"), **deps
        )

        out = _update(deps, "assign-b", assign_to_actor=True)

        assert out.code == "conflict"
        assert store.get_assignment("assign-b").status == "completed"


def test_delete(store, deps, policy):
    denied = comp.run_delete(
        comp.DeleteAssignmentInput(actor_id="user-cia", assignment_id="assign-a"),
        store=store,
        policy=policy,
    )
    assert denied.code == "forbidden"

    out = comp.run_delete(
        comp.DeleteAssignmentInput(actor_id="user-bo", assignment_id="assign-a"),
        store=store,
        policy=policy,
    )
    assert out.success
    assert store.get_assignment("assign-a") is None


# --- Claim / decline / complete ---


class TestStaffing:
    def test_claim_open_pass(self, store, deps):
        out = comp.run_claim(
            comp.ClaimAssignmentInput(actor_id="user-cia", assignment_id="assign-a"), **deps
        )

        assert out.success
        assert out.assignment.assignee_id == "user-cia"
        assert out.assignment.assigned_via == "manual"
        assert store.history()[0].label == "Morgon 07:00"

    def test_claim_staffed_pass_is_conflict(self, deps):
        out = comp.run_claim(
            comp.ClaimAssignmentInput(actor_id="user-bo", assignment_id="assign-b"), **deps
        )
        assert out.code == "conflict"

    def test_non_member_cannot_claim(self, deps):
        out = comp.run_claim(
            comp.ClaimAssignmentInput(actor_id="user-dan", assignment_id="assign-a"), **deps
        )
        assert out.code == "forbidden"

    def test_claim_next_open_goes_in_date_order(self, deps):
        first = comp.run_claim_next_open(
            comp.ClaimNextOpenInput(actor_id="user-bo", stable_id="stable-sol"), **deps
        )
        second = comp.run_claim_next_open(
            comp.ClaimNextOpenInput(actor_id="user-bo", stable_id="stable-sol"), **deps
        )
        third = comp.run_claim_next_open(
            comp.ClaimNextOpenInput(actor_id="user-bo", stable_id="stable-sol"), **deps
        )

        assert first.assignment.id == "assign-a"
        assert second.assignment.id == "assign-c"
        assert third.success is False
        assert third.reason == "All passes are already staffed"

    def test_decline_reopens_and_remembers(self, store, deps):
        out = comp.run_decline(
            comp.DeclineAssignmentInput(actor_id="user-cia", assignment_id="assign-b"),
            store=store,
            ids=deps["ids"],
            clock=deps["clock"],
        )

        assert out.assignment.status == "open"
        assert out.assignment.declined_by_user_ids == ["user-cia"]
        assert store.history()[0].action == "declined"

    def test_only_assignee_can_decline(self, store, deps):
        out = comp.run_decline(
            comp.DeclineAssignmentInput(actor_id="user-anna", assignment_id="assign-b"),
            store=store,
            ids=deps["ids"],
            clock=deps["clock"],
        )
        assert out.reason == "Only the assignee can decline this pass"

    def test_claim_clears_earlier_decline(self, store, deps):
        comp.run_decline(
            comp.DeclineAssignmentInput(actor_id="user-cia", assignment_id="assign-b"),
            store=store,
            ids=deps["ids"],
            clock=deps["clock"],
        )
        out = comp.run_claim(
            comp.ClaimAssignmentInput(actor_id="user-cia", assignment_id="assign-b"), **deps
        )
        assert out.assignment.declined_by_user_ids == []

    def test_complete_by_assignee(self, store, deps, clock):
        out = comp.run_complete(
            comp.CompleteAssignmentInput(actor_id="user-cia", assignment_id="assign-b"), **deps
        )

        assert out.assignment.status == "completed"
        assert out.assignment.completed_at == clock.now_utc()
        assert store.history()[0].action == "completed"

    def test_complete_twice_is_conflict(self, deps):
        inp = comp.CompleteAssignmentInput(actor_id="user-cia", assignment_id="assign-b")
        comp.run_complete(inp, **deps)
        assert comp.run_complete(inp, **deps).code == "conflict"

    def test_editor_may_complete_any_pass(self, deps):
        out = comp.run_complete(
            comp.CompleteAssignmentInput(actor_id="user-bo", assignment_id="assign-a"), **deps
        )
        assert out.success

    def test_viewer_cannot_complete_others_pass(self, deps):
        out = comp.run_complete(
            comp.CompleteAssignmentInput(actor_id="user-cia", assignment_id="assign-a"), **deps
        )
        assert out.code == "forbidden"

    def test_log_next_completes_own_pass(self, store, deps):
        out = comp.run_log_next(
            comp.LogNextAssignmentInput(actor_id="user-cia", stable_id="stable-sol"),
            store=store,
            ids=deps["ids"],
            clock=deps["clock"],
        )
        assert out.assignment.id == "assign-b"
        assert out.assignment.status == "completed"

    def test_log_next_without_passes(self, store, deps):
        out = comp.run_log_next(
            comp.LogNextAssignmentInput(actor_id="user-bo", stable_id="stable-sol"),
            store=store,
            ids=deps["ids"],
            clock=deps["clock"],
        )
        assert out.reason == "No assigned passes to log right now"


# --- Day events ---


def test_add_and_remove_day_event(store, policy, ids):
    out = comp.run_add_day_event(
        comp.AddDayEventInput(
            actor_id="user-bo",
            stable_id="stable-sol",
            date="2025-03-12",
            label=" Hovslagare kommer ",
            tone="farrier_away",
        ),
        store=store,
        policy=policy,
        ids=ids,
    )
    assert out.success
    assert out.event.id == "day-1"
    assert out.event.label == "Hovslagare kommer"
    assert [e.id for e in store.day_events_for("stable-sol")] == ["day-1"]

    removed = comp.run_remove_day_event(
        comp.RemoveDayEventInput(actor_id="user-bo", event_id="day-1"), store=store, policy=policy
    )
    assert removed.success
    assert store.day_events_for("stable-sol") == []


@pytest.mark.parametrize(
    "actor_id, label, tone, code",
    [
        ("user-bo", "  ", "info", "invalid"),
        ("user-bo", "Fest", "party", "invalid"),
        ("user-cia", "Fest", "info", "forbidden"),
    ],
)
def test_day_event_rejections(store, policy, ids, actor_id, label, tone, code):
    out = comp.run_add_day_event(
        comp.AddDayEventInput(
            actor_id=actor_id, stable_id="stable-sol", date="2025-03-12", label=label, tone=tone
        ),
        store=store,
        policy=policy,
        ids=ids,
    )
    assert out.code == code


# --- Default passes ---


class TestReconcile:
    def _reconcile(self, store, today=date(2025, 3, 10)):
        return comp.run_reconcile_default_passes(
            comp.ReconcileDefaultPassesInput(stable_id="stable-sol", today=today), store=store
        )

    def test_single_candidate_gets_the_pass(self, store):
        out = self._reconcile(store)

        assert out.assigned_ids == ["assign-c"]
        assignment = store.get_assignment("assign-c")
        assert assignment.assignee_id == "user-cia"
        assert assignment.assigned_via == "default"

    def test_ambiguous_match_stays_open(self, store):
        _give_default_pass(store, "user-bo", 1, "lunch")

        out = self._reconcile(store)
        assert out.assigned_ids == []
        assert store.get_assignment("assign-c").status == "open"

    def test_members_of_other_stables_do_not_count(self, store):
        _give_default_pass(store, "user-dan", 1, "lunch")
        assert self._reconcile(store).assigned_ids == ["assign-c"]

    def test_decliner_is_not_reassigned(self, store):
        state = store.snapshot()
        state.assignments["assign-c"].declined_by_user_ids = ["user-cia"]
        store.commit(state)

        assert self._reconcile(store).assigned_ids == []

    def test_pass_reopens_when_default_is_removed(self, store):
        self._reconcile(store)
        state = store.snapshot()
        state.users["user-cia"].default_passes = []
        store.commit(state)

        out = self._reconcile(store)
        assert out.reopened_ids == ["assign-c"]
        assert store.get_assignment("assign-c").assignee_id is None

    def test_manual_assignments_are_left_alone(self, store):
        _give_default_pass(store, "user-bo", 0, "evening")
        out = self._reconcile(store)
        assert "assign-b" not in out.reopened_ids
        assert store.get_assignment("assign-b").assignee_id == "user-cia"

    def test_past_passes_are_skipped(self, store):
        out = self._reconcile(store, today=date(2025, 3, 12))
        assert out.assigned_ids == []

    def test_unknown_stable(self, store):
        out = comp.run_reconcile_default_passes(
            comp.ReconcileDefaultPassesInput(stable_id="nope", today=date(2025, 3, 10)), store=store
        )
        assert out.code == "not_found"


def test_dispatch_rejects_unknown_input(deps):
    with pytest.raises(ValueError, match="Unknown input type"):
        comp.run(object(), **deps)
