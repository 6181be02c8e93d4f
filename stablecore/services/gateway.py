"""
Mutation gateway - the single write path into the domain store.

Binds the store, policy, id generator and clock, fills in the acting user
from the current selection and runs the matching component entry point.
Expected failures come back as outputs with ``success=False``; an invariant
breach caught at commit time is turned into a failure with code
``"invariant"`` and the store keeps its previous state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any, TypeVar

from stablecore.components import assignments, members, paddocks, selection, stables
from stablecore.domain.entities import PaddockImage
from stablecore.domain.errors import InvariantViolation
from stablecore.domain.policy import PolicyEngine
from stablecore.domain.store import DomainStore
from stablecore.ports.clock import ClockPort
from stablecore.ports.ids import IdGeneratorPort

logger = logging.getLogger(__name__)

OutputT = TypeVar("OutputT")


class MutationGateway:
    def __init__(
        self,
        store: DomainStore,
        policy: PolicyEngine,
        ids: IdGeneratorPort,
        clock: ClockPort,
    ):
        self.store = store
        self.policy = policy
        self.ids = ids
        self.clock = clock

    # --- Plumbing ---

    @property
    def actor_id(self) -> str | None:
        return self.store.selection.current_user_id

    def _stable_id(self, stable_id: str | None) -> str:
        return stable_id or self.store.selection.current_stable_id or ""

    def _execute(
        self, name: str, call: Callable[[], OutputT], failure: Callable[..., OutputT]
    ) -> OutputT:
        try:
            result = call()
        except InvariantViolation as e:
            logger.error("%s broke a store invariant: %s", name, e)
            return failure(success=False, reason=str(e), code="invariant")

        if getattr(result, "success", False):
            logger.info("%s accepted (actor=%s)", name, self.actor_id)
        else:
            logger.warning(
                "%s rejected (actor=%s): %s", name, self.actor_id, getattr(result, "reason", None)
            )
        return result

    def _deps(self, *names: str) -> dict[str, Any]:
        available = {"store": self.store, "policy": self.policy, "ids": self.ids, "clock": self.clock}
        return {name: available[name] for name in names}

    # --- Selection ---

    def set_current_user(self, user_id: str) -> selection.SelectionOutput:
        inp = selection.SetCurrentUserInput(user_id=user_id)
        return self._execute(
            "set_current_user",
            lambda: selection.run_set_current_user(inp, store=self.store),
            selection.SelectionOutput,
        )

    def set_current_stable(self, stable_id: str) -> selection.SelectionOutput:
        inp = selection.SetCurrentStableInput(stable_id=stable_id, actor_id=self.actor_id)
        return self._execute(
            "set_current_stable",
            lambda: selection.run_set_current_stable(inp, store=self.store),
            selection.SelectionOutput,
        )

    # --- Stables ---

    def upsert_stable(
        self,
        name: str,
        *,
        location: str | None = None,
        description: str | None = None,
        farm_id: str | None = None,
        stable_id: str | None = None,
    ) -> stables.StableOutput:
        inp = stables.UpsertStableInput(
            actor_id=self.actor_id,
            name=name,
            location=location,
            description=description,
            farm_id=farm_id,
            stable_id=stable_id,
        )
        return self._execute(
            "upsert_stable",
            lambda: stables.run_upsert(inp, **self._deps("store", "policy", "ids")),
            stables.StableOutput,
        )

    def update_stable(self, stable_id: str, updates: dict[str, Any]) -> stables.StableOutput:
        inp = stables.UpdateStableInput(actor_id=self.actor_id, stable_id=stable_id, updates=updates)
        return self._execute(
            "update_stable",
            lambda: stables.run_update(inp, **self._deps("store", "policy", "ids")),
            stables.StableOutput,
        )

    def set_onboarding_dismissed(
        self, dismissed: bool, stable_id: str | None = None
    ) -> stables.StableOutput:
        inp = stables.SetOnboardingDismissedInput(
            actor_id=self.actor_id, dismissed=dismissed, stable_id=stable_id
        )
        return self._execute(
            "set_onboarding_dismissed",
            lambda: stables.run_set_onboarding_dismissed(inp, **self._deps("store", "policy")),
            stables.StableOutput,
        )

    # --- Members ---

    def add_member(
        self,
        name: str,
        stable_ids: list[str],
        *,
        role: str = "guest",
        access: str = "view",
        custom_role: str | None = None,
        rider_role: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> members.MemberOutput:
        inp = members.AddMemberInput(
            actor_id=self.actor_id,
            name=name,
            stable_ids=stable_ids,
            role=role,
            access=access,
            custom_role=custom_role,
            rider_role=rider_role,
            email=email,
            phone=phone,
        )
        return self._execute(
            "add_member",
            lambda: members.run_add_member(inp, **self._deps("store", "policy", "ids")),
            members.MemberOutput,
        )

    def update_member_role(
        self,
        user_id: str,
        stable_id: str,
        *,
        role: str | None = None,
        access: str | None = None,
        custom_role: str | None = None,
        rider_role: str | None = None,
    ) -> members.MemberOutput:
        inp = members.UpdateMemberRoleInput(
            actor_id=self.actor_id,
            user_id=user_id,
            stable_id=stable_id,
            role=role,
            access=access,
            custom_role=custom_role,
            rider_role=rider_role,
        )
        return self._execute(
            "update_member_role",
            lambda: members.run_update_member_role(inp, **self._deps("store", "policy")),
            members.MemberOutput,
        )

    def remove_member_from_stable(self, user_id: str, stable_id: str) -> members.MemberOutput:
        inp = members.RemoveMemberInput(actor_id=self.actor_id, user_id=user_id, stable_id=stable_id)
        return self._execute(
            "remove_member_from_stable",
            lambda: members.run_remove_member(inp, **self._deps("store", "policy")),
            members.MemberOutput,
        )

    def update_profile(self, updates: dict[str, Any]) -> members.MemberOutput:
        inp = members.UpdateProfileInput(actor_id=self.actor_id, updates=updates)
        return self._execute(
            "update_profile",
            lambda: members.run_update_profile(inp, store=self.store),
            members.MemberOutput,
        )

    def toggle_default_pass(
        self, weekday: int, slot: str, user_id: str | None = None
    ) -> members.MemberOutput:
        inp = members.ToggleDefaultPassInput(
            actor_id=self.actor_id, weekday=weekday, slot=slot, user_id=user_id
        )
        return self._execute(
            "toggle_default_pass",
            lambda: members.run_toggle_default_pass(inp, **self._deps("store", "policy")),
            members.MemberOutput,
        )

    # --- Paddocks ---

    def upsert_paddock(
        self,
        name: str,
        *,
        stable_id: str | None = None,
        horse_names: list[str] | None = None,
        season: str = "all_year",
        image: PaddockImage | None = None,
        clear_image: bool = False,
        paddock_id: str | None = None,
    ) -> paddocks.PaddockOutput:
        inp = paddocks.UpsertPaddockInput(
            actor_id=self.actor_id,
            stable_id=self._stable_id(stable_id),
            name=name,
            horse_names=list(horse_names or []),
            season=season,
            image=image,
            clear_image=clear_image,
            paddock_id=paddock_id,
        )
        return self._execute(
            "upsert_paddock",
            lambda: paddocks.run_upsert(inp, **self._deps("store", "policy", "ids", "clock")),
            paddocks.PaddockOutput,
        )

    def delete_paddock(self, paddock_id: str) -> paddocks.PaddockOutput:
        inp = paddocks.DeletePaddockInput(actor_id=self.actor_id, paddock_id=paddock_id)
        return self._execute(
            "delete_paddock",
            lambda: paddocks.run_delete(inp, **self._deps("store", "policy")),
            paddocks.PaddockOutput,
        )

    # --- Assignments ---

    def create_assignment(
        self,
        date: str,
        slot: str,
        *,
        stable_id: str | None = None,
        time: str | None = None,
        note: str | None = None,
        assign_to_actor: bool = False,
        label_override: str | None = None,
    ) -> assignments.AssignmentOutput:
        inp = assignments.CreateAssignmentInput(
            actor_id=self.actor_id,
            stable_id=self._stable_id(stable_id),
            date=date,
            slot=slot,
            time=time,
            note=note,
            assign_to_actor=assign_to_actor,
            label_override=label_override,
        )
        return self._execute(
            "create_assignment",
            lambda: assignments.run_create(inp, **self._deps("store", "policy", "ids", "clock")),
            assignments.AssignmentOutput,
        )

    def update_assignment(self, assignment_id: str, **changes: Any) -> assignments.AssignmentOutput:
        """Apply ``changes`` (date, slot, time, note, assign_to_actor, label_override)."""
        try:
            inp = assignments.UpdateAssignmentInput(
                actor_id=self.actor_id, assignment_id=assignment_id, **changes
            )
        except TypeError as e:
            return assignments.AssignmentOutput(success=False, reason=str(e), code="invalid")
        return self._execute(
            "update_assignment",
            lambda: assignments.run_update(inp, **self._deps("store", "policy", "ids", "clock")),
            assignments.AssignmentOutput,
        )

    def delete_assignment(self, assignment_id: str) -> assignments.AssignmentOutput:
        inp = assignments.DeleteAssignmentInput(actor_id=self.actor_id, assignment_id=assignment_id)
        return self._execute(
            "delete_assignment",
            lambda: assignments.run_delete(inp, **self._deps("store", "policy")),
            assignments.AssignmentOutput,
        )

    def claim_assignment(self, assignment_id: str) -> assignments.AssignmentOutput:
        inp = assignments.ClaimAssignmentInput(actor_id=self.actor_id, assignment_id=assignment_id)
        return self._execute(
            "claim_assignment",
            lambda: assignments.run_claim(inp, **self._deps("store", "policy", "ids", "clock")),
            assignments.AssignmentOutput,
        )

    def claim_next_open_assignment(
        self, stable_id: str | None = None
    ) -> assignments.AssignmentOutput:
        inp = assignments.ClaimNextOpenInput(
            actor_id=self.actor_id, stable_id=self._stable_id(stable_id)
        )
        return self._execute(
            "claim_next_open_assignment",
            lambda: assignments.run_claim_next_open(
                inp, **self._deps("store", "policy", "ids", "clock")
            ),
            assignments.AssignmentOutput,
        )

    def decline_assignment(self, assignment_id: str) -> assignments.AssignmentOutput:
        inp = assignments.DeclineAssignmentInput(actor_id=self.actor_id, assignment_id=assignment_id)
        return self._execute(
            "decline_assignment",
            lambda: assignments.run_decline(inp, **self._deps("store", "ids", "clock")),
            assignments.AssignmentOutput,
        )

    def complete_assignment(self, assignment_id: str) -> assignments.AssignmentOutput:
        inp = assignments.CompleteAssignmentInput(actor_id=self.actor_id, assignment_id=assignment_id)
        return self._execute(
            "complete_assignment",
            lambda: assignments.run_complete(inp, **self._deps("store", "policy", "ids", "clock")),
            assignments.AssignmentOutput,
        )

    def log_next_assignment(self, stable_id: str | None = None) -> assignments.AssignmentOutput:
        inp = assignments.LogNextAssignmentInput(
            actor_id=self.actor_id, stable_id=self._stable_id(stable_id)
        )
        return self._execute(
            "log_next_assignment",
            lambda: assignments.run_log_next(inp, **self._deps("store", "ids", "clock")),
            assignments.AssignmentOutput,
        )

    def add_day_event(
        self, date: str, label: str, tone: str = "info", stable_id: str | None = None
    ) -> assignments.DayEventOutput:
        inp = assignments.AddDayEventInput(
            actor_id=self.actor_id,
            stable_id=self._stable_id(stable_id),
            date=date,
            label=label,
            tone=tone,
        )
        return self._execute(
            "add_day_event",
            lambda: assignments.run_add_day_event(inp, **self._deps("store", "policy", "ids")),
            assignments.DayEventOutput,
        )

    def remove_day_event(self, event_id: str) -> assignments.DayEventOutput:
        inp = assignments.RemoveDayEventInput(actor_id=self.actor_id, event_id=event_id)
        return self._execute(
            "remove_day_event",
            lambda: assignments.run_remove_day_event(inp, **self._deps("store", "policy")),
            assignments.DayEventOutput,
        )

    def reconcile_default_passes(
        self, stable_id: str | None = None, today: date | None = None
    ) -> assignments.ReconcileOutput:
        inp = assignments.ReconcileDefaultPassesInput(
            stable_id=self._stable_id(stable_id), today=today or self.clock.today()
        )
        return self._execute(
            "reconcile_default_passes",
            lambda: assignments.run_reconcile_default_passes(inp, store=self.store),
            assignments.ReconcileOutput,
        )
