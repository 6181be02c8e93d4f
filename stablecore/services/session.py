"""
Stable session - read surface and write gateway for the signed-in user.

Reads go straight to the store (deep copies) and the policy engine; every
write goes through the ``MutationGateway`` held in ``actions``.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from stablecore.components.schedule import (
    DateOption,
    GroupedAssignmentDay,
    filter_visible_events,
    format_day_number,
    format_short_weekday,
    generate_date_options,
    group_assignments_by_day,
    start_of_week,
    to_iso_date,
)
from stablecore.components.selection import SelectionOutput
from stablecore.components.stables.component import resolve_stable_settings
from stablecore.domain.derived import (
    AssignmentSummary,
    find_next_assigned,
    find_next_open,
    summarize,
    upcoming_for_user,
)
from stablecore.domain.entities import (
    Assignment,
    AssignmentHistoryEntry,
    DayEvent,
    Membership,
    Paddock,
    Stable,
    User,
)
from stablecore.domain.policy import Capabilities, PolicyEngine
from stablecore.domain.store import DomainStore
from stablecore.ports.secure_store import SecureStorePort
from stablecore.ports.session import AuthSessionPort
from stablecore.services.gateway import MutationGateway
from stablecore.services.pending_auth import (
    clear_pending_owner_stable,
    load_pending_owner_stable,
)

logger = logging.getLogger(__name__)


class StableSession:
    def __init__(
        self,
        store: DomainStore,
        policy: PolicyEngine,
        actions: MutationGateway,
        secure_store: SecureStorePort | None = None,
    ):
        self.store = store
        self.policy = policy
        self.actions = actions
        self.secure_store = secure_store

    def _stable_id(self, stable_id: str | None) -> str | None:
        return stable_id or self.store.selection.current_stable_id

    # --- Startup ---

    def start(self, auth: AuthSessionPort) -> SelectionOutput | None:
        """
        Point the selection at the authenticated user.

        Returns None while the auth provider is loading or signed out. A
        pending owner stable saved before sign-in becomes the current stable
        when the user is a member of it; it is cleared either way.
        """
        if auth.loading or auth.session is None:
            return None

        session = auth.session
        user = self.store.get_user(session.user_id)
        if user is None and session.email:
            user = self.store.find_user_by_email(session.email)
        if user is None:
            logger.info("Authenticated user %s has no profile yet", session.user_id)
            return SelectionOutput(success=False, reason="No such user", code="not_found")

        result = self.actions.set_current_user(user.id)
        if not result.success or self.secure_store is None:
            return result

        pending = load_pending_owner_stable(self.secure_store)
        if pending is None:
            return result
        clear_pending_owner_stable(self.secure_store)
        if user.membership_for(pending.id) is None:
            logger.info("Pending stable %s is not available to %s", pending.id, user.id)
            return result
        return self.actions.set_current_stable(pending.id)

    # --- Reads ---

    def current_user(self) -> User | None:
        return self.store.current_user()

    def current_stable(self) -> Stable | None:
        return self.store.current_stable()

    def my_stables(self) -> list[Stable]:
        """Stables the current user is a member of, in store order."""
        user = self.store.current_user()
        if user is None:
            return []
        member_of = {entry.stable_id for entry in user.membership}
        return [stable for stable in self.store.list_stables() if stable.id in member_of]

    def members(self, stable_id: str | None = None) -> list[tuple[User, Membership]]:
        resolved = self._stable_id(stable_id)
        return self.store.members_of(resolved) if resolved else []

    def paddocks(self, stable_id: str | None = None) -> list[Paddock]:
        resolved = self._stable_id(stable_id)
        return self.store.paddocks_for(resolved) if resolved else []

    def assignments(
        self,
        stable_id: str | None = None,
        start: str | None = None,
        end: str | None = None,
    ) -> list[Assignment]:
        resolved = self._stable_id(stable_id)
        return self.store.assignments_for(resolved, start, end) if resolved else []

    def schedule(
        self, stable_id: str | None = None, start: str | None = None, end: str | None = None
    ) -> list[GroupedAssignmentDay]:
        return group_assignments_by_day(self.assignments(stable_id, start, end))

    def day_events(self, stable_id: str | None = None, visible_only: bool = True) -> list[DayEvent]:
        resolved = self._stable_id(stable_id)
        if not resolved:
            return []
        events = self.store.day_events_for(resolved)
        if not visible_only:
            return events
        settings = resolve_stable_settings(self.store.get_stable(resolved))
        return filter_visible_events(events, settings.event_visibility)

    def history(self, limit: int = 5) -> list[AssignmentHistoryEntry]:
        return self.store.history(limit)

    # --- Capabilities ---

    def capabilities(self, stable_id: str | None = None) -> Capabilities:
        return self.policy.resolve(self.store.current_user(), self._stable_id(stable_id))

    def can_manage_onboarding_any(self) -> bool:
        return self.policy.can_manage_onboarding_any(self.store.current_user())

    def needs_onboarding(self) -> bool:
        """True when the user may run setup and the current stable has not dismissed it."""
        if not self.can_manage_onboarding_any():
            return False
        stable = self.store.current_stable()
        if stable is None:
            return True
        return not resolve_stable_settings(stable).onboarding_dismissed

    # --- Derived ---

    def summary(self, stable_id: str | None = None) -> AssignmentSummary:
        return summarize(self.assignments(stable_id))

    def open_slot_labels(self, stable_id: str | None = None) -> list[str]:
        slots = self.policy.rules.schedule.slots
        return [
            slots[slot].short_label if slot in slots else slot  # type: ignore[index]
            for slot in self.summary(stable_id).open_slots
        ]

    def upcoming(self, stable_id: str | None = None, limit: int = 5) -> list[Assignment]:
        user = self.store.current_user()
        if user is None:
            return []
        return upcoming_for_user(self.assignments(stable_id), user.id, limit)

    def next_assignment(self, stable_id: str | None = None) -> Assignment | None:
        """The user's next assigned pass, else the next open one."""
        items = self.assignments(stable_id)
        user = self.store.current_user()
        mine = find_next_assigned(items, user.id) if user else None
        return mine or find_next_open(items)

    def week_of(self, day: date, stable_id: str | None = None) -> list[GroupedAssignmentDay]:
        start = start_of_week(day)
        end = start + timedelta(days=6)
        return self.schedule(stable_id, to_iso_date(start), to_iso_date(end))

    def date_options(
        self, include_dates: list[str] | None = None, stable_id: str | None = None
    ) -> list[DateOption]:
        """Picker dates for a new pass, starting from days that already have passes."""
        settings = self.policy.rules.schedule
        today = self.actions.clock.today()
        return generate_date_options(
            self.schedule(stable_id, start=to_iso_date(today)),
            count=settings.date_option_count,
            include_dates=include_dates,
            today=today,
            locale=settings.label_locale,
        )

    def week_strip(self, day: date) -> list[DateOption]:
        """Monday-to-Sunday header cells for the week containing ``day``, e.g. "Mon 10"."""
        locale = self.policy.rules.schedule.weekday_locale
        start = start_of_week(day)
        days = [start + timedelta(days=offset) for offset in range(7)]
        return [
            DateOption(
                label=f"{format_short_weekday(d, locale)} {format_day_number(d)}",
                value=to_iso_date(d),
            )
            for d in days
        ]
