from dataclasses import dataclass

from stablecore.domain.entities import Membership, User
from stablecore.rules.models import Rules

# Lowest tier first; each tier inherits the capabilities of the tiers before it.
ACCESS_LADDER: tuple[str, ...] = ("view", "edit", "owner")


@dataclass(frozen=True)
class Capabilities:
    """Derived permissions of one user within one stable."""

    stable_id: str | None
    role: str | None
    access: str | None
    label: str
    can_view_schedule: bool = False
    can_claim_assignments: bool = False
    can_edit_schedule: bool = False
    can_manage_paddocks: bool = False
    can_manage_stable: bool = False
    can_manage_members: bool = False
    can_manage_onboarding: bool = False

    @property
    def has_access(self) -> bool:
        return self.access is not None

    def granted(self) -> frozenset[str]:
        """Names of the granted capabilities, without the ``can_`` prefix."""
        return frozenset(
            name[len("can_"):]
            for name, value in vars(self).items()
            if name.startswith("can_") and value
        )


class PolicyEngine:
    def __init__(self, rules: Rules):
        self.rules = rules
        self._ladder = self._build_ladder()

    def _build_ladder(self) -> dict[str, frozenset[str]]:
        ladder: dict[str, frozenset[str]] = {}
        granted: set[str] = set()
        for tier in ACCESS_LADDER:
            granted |= set(self.rules.access.capabilities.get(tier, []))  # type: ignore[call-overload]
            ladder[tier] = frozenset(granted)
        return ladder

    # --- Labels ---

    def role_label(self, role: str) -> str:
        # Unknown roles fall back to the raw tag instead of failing.
        return self.rules.roles.labels.get(role, role)

    def access_label(self, access: str) -> str:
        return self.rules.access.labels.get(access, access)

    def display_label(self, membership: Membership | None) -> str:
        """
        Label shown for a member inside a stable.

        Owner access always wins, then a non-blank custom role, then the
        role table.
        """
        if membership is None:
            return self.rules.roles.no_membership_label
        if membership.access == "owner":
            return self.rules.roles.owner_label
        custom = (membership.custom_role or "").strip()
        if custom:
            return custom
        return self.role_label(membership.role)

    def meta_label(self, membership: Membership | None) -> str:
        """Role and access combined, e.g. "Rider · Can view"."""
        if membership is None:
            return self.rules.roles.no_membership_label
        custom = (membership.custom_role or "").strip()
        role_label = custom or self.role_label(membership.role)
        access_label = self.access_label(membership.access)
        return f"{role_label} · {access_label}" if access_label else role_label

    # --- Capabilities ---

    def find_membership(self, user: User | None, stable_id: str | None) -> Membership | None:
        if user is None or not stable_id:
            return None
        return user.membership_for(stable_id)

    def resolve(self, user: User | None, stable_id: str | None) -> Capabilities:
        membership = self.find_membership(user, stable_id)
        if membership is None:
            return Capabilities(
                stable_id=stable_id,
                role=None,
                access=None,
                label=self.display_label(None),
            )

        # Unknown tiers grant nothing.
        granted = set(self._ladder.get(membership.access, frozenset()))
        if membership.role in self.rules.roles.onboarding_roles:
            granted.add("manage_onboarding")

        return Capabilities(
            stable_id=stable_id,
            role=membership.role,
            access=membership.access,
            label=self.display_label(membership),
            can_view_schedule="view_schedule" in granted,
            can_claim_assignments="claim_assignments" in granted,
            can_edit_schedule="edit_schedule" in granted,
            can_manage_paddocks="manage_paddocks" in granted,
            can_manage_stable="manage_stable" in granted,
            can_manage_members="manage_members" in granted,
            can_manage_onboarding="manage_onboarding" in granted,
        )

    def check(self, user: User | None, stable_id: str | None, capability: str) -> bool:
        return capability in self.resolve(user, stable_id).granted()

    def can_manage_onboarding_any(self, user: User | None) -> bool:
        """True if any membership of the user carries owner access or an onboarding role."""
        if user is None:
            return False
        return any(
            entry.access == "owner" or entry.role in self.rules.roles.onboarding_roles
            for entry in user.membership
        )
