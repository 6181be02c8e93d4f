from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stablecore.domain.entities import Membership, User
from stablecore.domain.errors import ErrorCode


@dataclass(frozen=True)
class AddMemberInput:
    """Invite a person into one or more stables with the same role and access."""

    actor_id: str | None
    name: str
    stable_ids: list[str]
    role: str = "guest"
    access: str = "view"
    custom_role: str | None = None
    rider_role: str | None = None
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class UpdateMemberRoleInput:
    """``custom_role=""`` clears the custom label; ``None`` leaves fields unchanged."""

    actor_id: str | None
    user_id: str
    stable_id: str
    role: str | None = None
    access: str | None = None
    custom_role: str | None = None
    rider_role: str | None = None


@dataclass(frozen=True)
class RemoveMemberInput:
    actor_id: str | None
    user_id: str
    stable_id: str


@dataclass(frozen=True)
class UpdateProfileInput:
    actor_id: str | None
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToggleDefaultPassInput:
    actor_id: str | None
    weekday: int
    slot: str
    user_id: str | None = None  # defaults to the actor


@dataclass(frozen=True)
class MemberOutput:
    user: User | None = None
    membership: Membership | None = None
    success: bool = False
    reason: str | None = None
    code: ErrorCode | None = None
