from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stablecore.domain.entities import Stable
from stablecore.domain.errors import ErrorCode


@dataclass(frozen=True)
class UpsertStableInput:
    """Create a stable, or rename/relocate it when ``stable_id`` exists."""

    actor_id: str | None
    name: str
    location: str | None = None
    description: str | None = None
    farm_id: str | None = None
    stable_id: str | None = None


@dataclass(frozen=True)
class UpdateStableInput:
    """Partial update; ``settings`` is merged key by key."""

    actor_id: str | None
    stable_id: str
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SetOnboardingDismissedInput:
    actor_id: str | None
    dismissed: bool
    stable_id: str | None = None


@dataclass(frozen=True)
class StableOutput:
    stable: Stable | None = None
    success: bool = False
    reason: str | None = None
    code: ErrorCode | None = None
