from __future__ import annotations

from dataclasses import dataclass

from stablecore.domain.entities import Selection
from stablecore.domain.errors import ErrorCode


@dataclass(frozen=True)
class SetCurrentUserInput:
    user_id: str


@dataclass(frozen=True)
class SetCurrentStableInput:
    stable_id: str
    actor_id: str | None = None


@dataclass(frozen=True)
class SelectionOutput:
    selection: Selection | None = None
    success: bool = False
    reason: str | None = None
    code: ErrorCode | None = None
