from __future__ import annotations

from dataclasses import dataclass, field

from stablecore.domain.entities import Paddock, PaddockImage
from stablecore.domain.errors import ErrorCode


@dataclass(frozen=True)
class UpsertPaddockInput:
    """
    Create a paddock, or replace one when ``paddock_id`` exists.

    ``image=None`` keeps the current image; ``clear_image=True`` removes it.
    """

    actor_id: str | None
    stable_id: str
    name: str
    horse_names: list[str] = field(default_factory=list)
    season: str = "all_year"
    image: PaddockImage | None = None
    clear_image: bool = False
    paddock_id: str | None = None


@dataclass(frozen=True)
class DeletePaddockInput:
    actor_id: str | None
    paddock_id: str


@dataclass(frozen=True)
class PaddockOutput:
    paddock: Paddock | None = None
    success: bool = False
    reason: str | None = None
    code: ErrorCode | None = None
