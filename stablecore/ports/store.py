from typing import Protocol

from stablecore.domain.entities import StoreState


class StorePort(Protocol):
    """Write path into the domain store used by components."""

    def snapshot(self) -> StoreState:
        """Deep copy of the current state to work on."""
        ...

    def commit(self, state: StoreState) -> None:
        """Replace the state; raises InvariantViolation if it is inconsistent."""
        ...
