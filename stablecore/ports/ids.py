from typing import Protocol


class IdGeneratorPort(Protocol):
    def new_id(self, prefix: str) -> str:
        """Return a fresh identifier, e.g. ``paddock-3f2a...``."""
        ...
