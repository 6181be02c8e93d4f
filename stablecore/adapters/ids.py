from uuid import uuid4


class UuidIdGenerator:
    def new_id(self, prefix: str) -> str:
        return f"{prefix}-{uuid4().hex[:12]}"


class SequentialIdGenerator:
    """Predictable ids (``paddock-1``, ``paddock-2``...) for seeding and tests."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}

    def new_id(self, prefix: str) -> str:
        self._counters[prefix] = self._counters.get(prefix, 0) + 1
        return f"{prefix}-{self._counters[prefix]}"
