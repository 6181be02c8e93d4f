"""
In-memory secure store.

Stands in for the device keychain during development and tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class InMemorySecureStore:
    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        logger.debug("Secure store set %s", key)
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)
