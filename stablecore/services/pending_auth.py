"""
Pending sign-in state kept in secure storage.

A join code or a freshly created owner stable may have to survive the
round trip through the auth provider. Storage failures never reach the
caller: writes are dropped and reads come back as ``None``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from stablecore.ports.secure_store import SecureStorePort

logger = logging.getLogger(__name__)

PENDING_JOIN_CODE_KEY = "pending_join_code"
PENDING_OWNER_STABLE_KEY = "pending_owner_stable"


@dataclass(frozen=True)
class PendingOwnerStable:
    id: str
    name: str


def save_pending_join_code(store: SecureStorePort, value: str) -> None:
    trimmed = value.strip()
    if not trimmed:
        return
    try:
        store.set(PENDING_JOIN_CODE_KEY, trimmed)
    except Exception as e:
        logger.debug("Could not save pending join code: %s", e)


def load_pending_join_code(store: SecureStorePort) -> str | None:
    try:
        stored = store.get(PENDING_JOIN_CODE_KEY)
    except Exception as e:
        logger.debug("Could not read pending join code: %s", e)
        return None
    trimmed = (stored or "").strip()
    return trimmed or None


def clear_pending_join_code(store: SecureStorePort) -> None:
    try:
        store.delete(PENDING_JOIN_CODE_KEY)
    except Exception as e:
        logger.debug("Could not clear pending join code: %s", e)


def save_pending_owner_stable(store: SecureStorePort, pending: PendingOwnerStable) -> None:
    stable_id = pending.id.strip()
    name = pending.name.strip()
    if not stable_id or not name:
        return
    try:
        store.set(PENDING_OWNER_STABLE_KEY, json.dumps({"id": stable_id, "name": name}))
    except Exception as e:
        logger.debug("Could not save pending owner stable: %s", e)


def load_pending_owner_stable(store: SecureStorePort) -> PendingOwnerStable | None:
    try:
        stored = store.get(PENDING_OWNER_STABLE_KEY)
        if not stored:
            return None
        parsed = json.loads(stored)
    except Exception as e:
        logger.debug("Could not read pending owner stable: %s", e)
        return None

    if not isinstance(parsed, dict):
        return None
    raw_id = parsed.get("id")
    raw_name = parsed.get("name")
    stable_id = raw_id.strip() if isinstance(raw_id, str) else ""
    name = raw_name.strip() if isinstance(raw_name, str) else ""
    if not stable_id or not name:
        return None
    return PendingOwnerStable(id=stable_id, name=name)


def clear_pending_owner_stable(store: SecureStorePort) -> None:
    try:
        store.delete(PENDING_OWNER_STABLE_KEY)
    except Exception as e:
        logger.debug("Could not clear pending owner stable: %s", e)
