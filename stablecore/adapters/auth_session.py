from __future__ import annotations

import logging

from stablecore.ports.session import AuthSession

logger = logging.getLogger(__name__)


class StaticAuthSession:
    """
    Auth provider holding a fixed session.

    Used when the remote provider is not wired in (local runs, tests).
    """

    def __init__(self, session: AuthSession | None = None, loading: bool = False):
        self._session = session
        self._loading = loading

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def loading(self) -> bool:
        return self._loading

    def sign_in(self, session: AuthSession) -> None:
        self._session = session
        self._loading = False

    def sign_out(self) -> None:
        if self._session is not None:
            logger.info("Signing out %s", self._session.user_id)
        self._session = None
