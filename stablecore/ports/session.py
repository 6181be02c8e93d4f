from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class AuthSession:
    """Authenticated identity handed over by the remote auth provider."""

    user_id: str
    email: str | None = None
    access_token: str | None = None


class AuthSessionPort(Protocol):
    @property
    def session(self) -> AuthSession | None: ...

    @property
    def loading(self) -> bool: ...

    def sign_out(self) -> None: ...
