"""
Secure key-value storage port.

Backed by the device keychain in the mobile client. Values are strings; a
missing key reads as None. Implementations may raise on any call, callers in
this package treat such failures as "value absent".
"""

from typing import Protocol


class SecureStorePort(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...
