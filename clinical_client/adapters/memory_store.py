"""
Memory Credential Store - In-process credential storage.
"""

from typing import Optional, Tuple
from clinical_client.ports.credential_store_port import CredentialStorePort
from clinical_client.domain.user import UserProfile


class MemoryCredentialStore(CredentialStorePort):
    """
    In-memory credential storage.

    Credentials live as long as the process. The token pair is held as a
    single tuple so a save replaces both values in one assignment.
    """

    def __init__(self, prefix: str = "auth_"):
        super().__init__(prefix)
        self._tokens: Optional[Tuple[str, str]] = None
        self._user: Optional[UserProfile] = None

    async def save(self, access_token: str, refresh_token: str) -> None:
        self._tokens = (access_token, refresh_token)

    async def access_token(self) -> Optional[str]:
        return self._tokens[0] if self._tokens else None

    async def refresh_token(self) -> Optional[str]:
        return self._tokens[1] if self._tokens else None

    async def save_user(self, user: UserProfile) -> None:
        self._user = user

    async def user(self) -> Optional[UserProfile]:
        return self._user

    async def clear(self) -> None:
        self._tokens = None
        self._user = None
