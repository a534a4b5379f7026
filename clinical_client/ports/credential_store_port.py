"""
Credential Store Port - Interface for persisting the session credential.

Implementations:
- MemoryCredentialStore: In-process storage (default, testing)
- FileCredentialStore: JSON file on local disk
- RedisCredentialStore: Redis keys under a shared prefix

Only the session manager writes through this port.
"""

from abc import ABC, abstractmethod
from typing import Optional
from clinical_client.domain.user import UserProfile


ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
USER_KEY = "user"


class CredentialStorePort(ABC):
    """Port: Durable key/value storage for tokens and the cached profile."""

    def __init__(self, prefix: str = "auth_"):
        self._prefix = prefix

    def _key(self, name: str) -> str:
        """Namespaced storage key."""
        return f"{self._prefix}{name}"

    @abstractmethod
    async def save(self, access_token: str, refresh_token: str) -> None:
        """
        Overwrite both tokens.

        A concurrent reader must never observe one new token next to one
        old token.

        Args:
            access_token: Bearer token for API calls
            refresh_token: Token used to mint new access tokens
        """
        pass

    @abstractmethod
    async def access_token(self) -> Optional[str]:
        """Stored access token, or None."""
        pass

    @abstractmethod
    async def refresh_token(self) -> Optional[str]:
        """Stored refresh token, or None."""
        pass

    @abstractmethod
    async def save_user(self, user: UserProfile) -> None:
        """
        Cache the signed-in profile.

        Args:
            user: Profile to cache
        """
        pass

    @abstractmethod
    async def user(self) -> Optional[UserProfile]:
        """
        Cached profile.

        Returns:
            Profile, or None when absent or unreadable
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove both tokens and the cached profile. Idempotent."""
        pass
