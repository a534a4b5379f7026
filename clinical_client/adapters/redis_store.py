"""
Redis Credential Store - Redis-backed credential storage.
"""

from typing import Optional
import json
from clinical_client.ports.credential_store_port import (
    CredentialStorePort,
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    USER_KEY,
)
from clinical_client.domain.user import UserProfile


class RedisCredentialStore(CredentialStorePort):
    """
    Redis-backed credential storage.

    Lets several client processes on one host share a sign-in. Pair writes
    and clears run inside a MULTI/EXEC transaction.
    """

    def __init__(
        self,
        redis_client=None,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "clinical:auth_",
    ):
        """
        Initialize Redis credential store.

        Args:
            redis_client: redis.asyncio.Redis instance (created from redis_url if None)
            redis_url: Connection URL used when no client is passed
            prefix: Key prefix for the three stored keys
        """
        super().__init__(prefix)
        self._redis = redis_client
        self._redis_url = redis_url

    def _get_redis(self):
        """Lazy load Redis client."""
        if self._redis is None:
            import redis.asyncio as redis
            self._redis = redis.from_url(self._redis_url, decode_responses=True)
        return self._redis

    async def save(self, access_token: str, refresh_token: str) -> None:
        redis = self._get_redis()
        async with redis.pipeline(transaction=True) as pipe:
            pipe.set(self._key(ACCESS_TOKEN_KEY), access_token)
            pipe.set(self._key(REFRESH_TOKEN_KEY), refresh_token)
            await pipe.execute()

    async def access_token(self) -> Optional[str]:
        return await self._get_redis().get(self._key(ACCESS_TOKEN_KEY))

    async def refresh_token(self) -> Optional[str]:
        return await self._get_redis().get(self._key(REFRESH_TOKEN_KEY))

    async def save_user(self, user: UserProfile) -> None:
        await self._get_redis().set(self._key(USER_KEY), json.dumps(user.to_dict()))

    async def user(self) -> Optional[UserProfile]:
        data = await self._get_redis().get(self._key(USER_KEY))
        if not data:
            return None

        try:
            return UserProfile.from_dict(json.loads(data))
        except (json.JSONDecodeError, KeyError, ValueError, TypeError):
            return None

    async def clear(self) -> None:
        redis = self._get_redis()
        async with redis.pipeline(transaction=True) as pipe:
            pipe.delete(
                self._key(ACCESS_TOKEN_KEY),
                self._key(REFRESH_TOKEN_KEY),
                self._key(USER_KEY),
            )
            await pipe.execute()

    async def close(self) -> None:
        """Close the underlying connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
