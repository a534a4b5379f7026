"""
Adapters - Implementations of ports.

Credential Storage:
- MemoryCredentialStore: In-process storage (default, testing)
- FileCredentialStore: JSON file on local disk
- RedisCredentialStore: Redis keys, shareable between processes
"""

from clinical_client.adapters.memory_store import MemoryCredentialStore
from clinical_client.adapters.file_store import FileCredentialStore
from clinical_client.adapters.redis_store import RedisCredentialStore
from clinical_client.config import Settings, get_settings
from clinical_client.ports.credential_store_port import CredentialStorePort

__all__ = [
    "MemoryCredentialStore",
    "FileCredentialStore",
    "RedisCredentialStore",
    "build_store",
]


def build_store(settings: Settings = None) -> CredentialStorePort:
    """Create the credential store selected by ``settings.storage_backend``."""
    settings = settings or get_settings()

    if settings.storage_backend == "file":
        return FileCredentialStore(settings.storage_path, prefix=settings.storage_prefix)
    if settings.storage_backend == "redis":
        return RedisCredentialStore(
            redis_url=settings.redis_url,
            prefix=f"clinical:{settings.storage_prefix}",
        )
    return MemoryCredentialStore(prefix=settings.storage_prefix)
