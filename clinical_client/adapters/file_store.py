"""
File Credential Store - JSON file on local disk.

The local-storage analogue: survives restarts of the client process on the
same machine. Every write replaces the whole file atomically.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Dict, Any, Tuple, Union
from clinical_client.ports.credential_store_port import (
    CredentialStorePort,
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    USER_KEY,
)
from clinical_client.domain.user import UserProfile


class FileCredentialStore(CredentialStorePort):
    """
    File-backed credential storage.

    Stored as one JSON object keyed by the namespaced key names. The file is
    created with owner-only permissions. Disk I/O runs in a worker thread;
    writers are serialized so concurrent updates are not lost.
    """

    def __init__(self, path: Union[str, Path], prefix: str = "auth_"):
        """
        Initialize file store.

        Args:
            path: Location of the JSON file (parent directories are created)
            prefix: Key prefix inside the file
        """
        super().__init__(prefix)
        self._path = Path(path).expanduser()
        self._lock = asyncio.Lock()

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self._path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=".cred-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _update(self, values: Dict[str, Any], remove: Tuple[str, ...] = ()) -> None:
        """Read-modify-write of the whole file; runs in a worker thread."""
        data = self._read()
        data.update(values)
        for key in remove:
            data.pop(key, None)

        if data:
            self._write(data)
        elif self._path.exists():
            self._path.unlink()

    async def _get(self, name: str) -> Any:
        return (await asyncio.to_thread(self._read)).get(self._key(name))

    async def save(self, access_token: str, refresh_token: str) -> None:
        values = {
            self._key(ACCESS_TOKEN_KEY): access_token,
            self._key(REFRESH_TOKEN_KEY): refresh_token,
        }
        async with self._lock:
            await asyncio.to_thread(self._update, values)

    async def access_token(self) -> Optional[str]:
        return await self._get(ACCESS_TOKEN_KEY)

    async def refresh_token(self) -> Optional[str]:
        return await self._get(REFRESH_TOKEN_KEY)

    async def save_user(self, user: UserProfile) -> None:
        async with self._lock:
            await asyncio.to_thread(self._update, {self._key(USER_KEY): user.to_dict()})

    async def user(self) -> Optional[UserProfile]:
        raw = await self._get(USER_KEY)
        if not raw:
            return None
        try:
            return UserProfile.from_dict(raw)
        except (KeyError, ValueError, TypeError, AttributeError):
            return None

    async def clear(self) -> None:
        keys = tuple(self._key(name) for name in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY))
        async with self._lock:
            await asyncio.to_thread(self._update, {}, keys)
