"""
Resilient Request Client - Authenticated requests with one retry across a
token refresh.
"""

from typing import Any, Dict, Mapping, Optional

import httpx
import structlog

from clinical_client.errors import AuthenticationError, SessionExpiredError
from clinical_client.sdk.session_manager import SessionManager
from clinical_client.sdk.transport import TimeoutTypes, issue_request

logger = structlog.get_logger(__name__)


class ResilientRequestClient:
    """
    Sends requests with the current bearer token.

    On a 401 the session manager refreshes the token (single-flight) and the
    identical request is sent once more. Whatever the retry returns is
    handed back as-is. If the refresh fails the session is ended and
    SessionExpiredError is raised.

    Upload bodies must be bytes, not open files, so the retry can resend
    them.
    """

    def __init__(
        self,
        session: SessionManager,
        http: httpx.AsyncClient,
        timeout: TimeoutTypes = None,
        proactive_refresh: bool = True,
        token_leeway: int = 30,
    ):
        """
        Initialize request client.

        Args:
            session: Session manager owning the credential
            http: Client configured with the API base URL
            timeout: Default per-request timeout (client default if None)
            proactive_refresh: Refresh before sending when the access token
                is a JWT already past its expiry
            token_leeway: Seconds before ``exp`` at which a JWT counts as expired
        """
        self._session = session
        self._http = http
        self._timeout = timeout
        self._proactive_refresh = proactive_refresh
        self._token_leeway = token_leeway

    @property
    def session(self) -> SessionManager:
        return self._session

    async def send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        data: Optional[Mapping[str, Any]] = None,
        files: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: TimeoutTypes = None,
    ) -> httpx.Response:
        """
        Send an authenticated request.

        Args:
            method: HTTP method
            url: Path relative to the API base URL, or an absolute URL
            params: Query parameters
            json: JSON body
            data: Form fields (sent alongside ``files``)
            files: Multipart files as ``{field: (name, bytes, content_type)}``
            headers: Extra headers; Authorization and Content-Type are overridden
            timeout: Per-request timeout

        Returns:
            The response of the original request, or of its single retry

        Raises:
            AuthenticationError: No access token is stored
            SessionExpiredError: Token rejected and refresh failed
            BackendUnreachableError: Transport failure
        """
        token = await self._session.access_token()
        if not token:
            raise AuthenticationError()

        if self._proactive_refresh:
            token = await self._ensure_fresh(token)

        request_kwargs: Dict[str, Any] = {
            "params": params,
            "json": json,
            "data": data,
            "files": files,
        }
        timeout = self._timeout if timeout is None else timeout

        response = await issue_request(
            self._http,
            method,
            url,
            timeout=timeout,
            headers=self._headers(headers, token, multipart=files is not None),
            **request_kwargs,
        )
        if response.status_code != 401:
            return response

        logger.info("access_token_rejected", method=method, url=url)
        await response.aclose()

        new_token = await self._rotate(token)

        return await issue_request(
            self._http,
            method,
            url,
            timeout=timeout,
            headers=self._headers(headers, new_token, multipart=files is not None),
            **request_kwargs,
        )

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.send("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.send("POST", url, **kwargs)

    async def _ensure_fresh(self, token: str) -> str:
        credential = await self._session.credential()
        if credential is None or not credential.is_access_expired(self._token_leeway):
            return token

        logger.info("access_token_expired_locally")
        return await self._rotate(token)

    async def _rotate(self, stale_token: str) -> str:
        """Refresh past ``stale_token`` or end the session."""
        if await self._session.refresh(stale_token=stale_token):
            new_token = await self._session.access_token()
            if new_token:
                return new_token

        await self._session.expire(stale_token=stale_token)
        raise SessionExpiredError()

    @staticmethod
    def _headers(
        headers: Optional[Mapping[str, str]],
        token: str,
        multipart: bool = False,
    ) -> httpx.Headers:
        merged = httpx.Headers(headers)
        merged["Authorization"] = f"Bearer {token}"
        if multipart:
            # httpx writes the multipart boundary header itself.
            merged.pop("Content-Type", None)
        else:
            merged["Content-Type"] = "application/json"
        return merged
