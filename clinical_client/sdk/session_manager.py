"""
Session Manager - Owns the credential lifecycle.

Login, logout, refresh and profile lookup. The only writer of the
credential store.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Set

import httpx
import structlog

from clinical_client.domain.credential import Credential
from clinical_client.domain.session import Session, SessionState
from clinical_client.domain.user import AccountKind, UserProfile
from clinical_client.errors import LoginError
from clinical_client.ports.credential_store_port import CredentialStorePort
from clinical_client.sdk.transport import (
    TimeoutTypes,
    bearer,
    error_message,
    issue_request,
    timeout_arg,
)

logger = structlog.get_logger(__name__)

# /auth/me is tried at most twice: once, and once more after a refresh.
_ME_ATTEMPTS = 2

_LOGIN_ROUTES = {
    AccountKind.PROVIDER: ("/auth/login", "email", "Invalid email or password"),
    AccountKind.PATIENT: ("/auth/patient/login", "patientId", "Invalid Patient ID or password"),
}


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a successful login."""
    user: UserProfile
    credential: Credential


class SessionManager:
    """
    Credential lifecycle over the states anonymous, authenticated and
    refreshing.

    Refresh is single-flight: while one refresh call is in flight every
    other caller awaits that same call instead of issuing its own.

    Example:
        manager = SessionManager(store=MemoryCredentialStore(), http=http)
        await manager.login("doc@example.com", "secret")
        user = await manager.current_user()
        await manager.logout()
    """

    def __init__(
        self,
        store: CredentialStorePort,
        http: httpx.AsyncClient,
        timeout: TimeoutTypes = None,
    ):
        """
        Initialize session manager.

        Args:
            store: Credential store (exclusively owned from here on)
            http: Client configured with the API base URL
            timeout: Default timeout for auth calls (client default if None)
        """
        self._store = store
        self._http = http
        self._timeout = timeout
        self._refresh_task: Optional[asyncio.Task] = None
        self._background: Set[asyncio.Task] = set()

    # ── Read side ───────────────────────────────────────────────────────────

    @property
    def refreshing(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    async def access_token(self) -> Optional[str]:
        return await self._store.access_token()

    async def credential(self) -> Optional[Credential]:
        access_token = await self._store.access_token()
        refresh_token = await self._store.refresh_token()
        if not access_token or not refresh_token:
            return None
        return Credential(access_token=access_token, refresh_token=refresh_token)

    async def is_authenticated(self) -> bool:
        return bool(await self._store.access_token())

    async def cached_user(self) -> Optional[UserProfile]:
        """Last cached profile, without a network call."""
        return await self._store.user()

    async def session(self) -> Session:
        """Compose a snapshot of the current session from the store."""
        credential = await self.credential()
        user = await self._store.user() if credential else None

        if self.refreshing:
            state = SessionState.REFRESHING
        elif credential:
            state = SessionState.AUTHENTICATED
        else:
            state = SessionState.ANONYMOUS

        return Session(state=state, credential=credential, user=user)

    # ── Login / logout ──────────────────────────────────────────────────────

    async def login(
        self,
        identity: str,
        secret: str,
        kind: AccountKind = AccountKind.PROVIDER,
    ) -> LoginResult:
        """
        Sign in a provider (email) or a patient (patient ID).

        Args:
            identity: Email for providers, patient ID for patients
            secret: Password
            kind: Which login endpoint to use

        Returns:
            LoginResult with the stored credential and profile

        Raises:
            LoginError: Backend rejected the login (store untouched)
            BackendUnreachableError: Backend could not be reached
        """
        path, identity_field, default_message = _LOGIN_ROUTES[kind]

        response = await issue_request(
            self._http,
            "POST",
            path,
            timeout=self._timeout,
            json={identity_field: identity, "password": secret},
        )

        if response.is_error:
            message = error_message(response, default_message, fields=("message",))
            logger.warning("login_failed", kind=kind.value, status=response.status_code)
            raise LoginError(message, response.status_code)

        try:
            data = response.json()
            credential = Credential.from_dict(data)
            user = UserProfile.from_dict(data["user"])
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error("login_response_malformed", kind=kind.value)
            raise LoginError("Malformed login response", response.status_code) from exc

        await self._store.save(credential.access_token, credential.refresh_token)
        await self._store.save_user(user)

        logger.info("login_succeeded", kind=kind.value, user_id=user.id, role=user.role.value)
        return LoginResult(user=user, credential=credential)

    async def logout(self) -> None:
        """
        End the session locally and tell the backend in the background.

        Never raises for backend failures; the local store is always cleared.
        """
        token = await self._store.access_token()
        await self._store.clear()
        logger.info("logged_out", had_token=bool(token))

        if token:
            task = asyncio.ensure_future(self._notify_logout(token))
            self._background.add(task)
            task.add_done_callback(self._background.discard)

    async def _notify_logout(self, token: str) -> None:
        try:
            response = await self._http.post(
                "/auth/logout",
                headers=bearer(token),
                timeout=timeout_arg(self._timeout),
            )
        except httpx.HTTPError as exc:
            logger.warning("logout_notify_failed", error=type(exc).__name__)
            return

        if response.is_error:
            logger.warning("logout_notify_rejected", status=response.status_code)

    async def expire(self, stale_token: Optional[str] = None) -> None:
        """
        Force the session to end (global sign-out).

        Args:
            stale_token: Access token that was rejected. If given and the
                store already holds a different token, a newer sign-in
                replaced it and is left alone.
        """
        if stale_token is not None and await self._store.access_token() != stale_token:
            logger.info("expire_skipped", reason="credential_replaced")
            return

        await self._store.clear()
        logger.warning("session_expired")

    async def aclose(self) -> None:
        """Wait for pending background logout notifications."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ── Profile ─────────────────────────────────────────────────────────────

    async def current_user(self) -> Optional[UserProfile]:
        """
        Fetch the signed-in profile from ``/auth/me``.

        A 401 triggers one refresh and one more attempt. A second 401 ends
        the session. Any other failure falls back to the cached profile.

        Returns:
            Fresh profile, cached profile, or None
        """
        for attempt in range(_ME_ATTEMPTS):
            token = await self._store.access_token()
            if not token:
                return None

            try:
                response = await self._http.get(
                    "/auth/me",
                    headers=bearer(token),
                    timeout=timeout_arg(self._timeout),
                )
            except httpx.HTTPError as exc:
                logger.warning("current_user_fetch_failed", error=type(exc).__name__)
                return await self._store.user()

            if response.status_code == 401:
                if attempt + 1 >= _ME_ATTEMPTS:
                    logger.warning("current_user_rejected_after_refresh")
                    await self.expire(stale_token=token)
                    return None
                if not await self.refresh(stale_token=token):
                    return await self._store.user()
                continue

            if response.is_error:
                logger.warning("current_user_fetch_failed", status=response.status_code)
                return await self._store.user()

            try:
                user = UserProfile.from_dict(response.json())
            except (ValueError, KeyError, TypeError, AttributeError):
                logger.warning("current_user_malformed")
                return await self._store.user()

            await self._store.save_user(user)
            return user

        return None

    # ── Refresh ─────────────────────────────────────────────────────────────

    async def refresh(self, stale_token: Optional[str] = None) -> bool:
        """
        Exchange the refresh token for a new access token.

        Args:
            stale_token: Access token the caller saw rejected. If the store
                already holds a different token, the rotation has happened
                and no call is made.

        Returns:
            True if a usable access token is now stored. False if the
            session could not be refreshed; the store has then been cleared,
            except when there was no refresh token to begin with or a newer
            sign-in replaced the credential while the call was in flight.
        """
        if stale_token is not None:
            current = await self._store.access_token()
            if current is not None and current != stale_token:
                return True

        # No suspension point between the check and the assignment.
        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.ensure_future(self._refresh())
            self._refresh_task = task

        return await asyncio.shield(task)

    async def _refresh(self) -> bool:
        refresh_token = await self._store.refresh_token()
        if not refresh_token:
            logger.info("refresh_skipped", reason="no_refresh_token")
            return False
        access_token = await self._store.access_token()

        logger.info("refresh_started")
        try:
            response = await self._http.post(
                "/auth/refresh",
                json={"refreshToken": refresh_token},
                timeout=timeout_arg(self._timeout),
            )
        except httpx.HTTPError as exc:
            logger.warning("refresh_failed", error=type(exc).__name__)
            return await self._refresh_failed(access_token, refresh_token)

        if response.is_error:
            logger.warning("refresh_failed", status=response.status_code)
            return await self._refresh_failed(access_token, refresh_token)

        try:
            data = response.json()
            new_access_token = data["accessToken"]
        except (ValueError, KeyError, TypeError):
            new_access_token = None
        if not isinstance(new_access_token, str) or not new_access_token:
            logger.warning("refresh_failed", reason="malformed_response")
            return await self._refresh_failed(access_token, refresh_token)

        # Logout or a new login landed while the call was in flight.
        if not await self._holds(access_token, refresh_token):
            logger.info("refresh_discarded")
            return await self._store.access_token() is not None

        # Rotate the refresh token only when the backend issued a new one.
        new_refresh_token = data.get("refreshToken")
        rotated = isinstance(new_refresh_token, str) and bool(new_refresh_token)
        await self._store.save(new_access_token, new_refresh_token if rotated else refresh_token)

        logger.info("refresh_succeeded", refresh_token_rotated=rotated)
        return True

    async def _holds(self, access_token: Optional[str], refresh_token: str) -> bool:
        """True if the store still holds the credential a refresh started from."""
        return (
            await self._store.refresh_token() == refresh_token
            and await self._store.access_token() == access_token
        )

    async def _refresh_failed(self, access_token: Optional[str], refresh_token: str) -> bool:
        # Only the credential that failed to refresh is destroyed.
        if await self._holds(access_token, refresh_token):
            await self._store.clear()
        else:
            logger.info("refresh_failure_ignored", reason="credential_replaced")
        return False
