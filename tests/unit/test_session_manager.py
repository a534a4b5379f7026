"""
Unit tests for SessionManager against the fake backend.
"""

import asyncio
import json

import httpx
import pytest

from clinical_client.domain.session import SessionState
from clinical_client.domain.user import AccountKind, UserRole
from clinical_client.errors import BackendUnreachableError, LoginError
from clinical_client.sdk.session_manager import SessionManager


@pytest.fixture
def manager(store, http):
    return SessionManager(store=store, http=http)


class TestLogin:

    @pytest.mark.asyncio
    async def test_provider_login_persists_credential_and_profile(self, manager, store, backend):
        result = await manager.login("doctor@example.com", "secret")

        assert result.user.id == "u-1"
        assert result.user.role == UserRole.DOCTOR
        assert await store.access_token() == backend.valid_access
        assert await store.refresh_token() == "refresh-1"
        assert (await store.user()).id == "u-1"

        request = backend.last_requests["POST /auth/login"]
        assert json.loads(request.content) == {"email": "doctor@example.com", "password": "secret"}

    @pytest.mark.asyncio
    async def test_patient_login_uses_patient_endpoint(self, manager, backend):
        result = await manager.login("PAT-001", "secret", kind=AccountKind.PATIENT)

        assert backend.calls["POST /auth/patient/login"] == 1
        assert backend.calls["POST /auth/login"] == 0
        assert result.user.account_kind == AccountKind.PATIENT
        assert result.user.patient_link_id == "PAT-001"

    @pytest.mark.asyncio
    async def test_failed_login_surfaces_server_message(self, manager, store):
        """401 with {message: "Invalid credentials"} → that message, empty store."""
        with pytest.raises(LoginError) as exc_info:
            await manager.login("doctor@example.com", "wrong")

        assert exc_info.value.message == "Invalid credentials"
        assert exc_info.value.status_code == 401
        assert await store.access_token() is None
        assert await store.refresh_token() is None

    @pytest.mark.asyncio
    async def test_failed_login_default_message(self, manager):
        """No message in the body → generic message for the account kind."""
        with pytest.raises(LoginError) as exc_info:
            await manager.login("PAT-404", "secret", kind=AccountKind.PATIENT)

        assert exc_info.value.message == "Invalid Patient ID or password"

    @pytest.mark.asyncio
    async def test_login_when_backend_down(self, store):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(
            base_url="http://test/api", transport=httpx.MockTransport(refuse)
        ) as http:
            manager = SessionManager(store=store, http=http)
            with pytest.raises(BackendUnreachableError):
                await manager.login("doctor@example.com", "secret")

        assert await store.access_token() is None

    @pytest.mark.asyncio
    async def test_malformed_login_response(self, manager, backend, store):
        backend.responses["POST /auth/login"] = (200, {"success": True})

        with pytest.raises(LoginError):
            await manager.login("doctor@example.com", "secret")

        assert await store.access_token() is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user", ["u-1", ["u-1"], None])
    async def test_login_user_not_an_object(self, manager, backend, store, user):
        backend.responses["POST /auth/login"] = (
            200, {"accessToken": "access-9", "refreshToken": "refresh-9", "user": user}
        )

        with pytest.raises(LoginError):
            await manager.login("doctor@example.com", "secret")

        assert await store.access_token() is None


class TestLogout:

    @pytest.mark.asyncio
    async def test_logout_clears_and_notifies(self, manager, store, backend):
        await manager.login("doctor@example.com", "secret")

        await manager.logout()
        await manager.aclose()

        assert await store.access_token() is None
        assert await store.user() is None
        assert backend.calls["POST /auth/logout"] == 1

    @pytest.mark.asyncio
    async def test_logout_twice(self, manager, store, backend):
        """Second logout is a no-op and raises nothing."""
        await manager.login("doctor@example.com", "secret")

        await manager.logout()
        assert await store.access_token() is None

        await manager.logout()
        assert await store.access_token() is None

        await manager.aclose()
        assert backend.calls["POST /auth/logout"] == 1

    @pytest.mark.asyncio
    async def test_logout_survives_backend_failure(self, manager, store, backend):
        await manager.login("doctor@example.com", "secret")
        backend.logout_status = 500

        await manager.logout()
        await manager.aclose()

        assert await store.access_token() is None

    @pytest.mark.asyncio
    async def test_logout_survives_unreachable_backend(self, store):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        await store.save("access-1", "refresh-1")
        async with httpx.AsyncClient(
            base_url="http://test/api", transport=httpx.MockTransport(refuse)
        ) as http:
            manager = SessionManager(store=store, http=http)
            await manager.logout()
            await manager.aclose()

        assert await store.access_token() is None


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_same_identity_after_login(self, manager, backend):
        await manager.login("doctor@example.com", "secret")

        user = await manager.current_user()

        assert user.id == "u-1"
        assert user.last_login_at is not None
        assert backend.calls["POST /auth/login"] == 1

    @pytest.mark.asyncio
    async def test_no_token(self, manager, backend):
        assert await manager.current_user() is None
        assert backend.calls["GET /auth/me"] == 0

    @pytest.mark.asyncio
    async def test_refreshes_once_on_401(self, manager, backend, store):
        await manager.login("doctor@example.com", "secret")
        backend.expire_access()

        user = await manager.current_user()

        assert user.id == "u-1"
        assert backend.calls["POST /auth/refresh"] == 1
        assert backend.calls["GET /auth/me"] == 2
        assert await store.access_token() == backend.valid_access

    @pytest.mark.asyncio
    async def test_second_401_ends_session(self, manager, backend, store):
        """Refresh works but the new token is rejected too: stop, never loop."""
        await manager.login("doctor@example.com", "secret")
        backend.responses["GET /auth/me"] = (401, {"message": "Invalid token"})

        assert await manager.current_user() is None
        assert backend.calls["GET /auth/me"] == 2
        assert backend.calls["POST /auth/refresh"] == 1
        assert await store.access_token() is None

    @pytest.mark.asyncio
    async def test_refresh_failure_returns_nothing(self, manager, backend, store):
        await manager.login("doctor@example.com", "secret")
        backend.expire_access()
        backend.refresh_fails = True

        assert await manager.current_user() is None
        assert await store.access_token() is None

    @pytest.mark.asyncio
    async def test_server_error_falls_back_to_cache(self, manager, backend):
        await manager.login("doctor@example.com", "secret")
        backend.me_status = 500

        user = await manager.current_user()

        assert user is not None
        assert user.id == "u-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [["u-1"], "u-1"])
    async def test_non_object_body_falls_back_to_cache(self, manager, backend, body):
        await manager.login("doctor@example.com", "secret")
        backend.responses["GET /auth/me"] = (200, body)

        user = await manager.current_user()

        assert user.id == "u-1"


class TestRefresh:

    @pytest.mark.asyncio
    async def test_no_refresh_token_makes_no_call(self, manager, backend):
        assert await manager.refresh() is False
        assert backend.calls["POST /auth/refresh"] == 0

    @pytest.mark.asyncio
    async def test_refresh_keeps_refresh_token(self, manager, backend, store):
        await manager.login("doctor@example.com", "secret")
        old_access = await store.access_token()

        assert await manager.refresh() is True

        assert await store.access_token() != old_access
        assert await store.refresh_token() == "refresh-1"

    @pytest.mark.asyncio
    async def test_refresh_stores_rotated_refresh_token(self, manager, backend, store):
        await manager.login("doctor@example.com", "secret")
        backend.rotate_refresh_token = True

        assert await manager.refresh() is True

        assert await store.refresh_token() == backend.refresh_token
        assert await store.refresh_token() != "refresh-1"

    @pytest.mark.asyncio
    async def test_refresh_failure_clears_everything(self, manager, backend, store):
        await manager.login("doctor@example.com", "secret")
        backend.refresh_fails = True

        assert await manager.refresh() is False

        assert await store.access_token() is None
        assert await store.refresh_token() is None
        assert await store.user() is None

    @pytest.mark.asyncio
    async def test_malformed_refresh_response_fails_closed(self, manager, backend, store):
        await manager.login("doctor@example.com", "secret")
        backend.responses["POST /auth/refresh"] = (200, {"success": True})

        assert await manager.refresh() is False
        assert await store.access_token() is None

    @pytest.mark.asyncio
    async def test_failure_after_relogin_keeps_new_credential(self, manager, backend, store):
        await manager.login("doctor@example.com", "secret")
        backend.refresh_fails = True
        backend.refresh_delay = 0.05

        pending = asyncio.ensure_future(manager.refresh())
        await asyncio.sleep(0.01)
        await manager.logout()
        result = await manager.login("doctor@example.com", "secret")

        assert await pending is False
        await manager.aclose()
        assert await store.access_token() == result.credential.access_token

    @pytest.mark.asyncio
    async def test_expire_skips_replaced_credential(self, manager, store):
        await store.save("access-2", "refresh-2")

        await manager.expire(stale_token="access-1")
        assert await store.access_token() == "access-2"

        await manager.expire(stale_token="access-2")
        assert await store.access_token() is None

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_share_one_call(self, manager, backend):
        await manager.login("doctor@example.com", "secret")
        backend.refresh_delay = 0.05

        results = await asyncio.gather(*(manager.refresh() for _ in range(5)))

        assert results == [True] * 5
        assert backend.calls["POST /auth/refresh"] == 1

    @pytest.mark.asyncio
    async def test_stale_token_skips_network(self, manager, backend, store):
        """A caller holding an already-rotated token just picks up the new one."""
        await manager.login("doctor@example.com", "secret")
        stale = await store.access_token()
        await manager.refresh()

        assert await manager.refresh(stale_token=stale) is True
        assert backend.calls["POST /auth/refresh"] == 1

    @pytest.mark.asyncio
    async def test_refreshing_state_visible(self, manager, backend):
        await manager.login("doctor@example.com", "secret")
        backend.refresh_delay = 0.05

        pending = asyncio.ensure_future(manager.refresh())
        await asyncio.sleep(0.01)
        assert (await manager.session()).state == SessionState.REFRESHING

        assert await pending is True
        assert (await manager.session()).state == SessionState.AUTHENTICATED

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_refresh(self, manager, backend, store):
        await manager.login("doctor@example.com", "secret")
        old_access = await store.access_token()
        backend.refresh_delay = 0.05

        waiter = asyncio.ensure_future(manager.refresh())
        survivor = asyncio.ensure_future(manager.refresh())
        await asyncio.sleep(0.01)
        waiter.cancel()

        assert await survivor is True
        assert await store.access_token() != old_access
        assert backend.calls["POST /auth/refresh"] == 1


@pytest.mark.asyncio
async def test_session_snapshot(manager):
    anonymous = await manager.session()
    assert anonymous.state == SessionState.ANONYMOUS
    assert anonymous.user is None

    await manager.login("doctor@example.com", "secret")

    snapshot = await manager.session()
    assert snapshot.state == SessionState.AUTHENTICATED
    assert snapshot.user.id == "u-1"
    assert await manager.is_authenticated()
