"""
Shared fixtures: an in-process fake of the clinical backend.
"""

import asyncio
import json
from collections import Counter
from typing import Any, Dict, Optional

import httpx
import pytest
import pytest_asyncio

from clinical_client.adapters import MemoryCredentialStore
from clinical_client.config import Settings
from clinical_client.sdk.client import ClinicalClient

BASE_URL = "http://test/api"

DOCTOR = {
    "id": "u-1",
    "email": "doctor@example.com",
    "name": "Dr. Rivera",
    "role": "doctor",
    "userType": "provider",
}

PATIENT = {
    "id": "p-1",
    "email": None,
    "name": "Sam Lee",
    "role": "patient",
    "patientId": "PAT-001",
    "userType": "patient",
}


class FakeBackend:
    """
    Minimal stand-in for the backend, mounted through httpx.MockTransport.

    Access tokens are issued as ``access-<n>``; only the newest one is
    accepted. ``calls`` counts requests per "METHOD /path".
    """

    def __init__(self):
        self.calls: Counter = Counter()
        self.valid_access: Optional[str] = None
        self.refresh_token = "refresh-1"
        self.issued = 0
        self.refresh_fails = False
        self.refresh_delay = 0.0
        self.rotate_refresh_token = False
        self.me_status: Optional[int] = None
        self.logout_status = 200
        self.resource_payload: Dict[str, Any] = {"ok": True}
        self.responses: Dict[str, tuple] = {}
        self.last_requests: Dict[str, httpx.Request] = {}

    def issue_access(self) -> str:
        self.issued += 1
        self.valid_access = f"access-{self.issued}"
        return self.valid_access

    def expire_access(self) -> None:
        """Invalidate the current access token without issuing a new one."""
        self.valid_access = None

    def _authorized(self, request: httpx.Request) -> bool:
        header = request.headers.get("Authorization", "")
        return self.valid_access is not None and header == f"Bearer {self.valid_access}"

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path[len("/api"):]
        key = f"{request.method} {path}"
        self.calls[key] += 1
        self.last_requests[key] = request

        if key in self.responses:
            status, body = self.responses[key]
            return httpx.Response(status, json=body)

        if key == "GET /health":
            return httpx.Response(200, json={"status": "ok"})

        if key == "POST /auth/login":
            body = json.loads(request.content)
            if body.get("password") != "secret":
                return httpx.Response(
                    401, json={"error": "Unauthorized", "message": "Invalid credentials"}
                )
            return self._login_response(DOCTOR)

        if key == "POST /auth/patient/login":
            body = json.loads(request.content)
            if body.get("patientId") != "PAT-001" or body.get("password") != "secret":
                return httpx.Response(401, json={"error": "Unauthorized"})
            return self._login_response(PATIENT)

        if key == "POST /auth/refresh":
            if self.refresh_delay:
                await asyncio.sleep(self.refresh_delay)
            body = json.loads(request.content)
            if self.refresh_fails or body.get("refreshToken") != self.refresh_token:
                return httpx.Response(
                    401, json={"error": "Unauthorized", "message": "Invalid or expired refresh token"}
                )
            payload = {"success": True, "accessToken": self.issue_access()}
            if self.rotate_refresh_token:
                self.refresh_token = f"refresh-{self.issued}"
                payload["refreshToken"] = self.refresh_token
            return httpx.Response(200, json=payload)

        if not self._authorized(request):
            return httpx.Response(
                401, json={"error": "Unauthorized", "message": "Invalid token"}
            )

        if key == "POST /auth/logout":
            return httpx.Response(self.logout_status, json={"success": True})

        if key == "GET /auth/me":
            if self.me_status:
                return httpx.Response(self.me_status, json={"message": "boom"})
            return httpx.Response(200, json={**DOCTOR, "lastLogin": "2026-10-01T09:30:00Z"})

        return httpx.Response(200, json=self.resource_payload)

    def _login_response(self, user: Dict[str, Any]) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "success": True,
                "user": user,
                "accessToken": self.issue_access(),
                "refreshToken": self.refresh_token,
            },
        )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def settings():
    return Settings(
        api_base_url=BASE_URL,
        storage_backend="memory",
        request_timeout=5.0,
    )


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest_asyncio.fixture
async def http(backend):
    async with httpx.AsyncClient(
        base_url=BASE_URL,
        transport=httpx.MockTransport(backend.handler),
    ) as client:
        yield client


@pytest_asyncio.fixture
async def client(backend, settings, store):
    async with ClinicalClient(
        settings=settings,
        store=store,
        transport=httpx.MockTransport(backend.handler),
    ) as clinical:
        yield clinical
