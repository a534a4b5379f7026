"""
Clinical Client - High-level SDK for the clinical API.

Wires the credential store, session manager, request client and domain
clients around one shared HTTP connection pool.
"""

from typing import Optional, Any

import httpx
import structlog

from clinical_client.adapters import build_store
from clinical_client.config import Settings, get_settings
from clinical_client.domain.user import AccountKind, UserProfile
from clinical_client.ports.credential_store_port import CredentialStorePort
from clinical_client.sdk.request_client import ResilientRequestClient
from clinical_client.sdk.session_manager import LoginResult, SessionManager
from clinical_client.services.health import check_health
from clinical_client.services.prescriptions import PrescriptionClient
from clinical_client.services.reports import ReportClient
from clinical_client.services.symptoms import SymptomClient
from clinical_client.services.validation import UploadValidator
from clinical_client.services.visit_notes import VisitNoteClient

logger = structlog.get_logger(__name__)


class ClinicalClient:
    """
    High-level client combining sessions, resilient requests and the
    clinical endpoints.

    Example:
        from clinical_client import ClinicalClient

        async with ClinicalClient() as client:
            await client.login("doctor@example.com", "secret")
            analysis = await client.reports.upload_and_analyze(
                "P001", UploadFile.from_path("cbc.pdf")
            )
            await client.logout()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[CredentialStorePort] = None,
        http: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize clinical client.

        Args:
            settings: Settings (process settings if None)
            store: Credential store (built from settings if None)
            http: Pre-configured AsyncClient; must carry the API base URL
            transport: Transport for the internally created AsyncClient
        """
        self._settings = settings or get_settings()
        self._store = store or build_store(self._settings)
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=self._settings.api_base_url,
            timeout=self._settings.request_timeout,
            transport=transport,
        )

        self.session = SessionManager(store=self._store, http=self._http)
        self.requests = ResilientRequestClient(
            session=self.session,
            http=self._http,
            proactive_refresh=self._settings.proactive_refresh,
            token_leeway=self._settings.token_leeway_seconds,
        )

        validator = UploadValidator(max_file_size=self._settings.max_upload_bytes)
        self.reports = ReportClient(self.requests, validator=validator, health_probe=self.health)
        self.prescriptions = PrescriptionClient(self.requests, validator=validator)
        self.symptoms = SymptomClient(self.requests)
        self.visit_notes = VisitNoteClient(self.requests)

    # ── Lifecycle ────────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        """Flush background work and close the connection pool."""
        await self.session.aclose()
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "ClinicalClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    # ── Shortcuts ────────────────────────────────────────────────────────────

    async def login(
        self,
        identity: str,
        secret: str,
        kind: AccountKind = AccountKind.PROVIDER,
    ) -> LoginResult:
        return await self.session.login(identity, secret, kind)

    async def patient_login(self, patient_id: str, secret: str) -> LoginResult:
        return await self.session.login(patient_id, secret, AccountKind.PATIENT)

    async def logout(self) -> None:
        await self.session.logout()

    async def current_user(self) -> Optional[UserProfile]:
        return await self.session.current_user()

    async def health(self, timeout: Optional[float] = None) -> bool:
        """Liveness probe against ``/health``."""
        if timeout is None:
            timeout = self._settings.health_timeout
        return await check_health(self._http, timeout=timeout)
