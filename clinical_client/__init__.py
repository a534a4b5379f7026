"""
Clinical Client - Session & Request Resilience for the clinical API

Hexagonal layout: domain models, a credential store port with adapters,
and an SDK layer owning login, refresh and authenticated requests.

Usage:
    from clinical_client import ClinicalClient
    from clinical_client.adapters import FileCredentialStore

    client = ClinicalClient(store=FileCredentialStore("~/.clinical/creds.json"))

    # Authenticate
    await client.login("doctor@example.com", "secret")

    # Call a protected endpoint; expired tokens are refreshed once
    note = await client.visit_notes.generate("P001", request)
"""

__version__ = "0.1.0"

from clinical_client.sdk.client import ClinicalClient
from clinical_client.sdk.session_manager import SessionManager, LoginResult
from clinical_client.sdk.request_client import ResilientRequestClient
from clinical_client.domain.user import UserProfile, UserRole, AccountKind
from clinical_client.domain.session import Session, SessionState
from clinical_client.domain.credential import Credential
from clinical_client.services.validation import UploadFile

__all__ = [
    "ClinicalClient",
    "SessionManager",
    "LoginResult",
    "ResilientRequestClient",
    "UserProfile",
    "UserRole",
    "AccountKind",
    "Session",
    "SessionState",
    "Credential",
    "UploadFile",
]
