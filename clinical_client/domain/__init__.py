"""
Domain Models - Pure business entities.

No infrastructure dependencies. Domain logic only.
"""

from clinical_client.domain.user import UserProfile, UserRole, AccountKind
from clinical_client.domain.session import Session, SessionState
from clinical_client.domain.credential import Credential

__all__ = [
    "UserProfile",
    "UserRole",
    "AccountKind",
    "Session",
    "SessionState",
    "Credential",
]
