"""
Session Domain Model - Read-time view of the signed-in state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional

from clinical_client.domain.credential import Credential
from clinical_client.domain.user import UserProfile


class SessionState(Enum):
    """Session lifecycle states."""
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


@dataclass(frozen=True)
class Session:
    """
    Snapshot of the credential store at one moment.

    Built on demand by the session manager and never stored, so it cannot
    drift from the store it was read from.
    """
    state: SessionState
    credential: Optional[Credential] = None
    user: Optional[UserProfile] = None

    @property
    def is_authenticated(self) -> bool:
        return self.credential is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize without token values."""
        return {
            "state": self.state.value,
            "authenticated": self.is_authenticated,
            "user": self.user.to_dict() if self.user else None,
        }
