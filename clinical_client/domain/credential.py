"""
Credential Domain Model - Access/refresh token pair.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import jwt


@dataclass(frozen=True)
class Credential:
    """
    Credential entity - the bearer token pair for one session.

    Domain rules:
    - Both tokens are present, or there is no credential at all
    - Never serialized into logs (repr hides the values)
    - The refresh token may be carried over across a refresh
    """
    access_token: str
    refresh_token: str

    def __post_init__(self):
        if not self.access_token or not self.refresh_token:
            raise ValueError("Credential requires both an access and a refresh token")

    def __repr__(self) -> str:
        return "Credential(access_token=***, refresh_token=***)"

    def access_expires_at(self) -> Optional[datetime]:
        """
        Expiry of the access token, if it is a JWT carrying ``exp``.

        The signature is not verified; this only drives proactive refresh,
        the backend remains the authority.
        """
        try:
            claims = jwt.decode(
                self.access_token,
                options={"verify_signature": False, "verify_exp": False},
            )
        except jwt.InvalidTokenError:
            return None

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            return None
        return datetime.fromtimestamp(exp, tz=timezone.utc)

    def is_access_expired(self, leeway: int = 0) -> bool:
        """True when the access token is known to expire within ``leeway`` seconds."""
        expires_at = self.access_expires_at()
        if expires_at is None:
            return False
        return datetime.now(timezone.utc) + timedelta(seconds=leeway) >= expires_at

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credential":
        """Build from a login response body."""
        return cls(
            access_token=data["accessToken"],
            refresh_token=data["refreshToken"],
        )
