"""
User Profile Domain Model - The signed-in provider or patient.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional
from datetime import datetime
from enum import Enum


class UserRole(Enum):
    """Roles issued by the backend."""
    DOCTOR = "doctor"
    NURSE = "nurse"
    ADMIN = "admin"              # Passes every role check
    SUPPORT = "support"
    PATIENT = "patient"


class AccountKind(Enum):
    """Which login endpoint the account belongs to."""
    PROVIDER = "provider"
    PATIENT = "patient"


@dataclass
class UserProfile:
    """
    Cached profile of the signed-in account.

    Domain rules:
    - id is immutable
    - The cached copy is advisory; a fresh /auth/me always wins
    - patient_link_id is only set for patient accounts
    """
    id: str
    display_name: str
    role: UserRole
    account_kind: AccountKind = AccountKind.PROVIDER

    # Optional fields
    email: Optional[str] = None
    patient_link_id: Optional[str] = None
    last_login_at: Optional[datetime] = None

    @property
    def is_patient(self) -> bool:
        return self.account_kind == AccountKind.PATIENT

    def can_access(
        self,
        required_role: Optional[UserRole] = None,
        allow_patient: Optional[bool] = None,
    ) -> bool:
        """
        Route guard check.

        Rules:
        - admin satisfies any required role
        - otherwise the role must match exactly
        - a patient account is refused when allow_patient is False
        """
        if required_role is not None and self.role != UserRole.ADMIN:
            if self.role != required_role:
                return False

        if allow_patient is False and self.is_patient:
            return False

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the backend's wire format."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.display_name,
            "role": self.role.value,
            "userType": self.account_kind.value,
            "email": self.email,
        }
        if self.patient_link_id:
            data["patientId"] = self.patient_link_id
        if self.last_login_at:
            data["lastLogin"] = self.last_login_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        """Deserialize from the backend's wire format."""
        role = UserRole(data.get("role", "doctor"))
        default_kind = "patient" if role == UserRole.PATIENT else "provider"
        return cls(
            id=str(data["id"]),
            display_name=data.get("name") or data.get("email") or str(data["id"]),
            role=role,
            account_kind=AccountKind(data.get("userType") or default_kind),
            email=data.get("email"),
            patient_link_id=data.get("patientId"),
            last_login_at=_parse_timestamp(data.get("lastLogin")),
        )


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
