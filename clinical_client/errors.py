"""
Error taxonomy for the clinical client.

ClinicalClientError
├── ValidationError          rejected before any network call
├── AuthenticationError      no credential present
│   └── SessionExpiredError  refresh failed, session is over
├── BackendUnreachableError  transport-level failure
│   └── RequestTimeoutError
└── ApplicationError         non-2xx response from the backend
    └── LoginError
"""

from typing import Any, Dict, Optional


class ClinicalClientError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(ClinicalClientError):
    """Raised when a payload fails client-side validation."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR"):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class AuthenticationError(ClinicalClientError):
    """Raised when a request needs a credential and none is stored."""

    def __init__(self, message: str = "Not authenticated. Please login first."):
        self.message = message
        super().__init__(message)


class SessionExpiredError(AuthenticationError):
    """
    Raised when the access token was rejected and could not be refreshed.

    The credential store has already been cleared when this is raised;
    callers should treat it as a global sign-out.
    """

    def __init__(self, message: str = "Session expired. Please login again."):
        super().__init__(message)


class BackendUnreachableError(ClinicalClientError):
    """Raised when the backend cannot be reached at all."""

    def __init__(self, message: str = "Cannot connect to backend server."):
        self.message = message
        super().__init__(message)


class RequestTimeoutError(BackendUnreachableError):
    """Raised when a request exceeds its timeout."""

    def __init__(self, message: str = "Request to backend timed out."):
        super().__init__(message)


class ApplicationError(ClinicalClientError):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        payload: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}
        super().__init__(message)


class LoginError(ApplicationError):
    """Raised when the backend rejects a login attempt."""
