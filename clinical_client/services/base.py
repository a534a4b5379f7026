"""
Base class for the domain clients.
"""

from typing import Any, Dict

import httpx
import structlog

from clinical_client.errors import ApplicationError, SessionExpiredError
from clinical_client.sdk.request_client import ResilientRequestClient
from clinical_client.sdk.transport import error_message, json_body

logger = structlog.get_logger(__name__)


class DomainClient:
    """Thin consumer of the resilient request client."""

    def __init__(self, requests: ResilientRequestClient):
        self._requests = requests

    @staticmethod
    def _patient_path(patient_id: str, suffix: str) -> str:
        return f"/patients/{patient_id}/{suffix}"

    async def _parse(self, response: httpx.Response, action: str) -> Dict[str, Any]:
        """
        JSON body of a successful response.

        Raises:
            SessionExpiredError: 401 on a request the request client has
                already retried with a refreshed token; the session is ended
            ApplicationError: Non-2xx status, message taken from the body's
                ``error`` or ``message`` field, else the reason phrase
        """
        if response.status_code == 401:
            rejected = response.request.headers.get("Authorization", "").removeprefix("Bearer ")
            logger.warning("refreshed_token_rejected", action=action)
            await self._requests.session.expire(stale_token=rejected or None)
            raise SessionExpiredError()

        if response.is_error:
            message = error_message(
                response,
                fallback=f"{action} failed: {response.reason_phrase}",
            )
            logger.warning(
                "request_rejected",
                action=action,
                status=response.status_code,
                message=message,
            )
            raise ApplicationError(message, response.status_code, json_body(response))

        try:
            return response.json()
        except ValueError as exc:
            raise ApplicationError(
                f"{action} failed: invalid JSON in response",
                response.status_code,
            ) from exc
