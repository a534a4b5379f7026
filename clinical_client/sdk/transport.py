"""
Transport helpers shared by the session manager and the request client.
"""

from typing import Any, Dict, Optional, Tuple, Union

import httpx
import structlog

from clinical_client.errors import BackendUnreachableError, RequestTimeoutError

logger = structlog.get_logger(__name__)

TimeoutTypes = Union[float, httpx.Timeout, None]


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def timeout_arg(timeout: TimeoutTypes) -> Any:
    """Per-request timeout, falling back to the client default."""
    return httpx.USE_CLIENT_DEFAULT if timeout is None else timeout


async def issue_request(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    timeout: TimeoutTypes = None,
    **kwargs: Any,
) -> httpx.Response:
    """
    Send one request, translating transport failures.

    Raises:
        RequestTimeoutError: The request timed out
        BackendUnreachableError: Connection refused, DNS failure, reset, etc.
    """
    try:
        return await http.request(method, url, timeout=timeout_arg(timeout), **kwargs)
    except httpx.TimeoutException as exc:
        logger.warning("request_timeout", method=method, url=url)
        raise RequestTimeoutError() from exc
    except httpx.TransportError as exc:
        logger.warning("backend_unreachable", method=method, url=url, error=type(exc).__name__)
        raise BackendUnreachableError(
            f"Cannot connect to backend server at {http.base_url}"
        ) from exc


def error_message(
    response: httpx.Response,
    fallback: Optional[str] = None,
    fields: Tuple[str, ...] = ("error", "message"),
) -> str:
    """
    Human-readable message for a non-2xx response.

    Takes the first non-empty body field named in ``fields``, then the
    fallback, then the HTTP reason phrase.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for field in fields:
            value = body.get(field)
            if isinstance(value, str) and value:
                return value

    if fallback:
        return fallback
    return response.reason_phrase or f"HTTP {response.status_code}"


def json_body(response: httpx.Response) -> Dict[str, Any]:
    """Decoded JSON object body, or an empty dict."""
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
