"""
Backend liveness probe.
"""

import httpx
import structlog

from clinical_client.sdk.transport import TimeoutTypes

logger = structlog.get_logger(__name__)


async def check_health(http: httpx.AsyncClient, timeout: TimeoutTypes = 3.0) -> bool:
    """
    True if ``GET /health`` answers 2xx within ``timeout``.

    Unauthenticated; never raises for transport failures.
    """
    try:
        response = await http.get("/health", timeout=timeout)
    except httpx.HTTPError as exc:
        logger.info("health_check_failed", error=type(exc).__name__)
        return False

    return response.is_success
