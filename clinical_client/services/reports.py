"""
Test report client - upload a lab report and get the AI analysis back.
"""

from typing import Awaitable, Callable, Optional

import structlog

from clinical_client.domain.clinical import ReportAnalysis
from clinical_client.errors import BackendUnreachableError
from clinical_client.sdk.request_client import ResilientRequestClient
from clinical_client.sdk.transport import TimeoutTypes
from clinical_client.services.base import DomainClient
from clinical_client.services.validation import UploadFile, UploadValidator

logger = structlog.get_logger(__name__)

HealthProbe = Callable[[], Awaitable[bool]]


class ReportClient(DomainClient):
    """
    Uploads test reports (image or PDF) for extraction and analysis.

    When a health probe is given the backend is checked first, so an
    offline backend is reported before a large upload starts.
    """

    def __init__(
        self,
        requests: ResilientRequestClient,
        validator: Optional[UploadValidator] = None,
        health_probe: Optional[HealthProbe] = None,
    ):
        super().__init__(requests)
        self._validator = validator or UploadValidator()
        self._health_probe = health_probe

    async def upload_and_analyze(
        self,
        patient_id: str,
        upload: UploadFile,
        timeout: TimeoutTypes = None,
    ) -> ReportAnalysis:
        """
        Upload a report and return its analysis.

        Raises:
            ValidationError: Bad file type or size (nothing sent)
            BackendUnreachableError: Health probe failed or transport error
            SessionExpiredError: Token rejected even after a refresh
            ApplicationError: Backend rejected the upload
        """
        self._validator.validate(upload)

        if self._health_probe is not None and not await self._health_probe():
            raise BackendUnreachableError(
                "Backend server is not reachable. Please ensure the backend is running."
            )

        logger.info("report_upload", patient_id=patient_id, size=upload.size)
        response = await self._requests.post(
            self._patient_path(patient_id, "test-reports/upload"),
            files={"file": upload.as_multipart()},
            timeout=timeout,
        )
        return ReportAnalysis.from_dict(await self._parse(response, "Upload"))
