"""
Prescription client - upload, drug-interaction check, medication history.
"""

from typing import Any, Dict, List, Optional

import structlog

from clinical_client.domain.clinical import Medication, PrescriptionData
from clinical_client.sdk.request_client import ResilientRequestClient
from clinical_client.sdk.transport import TimeoutTypes
from clinical_client.services.base import DomainClient
from clinical_client.services.validation import UploadFile, UploadValidator

logger = structlog.get_logger(__name__)


class PrescriptionClient(DomainClient):
    """Prescription endpoints for one backend."""

    def __init__(
        self,
        requests: ResilientRequestClient,
        validator: Optional[UploadValidator] = None,
    ):
        super().__init__(requests)
        self._validator = validator or UploadValidator()

    async def upload_and_analyze(
        self,
        patient_id: str,
        upload: UploadFile,
        timeout: TimeoutTypes = None,
    ) -> PrescriptionData:
        """
        Upload a prescription scan; returns medications and interaction check.

        Raises:
            ValidationError: Bad file type or size (nothing sent)
            BackendUnreachableError: Transport failure
            SessionExpiredError: Token rejected even after a refresh
            ApplicationError: Backend rejected the upload
        """
        self._validator.validate(upload)

        logger.info("prescription_upload", patient_id=patient_id, size=upload.size)
        response = await self._requests.post(
            self._patient_path(patient_id, "prescriptions/upload"),
            files={"file": upload.as_multipart()},
            timeout=timeout,
        )
        return PrescriptionData.from_dict(await self._parse(response, "Upload"))

    async def history(self, patient_id: str) -> List[Dict[str, Any]]:
        """Previously uploaded prescriptions for a patient."""
        response = await self._requests.get(self._patient_path(patient_id, "prescriptions"))
        body = await self._parse(response, "Fetch prescriptions")
        return body.get("prescriptions", [])

    async def current_medications(self, patient_id: str) -> List[Medication]:
        """Medications the patient is currently taking."""
        response = await self._requests.get(
            self._patient_path(patient_id, "medications/current")
        )
        body = await self._parse(response, "Fetch current medications")
        return [Medication.from_dict(m) for m in body.get("medications", [])]
