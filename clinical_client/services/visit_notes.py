"""
Visit note client - turn a doctor's dictation into a structured note.
"""

from clinical_client.domain.clinical import VisitNote, VisitNoteRequest
from clinical_client.errors import ValidationError
from clinical_client.sdk.transport import TimeoutTypes
from clinical_client.services.base import DomainClient


class VisitNoteClient(DomainClient):

    async def generate(
        self,
        patient_id: str,
        request: VisitNoteRequest,
        timeout: TimeoutTypes = None,
    ) -> VisitNote:
        """
        Generate a visit note for a patient.

        Raises:
            ValidationError: Doctor input is empty (nothing sent)
            ApplicationError: Backend rejected the request
        """
        if not request.doctor_input or not request.doctor_input.strip():
            raise ValidationError(
                "Doctor input is required",
                error_code="EMPTY_DOCTOR_INPUT",
            )

        response = await self._requests.post(
            self._patient_path(patient_id, "visit-notes/generate"),
            json=request.to_dict(),
            timeout=timeout,
        )
        body = await self._parse(response, "Visit note generation")
        return VisitNote.from_dict(body.get("visitNote", {}))
