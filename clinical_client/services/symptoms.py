"""
Symptom analysis client.
"""

from clinical_client.domain.clinical import SymptomAnalysis, SymptomAnalysisRequest
from clinical_client.errors import ValidationError
from clinical_client.sdk.transport import TimeoutTypes
from clinical_client.services.base import DomainClient


class SymptomClient(DomainClient):
    """Free-text symptom description in, structured analysis out."""

    async def analyze(
        self,
        request: SymptomAnalysisRequest,
        timeout: TimeoutTypes = None,
    ) -> SymptomAnalysis:
        if not request.symptom_description or not request.symptom_description.strip():
            raise ValidationError(
                "Symptom description is required",
                error_code="EMPTY_SYMPTOMS",
            )

        response = await self._requests.post(
            "/symptoms/analyze",
            json=request.to_dict(),
            timeout=timeout,
        )
        body = await self._parse(response, "Symptom analysis")
        return SymptomAnalysis.from_dict(body.get("analysis", {}))
