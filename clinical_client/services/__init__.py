"""
Domain clients - typed wrappers over the backend's clinical endpoints.

- ReportClient: test report upload and analysis
- PrescriptionClient: prescription upload, history, current medications
- SymptomClient: symptom analysis
- VisitNoteClient: visit note generation
"""

from clinical_client.services.reports import ReportClient
from clinical_client.services.prescriptions import PrescriptionClient
from clinical_client.services.symptoms import SymptomClient
from clinical_client.services.visit_notes import VisitNoteClient
from clinical_client.services.validation import UploadFile, UploadValidator
from clinical_client.services.health import check_health

__all__ = [
    "ReportClient",
    "PrescriptionClient",
    "SymptomClient",
    "VisitNoteClient",
    "UploadFile",
    "UploadValidator",
    "check_health",
]
