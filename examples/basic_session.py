"""
Basic Session Example - login, protected calls, logout.

Expects the clinical backend on CLINICAL_CLIENT_API_BASE_URL
(default http://localhost:3000/api).
"""

import asyncio
import sys

from clinical_client import ClinicalClient, UploadFile
from clinical_client.adapters import FileCredentialStore
from clinical_client.domain.clinical import SymptomAnalysisRequest, SymptomContext
from clinical_client.errors import ClinicalClientError, SessionExpiredError
from clinical_client.logging_config import configure_logging


async def main(report_path=None):
    configure_logging()

    # Credentials survive restarts of this script
    store = FileCredentialStore("~/.clinical_client/credentials.json")

    async with ClinicalClient(store=store) as client:
        if not await client.health():
            print("Backend is not reachable")
            return

        user = await client.current_user()
        if user is None:
            result = await client.login("doctor@example.com", "password123")
            user = result.user
            print(f"Logged in: {user.display_name} ({user.role.value})")
        else:
            print(f"Resumed session: {user.display_name}")

        try:
            analysis = await client.symptoms.analyze(
                SymptomAnalysisRequest(
                    symptom_description="Headache and mild fever for two days",
                    patient_context=SymptomContext(age=34, allergies=["penicillin"]),
                )
            )
            print(f"\nSeverity: {analysis.severity}")
            print(f"See a doctor: {analysis.doctor_visit_recommended} ({analysis.doctor_visit_urgency})")

            if report_path:
                report = await client.reports.upload_and_analyze(
                    "P001", UploadFile.from_path(report_path)
                )
                print(f"\nReport {report.report_id}: {report.overall_severity}")
                for alert in report.critical_alerts:
                    print(f"  CRITICAL: {alert.title}")

        except SessionExpiredError:
            print("\nSession expired, please log in again")
        except ClinicalClientError as exc:
            print(f"\nRequest failed: {exc}")

        await client.logout()
        print("\nLogged out")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
