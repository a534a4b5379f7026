"""
Clinical payload models - request and response shapes of the domain endpoints.

Responses keep the fields the client reads and stash the full body in
``raw`` so nothing the backend adds is lost.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------------------
# Test report analysis
# ---------------------------------------------------------------------------

@dataclass
class LabTest:
    """One extracted lab value."""
    name: str
    value: float
    unit: str
    severity: str  # normal | moderate | high
    threshold: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LabTest":
        return cls(
            name=data["name"],
            value=data.get("value"),
            unit=data.get("unit", ""),
            severity=data.get("severity", "normal"),
            threshold=data.get("threshold"),
        )


@dataclass
class ModelPrediction:
    """Output of the backend's risk model, when one is deployed."""
    probability: float
    prediction: int
    severity: str
    note: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelPrediction":
        return cls(
            probability=data.get("probability", 0.0),
            prediction=data.get("prediction", 0),
            severity=data.get("severity", ""),
            note=data.get("note"),
        )


@dataclass
class ClinicalAlert:
    """Alert raised by the backend for a report."""
    id: str
    type: str
    severity: str  # critical | high | medium | low
    title: str
    message: str
    timestamp: str
    test_name: Optional[str] = None
    test_value: Optional[str] = None
    condition_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClinicalAlert":
        return cls(
            id=data["id"],
            type=data.get("type", ""),
            severity=data.get("severity", "low"),
            title=data.get("title", ""),
            message=data.get("message", ""),
            timestamp=data.get("timestamp", ""),
            test_name=data.get("testName"),
            test_value=data.get("testValue"),
            condition_name=data.get("conditionName"),
        )


@dataclass
class ReportAnalysis:
    """Result of a test report upload."""
    report_id: str
    date: str
    tests: List[LabTest]
    overall_severity: str
    confidence: float
    ai_summary: Dict[str, Any] = field(default_factory=dict)
    identified_conditions: List[Dict[str, Any]] = field(default_factory=list)
    model_prediction: Optional[ModelPrediction] = None
    alerts: List[ClinicalAlert] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def critical_alerts(self) -> List[ClinicalAlert]:
        return [a for a in self.alerts if a.severity == "critical"]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportAnalysis":
        extracted = data.get("extractedData", {})
        prediction = data.get("modelPrediction")
        return cls(
            report_id=data.get("reportId", ""),
            date=data.get("date", ""),
            tests=[LabTest.from_dict(t) for t in extracted.get("tests", [])],
            overall_severity=extracted.get("overallSeverity", "Low"),
            confidence=data.get("confidence", 0.0),
            ai_summary=data.get("aiSummary", {}),
            identified_conditions=extracted.get("identifiedConditions", []),
            model_prediction=ModelPrediction.from_dict(prediction) if prediction else None,
            alerts=[ClinicalAlert.from_dict(a) for a in data.get("alerts", [])],
            raw=data,
        )


# ---------------------------------------------------------------------------
# Prescriptions
# ---------------------------------------------------------------------------

@dataclass
class Medication:
    name: str
    dosage: str = ""
    frequency: str = ""
    duration: str = ""
    instructions: Optional[str] = None
    quantity: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Medication":
        return cls(
            name=data["name"],
            dosage=data.get("dosage", ""),
            frequency=data.get("frequency", ""),
            duration=data.get("duration", ""),
            instructions=data.get("instructions"),
            quantity=data.get("quantity"),
        )


@dataclass
class DrugInteraction:
    medications: List[str]
    severity: str  # mild | moderate | severe | contraindicated
    description: str
    recommendation: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DrugInteraction":
        detail = data.get("interaction", {})
        return cls(
            medications=data.get("medications", []),
            severity=detail.get("severity", "mild"),
            description=detail.get("description", ""),
            recommendation=detail.get("recommendation", ""),
        )


@dataclass
class PrescriptionData:
    """Result of a prescription upload."""
    prescription_id: str
    date: str
    medications: List[Medication]
    has_interactions: bool = False
    interactions: List[DrugInteraction] = field(default_factory=list)
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None
    diagnosis: Optional[str] = None
    additional_notes: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrescriptionData":
        check = data.get("interactions", {})
        return cls(
            prescription_id=data.get("prescriptionId", ""),
            date=data.get("date", ""),
            medications=[Medication.from_dict(m) for m in data.get("medications", [])],
            has_interactions=check.get("hasInteractions", False),
            interactions=[DrugInteraction.from_dict(i) for i in check.get("interactions", [])],
            doctor_name=data.get("doctorName"),
            patient_name=data.get("patientName"),
            diagnosis=data.get("diagnosis"),
            additional_notes=data.get("additionalNotes"),
            raw=data,
        )


# ---------------------------------------------------------------------------
# Symptom analysis
# ---------------------------------------------------------------------------

@dataclass
class SymptomContext:
    age: Optional[int] = None
    sex: Optional[str] = None
    existing_conditions: Optional[List[str]] = None
    current_medications: Optional[List[str]] = None
    allergies: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "age": self.age,
            "sex": self.sex,
            "existingConditions": self.existing_conditions,
            "currentMedications": self.current_medications,
            "allergies": self.allergies,
        })


@dataclass
class SymptomAnalysisRequest:
    symptom_description: str
    patient_context: Optional[SymptomContext] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"symptomDescription": self.symptom_description}
        if self.patient_context:
            data["patientContext"] = self.patient_context.to_dict()
        return data


@dataclass
class SymptomAnalysis:
    symptoms: List[str]
    severity: str  # mild | moderate | severe | critical
    potential_conditions: List[Dict[str, Any]] = field(default_factory=list)
    advice: List[str] = field(default_factory=list)
    recommended_medications: List[Dict[str, Any]] = field(default_factory=list)
    self_care_recommendations: List[str] = field(default_factory=list)
    doctor_visit_recommended: bool = False
    doctor_visit_urgency: str = "routine"
    doctor_visit_reason: str = ""
    warning_signs: List[str] = field(default_factory=list)
    follow_up_instructions: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SymptomAnalysis":
        return cls(
            symptoms=data.get("symptoms", []),
            severity=data.get("severity", "mild"),
            potential_conditions=data.get("potentialConditions", []),
            advice=data.get("advice", []),
            recommended_medications=data.get("recommendedMedications", []),
            self_care_recommendations=data.get("selfCareRecommendations", []),
            doctor_visit_recommended=data.get("doctorVisitRecommended", False),
            doctor_visit_urgency=data.get("doctorVisitUrgency", "routine"),
            doctor_visit_reason=data.get("doctorVisitReason", ""),
            warning_signs=data.get("warningSigns", []),
            follow_up_instructions=data.get("followUpInstructions", ""),
        )


# ---------------------------------------------------------------------------
# Visit notes
# ---------------------------------------------------------------------------

@dataclass
class VisitPatientContext:
    name: str
    age: Optional[int] = None
    sex: Optional[str] = None
    past_medical_history: Optional[List[str]] = None
    current_medications: Optional[List[Dict[str, str]]] = None
    recent_test_results: Optional[str] = None
    allergies: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "name": self.name,
            "age": self.age,
            "sex": self.sex,
            "pastMedicalHistory": self.past_medical_history,
            "currentMedications": self.current_medications,
            "recentTestResults": self.recent_test_results,
            "allergies": self.allergies,
        })


@dataclass
class VisitNoteRequest:
    doctor_input: str
    patient_context: Optional[VisitPatientContext] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"doctorInput": self.doctor_input}
        if self.patient_context:
            data["patientContext"] = self.patient_context.to_dict()
        return data


@dataclass
class VisitNote:
    chief_complaint: str
    history_of_present_illness: str
    physical_examination: str
    assessment: str
    plan: str
    medications: List[Medication] = field(default_factory=list)
    follow_up_instructions: Optional[str] = None
    next_visit_date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VisitNote":
        return cls(
            chief_complaint=data.get("chiefComplaint", ""),
            history_of_present_illness=data.get("historyOfPresentIllness", ""),
            physical_examination=data.get("physicalExamination", ""),
            assessment=data.get("assessment", ""),
            plan=data.get("plan", ""),
            medications=[Medication.from_dict(m) for m in data.get("medications") or []],
            follow_up_instructions=data.get("followUpInstructions"),
            next_visit_date=data.get("nextVisitDate"),
        )
