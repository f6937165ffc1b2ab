"""Offline data source used when demo mode is on. Sample content is non-identifying."""
from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from .errors import ApiError
from .models import (
    Appointment,
    LabResult,
    Medication,
    Patient,
    PatientLoginRequest,
    PatientLoginResponse,
    VisitSummary,
)

logger = logging.getLogger(__name__)

DEMO_TOKEN = "demo-token"


def _days_from_now(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def demo_labs() -> list[LabResult]:
    return [
        LabResult(id="lab-1", test_name="Hemoglobin A1c", date=_days_from_now(-14),
                  value="5.6", unit="%", reference_range="4.0–5.6"),
        LabResult(id="lab-2", test_name="LDL Cholesterol", date=_days_from_now(-30),
                  value="132", unit="mg/dL", reference_range="< 100", flag="high"),
        LabResult(id="lab-3", test_name="TSH", date=_days_from_now(-45),
                  value="2.1", unit="mIU/L", reference_range="0.4–4.0"),
    ]


def demo_medications() -> list[Medication]:
    return [
        Medication(id="med-1", name="Atorvastatin", dose="20 mg", frequency="Once daily",
                   status="active", prescriber="Dr. Smith", start_date=_days_from_now(-120)),
        Medication(id="med-2", name="Metformin", dose="500 mg", frequency="Twice daily",
                   status="inactive", prescriber="Dr. Patel",
                   start_date=_days_from_now(-500), end_date=_days_from_now(-200)),
    ]


def demo_appointments() -> list[Appointment]:
    return [
        Appointment(id="appt-1", type="Primary care follow-up", start=_days_from_now(7),
                    location="Clinic A", provider="Dr. Smith", status="scheduled"),
        Appointment(id="appt-2", type="Lab draw", start=_days_from_now(-20),
                    location="Lab B", status="completed"),
    ]


def demo_summaries() -> list[VisitSummary]:
    return [
        VisitSummary(
            id="sum-1",
            title="Annual physical",
            date=_days_from_now(-60),
            summary=(
                "Reviewed preventive screenings and discussed lifestyle. Continued current "
                "medications. Plan for repeat labs in 3 months."
            ),
            follow_ups=["Repeat lipid panel in 3 months", "Schedule annual flu shot"],
        ),
        VisitSummary(
            id="sum-2",
            title="Follow-up visit",
            date=_days_from_now(-20),
            summary=(
                "Discussed blood pressure readings at home and adjusted diet plan. "
                "No medication changes at this time."
            ),
        ),
    ]


class DemoDataSource:
    """Serves fixtures and never opens a connection."""

    async def login(self, credentials: PatientLoginRequest) -> PatientLoginResponse:
        return PatientLoginResponse(
            token=DEMO_TOKEN,
            patient=Patient(id="demo-patient", name="Demo Patient", email=credentials.email),
        )

    async def get_labs(self) -> list[LabResult]:
        return demo_labs()

    async def get_medications(self) -> list[Medication]:
        return demo_medications()

    async def get_appointments(self) -> list[Appointment]:
        return demo_appointments()

    async def get_summaries(self) -> list[VisitSummary]:
        return demo_summaries()

    async def request(self, endpoint: str, method: str = "GET", body: Any = None, headers: Any = None) -> Any:
        """Any endpoint without a fixture is unavailable in demo mode."""
        logger.debug("Demo mode: refusing %s %s", method, endpoint)
        raise ApiError("Demo mode is enabled. This endpoint is not available.", 0)
