from typing import Literal, Optional
from pydantic import BaseModel, Field

class PortalModel(BaseModel):
    """Base for backend records. Fields keep the backend's camelCase names on the wire.

    Undeclared fields are kept so a record dumps back to what the backend sent.
    """
    model_config = {
        "populate_by_name": True,
        "extra": "allow",
        "coerce_numbers_to_str": True,
    }

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

class PatientLoginRequest(PortalModel):
    email: str
    access_code: str = Field(alias="accessCode")

class Patient(PortalModel):
    id: str
    name: str
    email: str

class PatientLoginResponse(PortalModel):
    token: str
    patient: Patient

class LabResult(PortalModel):
    id: str
    test_name: str = Field(alias="testName")
    date: str  # ISO-8601 dateTime
    value: str
    unit: str
    reference_range: str = Field(alias="referenceRange")
    flag: Optional[Literal["low", "high"]] = None  # None means normal

class Medication(PortalModel):
    id: str
    name: str
    dose: str
    frequency: str
    status: Literal["active", "inactive"]
    prescriber: Optional[str] = None
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")

class Appointment(PortalModel):
    id: str
    type: str
    start: str  # ISO-8601 dateTime
    location: str
    provider: Optional[str] = None
    status: Literal["scheduled", "completed", "cancelled"]
    notes: Optional[str] = None

class VisitSummary(PortalModel):
    id: str
    title: str
    date: str
    summary: str
    follow_ups: Optional[list[str]] = Field(default=None, alias="followUps")
