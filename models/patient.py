from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from models.appointment import Appointment


class EmergencyContact(BaseModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone: Optional[str] = None


class Insurance(BaseModel):
    provider: Optional[str] = None
    policy_number: Optional[str] = None
    expiry_date: Optional[date] = None


class Medication(BaseModel):
    name: str
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    purpose: Optional[str] = None


class PatientProfileUpdate(BaseModel):
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    blood_type: Optional[str] = Field(default=None, pattern=r"^(A|B|AB|O)[+-]$")
    address: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    insurance: Optional[Insurance] = None
    allergies: Optional[List[str]] = None
    medications: Optional[List[Medication]] = None


class PatientProfile(PatientProfileUpdate):
    user_id: str
    name: str
    email: str
    allergies: List[str] = []
    medications: List[Medication] = []


class MedicalRecordCreate(BaseModel):
    visit_date: date
    doctor: str
    specialty: Optional[str] = None
    diagnosis: str
    notes: Optional[str] = None
    treatment: Optional[str] = None
    follow_up: Optional[str] = None


class MedicalRecord(MedicalRecordCreate):
    id: str
    patient_id: str


class PrescriptionCreate(BaseModel):
    medication: str
    dosage: str
    frequency: str
    start_date: date
    end_date: Optional[date] = None
    refills: int = Field(0, ge=0)
    status: str = "Active"
    prescribed_by: str
    notes: Optional[str] = None


class Prescription(PrescriptionCreate):
    id: str
    patient_id: str


class TestResultCreate(BaseModel):
    test_date: date
    test_name: str
    ordered_by: str
    status: str = "Completed"
    results: Optional[str] = None
    notes: Optional[str] = None


class TestResult(TestResultCreate):
    id: str
    patient_id: str


class DashboardSummary(BaseModel):
    upcoming: int
    past: int
    favorites: int
    next_appointment: Optional[Appointment] = None
    generated_at: datetime
