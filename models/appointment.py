from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

from utils.dateparse import to_naive_utc

AppointmentStatus = Literal["scheduled", "confirmed", "completed", "cancelled", "no_show"]


class DoctorSnapshot(BaseModel):
    """Doctor details copied onto the appointment at booking time."""
    name: str
    specialty: str
    avatar: Optional[str] = None
    location: Optional[str] = None


class AppointmentCreate(BaseModel):
    doctor_id: str
    date_time: datetime
    reason: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("date_time")
    @classmethod
    def normalize(cls, value):
        return to_naive_utc(value)


class AppointmentUpdate(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=2000)


class RescheduleRequest(BaseModel):
    new_date_time: str = Field(..., description="ISO timestamp or phrase like 'next monday 10am'")


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class Appointment(BaseModel):
    id: str
    patient_id: str
    patient_name: Optional[str] = None
    doctor_id: str
    doctor: DoctorSnapshot
    date_time: datetime
    duration_minutes: int
    reason: Optional[str] = None
    notes: Optional[str] = None
    status: AppointmentStatus = "scheduled"
    fee: float = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    is_upcoming: bool = False


class CancelResult(BaseModel):
    appointment: Appointment
    late_cancellation: bool


class AppointmentList(BaseModel):
    data: List[Appointment]
    total: int
