from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal, Optional
from datetime import date, datetime

from constants.scheduling import (
    DEFAULT_END_TIME,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SLOT_MINUTES,
    DEFAULT_START_TIME,
    DEFAULT_WORKING_DAYS,
    MAX_PAGE_SIZE,
)

HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


def check_working_days(days):
    if days is None:
        return None
    if any(d < 0 or d > 6 for d in days):
        raise ValueError("working_days must be between 0 (Monday) and 6 (Sunday)")
    return sorted(set(days))


def check_hours(start_time: Optional[str], end_time: Optional[str]):
    # zero-padded HH:MM compares correctly as text
    if start_time and end_time and start_time >= end_time:
        raise ValueError("start_time must be before end_time")


class DoctorBase(BaseModel):
    name: str = Field(..., description="Full name of the doctor")
    specialty: str = Field(..., description="Specialty of the doctor")
    experience: int = Field(0, ge=0, description="Years in practice")
    rating: float = Field(0, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    location: Optional[str] = None
    avatar: Optional[str] = None
    bio: str = ""
    consultation_fee: float = Field(0, ge=0)
    working_days: List[int] = Field(default_factory=lambda: list(DEFAULT_WORKING_DAYS))
    start_time: str = Field(DEFAULT_START_TIME, pattern=HHMM)
    end_time: str = Field(DEFAULT_END_TIME, pattern=HHMM)
    slot_minutes: int = Field(DEFAULT_SLOT_MINUTES, ge=5, le=240)

    @field_validator("working_days")
    @classmethod
    def check_days(cls, days):
        return check_working_days(days)

    @model_validator(mode="after")
    def check_opening_hours(self):
        check_hours(self.start_time, self.end_time)
        return self


class DoctorCreate(DoctorBase):
    pass


class DoctorUpdate(BaseModel):
    name: Optional[str] = None
    specialty: Optional[str] = None
    experience: Optional[int] = Field(default=None, ge=0)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    review_count: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    consultation_fee: Optional[float] = Field(default=None, ge=0)
    working_days: Optional[List[int]] = None
    start_time: Optional[str] = Field(default=None, pattern=HHMM)
    end_time: Optional[str] = Field(default=None, pattern=HHMM)
    slot_minutes: Optional[int] = Field(default=None, ge=5, le=240)

    @field_validator("working_days")
    @classmethod
    def check_days(cls, days):
        return check_working_days(days)

    @model_validator(mode="after")
    def check_opening_hours(self):
        check_hours(self.start_time, self.end_time)
        return self


class Doctor(DoctorBase):
    id: str
    available_slots: List[datetime] = []
    is_favorite: bool = False


class DoctorQuery(BaseModel):
    search: Optional[str] = None
    specialty: Optional[str] = None
    availability: Optional[Literal["today", "tomorrow", ""]] = None
    available: Optional[bool] = None
    sort: Literal["relevance", "recommended", "rating", "experience", "name", "availability"] = "relevance"
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


class DoctorPage(BaseModel):
    data: List[Doctor]
    total: int
    page: int
    limit: int
    total_pages: int


class DoctorAvailability(BaseModel):
    available: bool
    next_available: Optional[datetime] = None
    slots: List[datetime] = []


class DaySlots(BaseModel):
    doctor_id: str
    day: date
    slots: List[datetime]


class FavoriteToggle(BaseModel):
    doctor_id: str
    is_favorite: bool
