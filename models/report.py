from typing import Dict, List
from datetime import date
from pydantic import BaseModel


class AppointmentStats(BaseModel):
    total_appointments: int
    today_appointments: int
    by_status: Dict[str, int]
    by_specialty: Dict[str, int]
    total_doctors: int
    available_doctors: int


class RevenueDay(BaseModel):
    day: date
    appointments: int
    revenue: float


class RevenueReport(BaseModel):
    start: date
    end: date
    total_revenue: float
    completed_appointments: int
    days: List[RevenueDay]
