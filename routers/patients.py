from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List

from database import get_database
from dependencies.auth import get_current_user
from models.patient import (
    DashboardSummary,
    MedicalRecord,
    PatientProfile,
    PatientProfileUpdate,
    Prescription,
    TestResult,
)
from services.patient_service import PatientService

router = APIRouter(prefix="/patients/me", tags=["Patients"])


@router.get("", response_model=PatientProfile)
async def read_profile(
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    return await PatientService.get_profile(db, user)


@router.put("", response_model=PatientProfile)
async def update_profile(
    data: PatientProfileUpdate,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    update_data = data.model_dump(mode="json", exclude_unset=True)
    return await PatientService.update_profile(db, user, update_data)


@router.get("/dashboard", response_model=DashboardSummary)
async def dashboard(
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    return await PatientService.dashboard(db, user)


@router.get("/medical-history", response_model=List[MedicalRecord])
async def medical_history(
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    return await PatientService.list_records(db, "medical_records", user["id"])


@router.get("/prescriptions", response_model=List[Prescription])
async def prescriptions(
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    return await PatientService.list_records(db, "prescriptions", user["id"])


@router.get("/test-results", response_model=List[TestResult])
async def test_results(
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    return await PatientService.list_records(db, "test_results", user["id"])
