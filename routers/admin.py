from fastapi import APIRouter, Depends, HTTPException, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import date, datetime
from typing import List, Literal, Optional
import logging

from constants.status import ERRORS
from database import get_database
from dependencies.auth import get_current_admin_user
from models.appointment import Appointment, AppointmentStatus, StatusUpdate
from models.doctor import DoctorCreate, DoctorUpdate
from models.patient import MedicalRecordCreate, PrescriptionCreate, TestResultCreate
from models.report import AppointmentStats, RevenueReport
from models.user import AdminUserUpdate, UserCreate, UserPage, UserPublic
from services.appointment_service import AppointmentService, StatusTransitionError
from services.doctor_service import DoctorService
from services.patient_service import PatientService
from services.report_service import ReportService
from services.user_service import EmailTakenError, UserService, public_user
from utils.querybuilders import AppointmentQuery
from utils.responses import message_response

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={404: {"description": "Not found"}},
    dependencies=[Depends(get_current_admin_user)],
)
logger = logging.getLogger("admin")


# ========== USER ENDPOINTS ==========
@router.get("/users", response_model=UserPage)
async def list_users(
    role: Optional[Literal["patient", "admin"]] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    return await UserService.list_users(db, role, page, limit)


@router.get("/users/{user_id}", response_model=UserPublic)
async def get_user(user_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    user = public_user(await UserService.get_by_id(db, user_id))
    if not user:
        raise HTTPException(**ERRORS["USER_NOT_FOUND"])
    return user


@router.post("/users", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def create_user(data: UserCreate, db: AsyncIOMotorDatabase = Depends(get_database)):
    try:
        return await UserService.create_by_admin(db, data)
    except EmailTakenError:
        raise HTTPException(**ERRORS["EMAIL_TAKEN"])


@router.put("/users/{user_id}", response_model=UserPublic)
async def update_user(
    user_id: str,
    data: AdminUserUpdate,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    updated = await UserService.update_user(db, user_id, data.model_dump(exclude_unset=True, exclude_none=True))
    if not updated:
        raise HTTPException(**ERRORS["USER_NOT_FOUND"])
    return updated


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    current_admin: dict = Depends(get_current_admin_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    if user_id == current_admin["id"]:
        raise HTTPException(**ERRORS["CANNOT_DELETE_SELF"])
    if not await UserService.delete_user(db, user_id):
        raise HTTPException(**ERRORS["USER_NOT_FOUND"])
    logger.info("Deleted user", extra={"user_id": user_id})
    return message_response("User deleted", user_id=user_id)


# ========== DOCTOR ENDPOINTS ==========
@router.post("/doctors", status_code=status.HTTP_201_CREATED)
async def add_doctor(doctor: DoctorCreate, db: AsyncIOMotorDatabase = Depends(get_database)):
    try:
        return await DoctorService.create_doctor(db, doctor)
    except Exception as e:
        logger.exception("Failed to add doctor: %s", e)
        raise HTTPException(**ERRORS["DOCTOR_CREATE_FAILED"])


@router.put("/doctors/{doctor_id}")
async def update_doctor(
    doctor_id: str,
    doctor: DoctorUpdate,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    update_data = doctor.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        raise HTTPException(**ERRORS["NO_FIELDS_TO_UPDATE"])
    try:
        updated = await DoctorService.update_doctor(db, doctor_id, update_data)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if not updated:
        logger.warning("Doctor not found with doctor_id: %s", doctor_id)
        raise HTTPException(**ERRORS["DOCTOR_NOT_FOUND"])
    return updated


@router.delete("/doctors/{doctor_id}")
async def delete_doctor(doctor_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    if not await DoctorService.delete_doctor(db, doctor_id):
        logger.warning("Doctor not found with doctor_id: %s", doctor_id)
        raise HTTPException(**ERRORS["DOCTOR_NOT_FOUND"])
    logger.info("Deleted doctor with doctor_id: %s", doctor_id)
    return message_response("Doctor deleted", doctor_id=doctor_id)


# ========== APPOINTMENT ENDPOINTS ==========
@router.get("/appointments", response_model=List[Appointment])
async def list_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    doctor_id: Optional[str] = None,
    day: Optional[date] = Query(None, alias="date"),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """All appointments, newest first, optionally filtered."""
    start = datetime.combine(day, datetime.min.time()) if day else None
    query = AppointmentQuery.admin_filter(status_filter, doctor_id, start)
    return await AppointmentService.list_all(db, query, limit)


@router.put("/appointments/{appointment_id}/status", response_model=Appointment)
async def update_appointment_status(
    appointment_id: str,
    data: StatusUpdate,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    try:
        updated = await AppointmentService.set_status(db, appointment_id, data.status)
    except StatusTransitionError as exc:
        raise HTTPException(status_code=ERRORS["APPOINTMENT_NOT_ACTIVE"]["status_code"], detail=str(exc))
    if not updated:
        raise HTTPException(**ERRORS["APPOINTMENT_NOT_FOUND"])
    return updated


# ========== REPORT ENDPOINTS ==========
@router.get("/reports/appointment-stats", response_model=AppointmentStats)
async def appointment_stats(db: AsyncIOMotorDatabase = Depends(get_database)):
    return await ReportService.appointment_stats(db)


@router.get("/reports/revenue", response_model=RevenueReport)
async def revenue_report(
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    try:
        return await ReportService.revenue(db, start, end)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


# ========== PATIENT RECORD ENDPOINTS ==========
async def _patient_or_404(db, patient_id: str):
    patient = await UserService.get_by_id(db, patient_id)
    if not patient:
        raise HTTPException(**ERRORS["USER_NOT_FOUND"])


@router.post("/patients/{patient_id}/medical-history", status_code=status.HTTP_201_CREATED)
async def add_medical_record(
    patient_id: str,
    record: MedicalRecordCreate,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await _patient_or_404(db, patient_id)
    return await PatientService.add_record(db, "medical_records", patient_id, record.model_dump(mode="json"))


@router.post("/patients/{patient_id}/prescriptions", status_code=status.HTTP_201_CREATED)
async def add_prescription(
    patient_id: str,
    record: PrescriptionCreate,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await _patient_or_404(db, patient_id)
    return await PatientService.add_record(db, "prescriptions", patient_id, record.model_dump(mode="json"))


@router.post("/patients/{patient_id}/test-results", status_code=status.HTTP_201_CREATED)
async def add_test_result(
    patient_id: str,
    record: TestResultCreate,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await _patient_or_404(db, patient_id)
    return await PatientService.add_record(db, "test_results", patient_id, record.model_dump(mode="json"))
