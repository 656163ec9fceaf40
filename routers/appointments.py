from fastapi import APIRouter, Depends, HTTPException, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import date
from typing import Literal
import logging

from constants.status import ERRORS
from database import get_database
from dependencies.auth import get_current_user
from models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentList,
    AppointmentUpdate,
    CancelResult,
    RescheduleRequest,
)
from models.doctor import DaySlots
from services.appointment_service import AppointmentService, BookingError, SlotTakenError, StatusTransitionError
from services.doctor_service import DoctorService
from utils.dateparse import parse_datetime
from utils.responses import message_response

router = APIRouter(prefix="/appointments", tags=["Appointments"])
logger = logging.getLogger("appointments")


def _booking_failed(exc: BookingError):
    if isinstance(exc, SlotTakenError):
        return HTTPException(**ERRORS["APPOINTMENT_EXISTS"])
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _not_active(exc: StatusTransitionError):
    return HTTPException(status_code=ERRORS["APPOINTMENT_NOT_ACTIVE"]["status_code"], detail=str(exc))


# ---------------- SLOTS ---------------- #
@router.get("/available-slots/{doctor_id}", response_model=DaySlots)
async def available_slots(
    doctor_id: str,
    day: date = Query(..., alias="date"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    doctor = await DoctorService.get_doctor(db, doctor_id)
    if not doctor:
        raise HTTPException(**ERRORS["DOCTOR_NOT_FOUND"])
    slots = await DoctorService.day_availability(db, doctor, day)
    return {"doctor_id": doctor_id, "day": day, "slots": slots}


# ---------------- CRUD ROUTES ---------------- #
@router.post("", response_model=Appointment, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    data: AppointmentCreate,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    try:
        inserted = await AppointmentService.create_appointment(db, user, data)
    except BookingError as exc:
        logger.warning("Booking rejected: %s", exc, extra={"doctor_id": data.doctor_id})
        raise _booking_failed(exc)

    if not inserted:
        raise HTTPException(**ERRORS["DOCTOR_NOT_FOUND"])
    logger.info("Appointment created", extra={"appointment_id": inserted["id"]})
    return inserted


@router.get("", response_model=AppointmentList)
async def read_appointments(
    scope: Literal["upcoming", "past", "all"] = "all",
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    appointments = await AppointmentService.list_for_patient(db, user["id"], scope)
    logger.info("Fetched appointments", extra={"count": len(appointments)})
    return {"data": appointments, "total": len(appointments)}


@router.get("/{appointment_id}", response_model=Appointment)
async def read_appointment(
    appointment_id: str,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    appt = await AppointmentService.get_appointment(db, appointment_id, user)
    if not appt:
        logger.warning("Appointment not found", extra={"appointment_id": appointment_id})
        raise HTTPException(**ERRORS["APPOINTMENT_NOT_FOUND"])
    return appt


@router.put("/{appointment_id}", response_model=Appointment)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    # drop empty values so "" won't overwrite existing text
    update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v not in (None, "")}
    if not update_data:
        raise HTTPException(**ERRORS["NO_FIELDS_TO_UPDATE"])

    try:
        updated = await AppointmentService.update_appointment(db, appointment_id, user, update_data)
    except StatusTransitionError as exc:
        raise _not_active(exc)
    if not updated:
        raise HTTPException(**ERRORS["APPOINTMENT_NOT_FOUND"])
    logger.info("Appointment updated", extra={"appointment_id": appointment_id})
    return updated


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    if not await AppointmentService.delete_appointment(db, appointment_id, user):
        logger.warning("Appointment not found for deletion", extra={"appointment_id": appointment_id})
        raise HTTPException(**ERRORS["APPOINTMENT_NOT_FOUND"])
    logger.info("Appointment deleted", extra={"appointment_id": appointment_id})
    return message_response("Appointment deleted successfully")


# ---------------- LIFECYCLE ---------------- #
@router.post("/{appointment_id}/cancel", response_model=CancelResult)
async def cancel_appointment(
    appointment_id: str,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    try:
        result = await AppointmentService.cancel_appointment(db, appointment_id, user)
    except StatusTransitionError as exc:
        raise _not_active(exc)
    if result is None:
        raise HTTPException(**ERRORS["APPOINTMENT_NOT_FOUND"])

    appointment, late = result
    return {"appointment": appointment, "late_cancellation": late}


@router.post("/{appointment_id}/reschedule", response_model=Appointment)
async def reschedule_appointment(
    appointment_id: str,
    data: RescheduleRequest,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    try:
        new_time = parse_datetime(data.new_date_time)
        updated = await AppointmentService.reschedule_appointment(db, appointment_id, user, new_time)
    except StatusTransitionError as exc:
        raise _not_active(exc)
    except BookingError as exc:
        raise _booking_failed(exc)
    except ValueError as exc:
        # unparseable or past time
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    if not updated:
        raise HTTPException(**ERRORS["APPOINTMENT_NOT_FOUND"])
    return updated
