from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from datetime import datetime, timedelta
from typing import Optional
import logging

from constants.scheduling import LATE_CANCELLATION_HOURS
from constants.status import ACTIVE_STATUSES, APPOINTMENT_STATUS, STATUS_TRANSITIONS
from models.appointment import AppointmentCreate
from services.doctor_service import DoctorService
from utils.dateparse import utcnow
from utils.querybuilders import AppointmentQuery, serialize
from utils.slots import is_on_grid, schedule_of

logger = logging.getLogger("appointments")


class BookingError(ValueError):
    """The requested time cannot be booked."""


class SlotTakenError(BookingError):
    pass


class StatusTransitionError(ValueError):
    pass


def present(document: Optional[dict], now: datetime = None) -> Optional[dict]:
    """Serialize an appointment and flag whether it is still ahead of us."""
    appt = serialize(document)
    if appt:
        appt["is_upcoming"] = appt["date_time"] > (now or utcnow())
    return appt


class AppointmentService:
    """All database logic related to appointments."""

    @staticmethod
    async def find_duplicate(
        db: AsyncIOMotorDatabase,
        patient_id: str,
        doctor_id: str,
        date_time: datetime,
        exclude_id: str = None,
    ):
        """Check if the patient or the doctor already holds this time."""
        query = AppointmentQuery.duplicate_check(patient_id, doctor_id, date_time, exclude_id)
        return await db.appointments.find_one(query)

    @staticmethod
    def check_slot(doctor: dict, date_time: datetime, now: datetime):
        if date_time <= now:
            raise BookingError("Appointments must be booked in the future")
        if not is_on_grid(doctor, date_time):
            raise BookingError("Requested time is outside the doctor's schedule")

    @staticmethod
    async def create_appointment(
        db: AsyncIOMotorDatabase,
        patient: dict,
        data: AppointmentCreate,
        now: datetime = None,
    ) -> Optional[dict]:
        """Book a slot. Returns None when the doctor does not exist."""
        now = now or utcnow()
        doctor = await DoctorService.get_doctor(db, data.doctor_id)
        if not doctor:
            return None

        AppointmentService.check_slot(doctor, data.date_time, now)
        if await AppointmentService.find_duplicate(db, patient["id"], doctor["id"], data.date_time):
            raise SlotTakenError("Slot already booked")

        document = {
            "patient_id": patient["id"],
            "patient_name": patient.get("name"),
            "doctor_id": doctor["id"],
            "doctor": {
                "name": doctor["name"],
                "specialty": doctor["specialty"],
                "avatar": doctor.get("avatar"),
                "location": doctor.get("location"),
            },
            "date_time": data.date_time,
            "duration_minutes": schedule_of(doctor)["slot_minutes"],
            "reason": data.reason,
            "notes": data.notes,
            "status": APPOINTMENT_STATUS["SCHEDULED"],
            "fee": doctor.get("consultation_fee", 0),
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await db.appointments.insert_one(document)
        except DuplicateKeyError:
            # lost a race for the slot after the duplicate check
            raise SlotTakenError("Slot already booked")
        document["_id"] = result.inserted_id
        return present(document, now)

    @staticmethod
    async def list_for_patient(db: AsyncIOMotorDatabase, patient_id: str, scope: str = "all", now: datetime = None):
        now = now or utcnow()
        direction = 1 if scope == "upcoming" else -1
        cursor = db.appointments.find(AppointmentQuery.for_patient(patient_id, scope, now)).sort("date_time", direction)
        return [present(a, now) for a in await cursor.to_list(length=None)]

    @staticmethod
    async def get_appointment(db: AsyncIOMotorDatabase, appointment_id: str, user: dict) -> Optional[dict]:
        """Fetch for the owner, or for any admin."""
        if user.get("role") == "admin":
            query = AppointmentQuery.by_id(appointment_id)
        else:
            query = AppointmentQuery.owned_by(appointment_id, user["id"])
        return present(await db.appointments.find_one(query))

    @staticmethod
    async def get_owned(db: AsyncIOMotorDatabase, appointment_id: str, user: dict) -> Optional[dict]:
        """Fetch only when the user booked it; changes are owner-only, even for admins."""
        return present(await db.appointments.find_one(AppointmentQuery.owned_by(appointment_id, user["id"])))

    @staticmethod
    async def update_appointment(db: AsyncIOMotorDatabase, appointment_id: str, user: dict, update_data: dict):
        appt = await AppointmentService.get_owned(db, appointment_id, user)
        if not appt:
            return None
        if appt["status"] not in ACTIVE_STATUSES:
            raise StatusTransitionError("Only active appointments can be edited")

        update_data["updated_at"] = utcnow()
        updated = await db.appointments.find_one_and_update(
            AppointmentQuery.by_id(appointment_id),
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        return present(updated)

    @staticmethod
    async def delete_appointment(db: AsyncIOMotorDatabase, appointment_id: str, user: dict) -> bool:
        appt = await AppointmentService.get_owned(db, appointment_id, user)
        if not appt:
            return False
        result = await db.appointments.delete_one(AppointmentQuery.by_id(appointment_id))
        return result.deleted_count > 0

    @staticmethod
    async def cancel_appointment(db: AsyncIOMotorDatabase, appointment_id: str, user: dict, now: datetime = None):
        """Cancel an active appointment; returns (appointment, late_cancellation) or None."""
        now = now or utcnow()
        appt = await AppointmentService.get_owned(db, appointment_id, user)
        if not appt:
            return None
        if appt["status"] not in ACTIVE_STATUSES:
            raise StatusTransitionError(f"Appointment is already {appt['status']}")

        late = appt["date_time"] - now < timedelta(hours=LATE_CANCELLATION_HOURS)
        updated = await db.appointments.find_one_and_update(
            AppointmentQuery.by_id(appointment_id),
            {"$set": {
                "status": APPOINTMENT_STATUS["CANCELLED"],
                "cancelled_at": now,
                "updated_at": now,
            }},
            return_document=ReturnDocument.AFTER,
        )
        logger.info("Appointment cancelled", extra={"appointment_id": appointment_id, "late": late})
        return present(updated, now), late

    @staticmethod
    async def reschedule_appointment(
        db: AsyncIOMotorDatabase,
        appointment_id: str,
        user: dict,
        new_date_time: datetime,
        now: datetime = None,
    ):
        now = now or utcnow()
        appt = await AppointmentService.get_owned(db, appointment_id, user)
        if not appt:
            return None
        if appt["status"] not in ACTIVE_STATUSES:
            raise StatusTransitionError(f"Appointment is already {appt['status']}")

        doctor = await DoctorService.get_doctor(db, appt["doctor_id"])
        if not doctor:
            raise BookingError("Doctor is no longer available")

        AppointmentService.check_slot(doctor, new_date_time, now)
        if await AppointmentService.find_duplicate(
            db, appt["patient_id"], appt["doctor_id"], new_date_time, exclude_id=appointment_id
        ):
            raise SlotTakenError("Slot already booked")

        try:
            updated = await db.appointments.find_one_and_update(
                AppointmentQuery.by_id(appointment_id),
                {"$set": {
                    "date_time": new_date_time,
                    "status": APPOINTMENT_STATUS["SCHEDULED"],
                    "updated_at": now,
                }},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise SlotTakenError("Slot already booked")
        logger.info("Appointment rescheduled", extra={"appointment_id": appointment_id})
        return present(updated, now)

    # ================== ADMIN ==================
    @staticmethod
    async def list_all(db: AsyncIOMotorDatabase, query: dict, limit: int = 100):
        cursor = db.appointments.find(query).sort("date_time", -1).limit(limit)
        return [present(a) for a in await cursor.to_list(length=limit)]

    @staticmethod
    async def set_status(db: AsyncIOMotorDatabase, appointment_id: str, new_status: str):
        appt = await db.appointments.find_one(AppointmentQuery.by_id(appointment_id))
        if not appt:
            return None

        allowed = STATUS_TRANSITIONS.get(appt["status"], set())
        if new_status not in allowed:
            raise StatusTransitionError(f"Cannot change status from {appt['status']} to {new_status}")

        now = utcnow()
        changes = {"status": new_status, "updated_at": now}
        if new_status == APPOINTMENT_STATUS["CANCELLED"]:
            changes["cancelled_at"] = now
        updated = await db.appointments.find_one_and_update(
            AppointmentQuery.by_id(appointment_id),
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        logger.info("Appointment status changed", extra={"appointment_id": appointment_id, "status": new_status})
        return present(updated, now)
