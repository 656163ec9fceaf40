from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
import logging

from constants.scheduling import SLOT_HORIZON_DAYS
from models.doctor import DoctorCreate, DoctorQuery, check_hours
from utils.dateparse import utcnow
from utils.doctor_filters import query_doctors
from utils.querybuilders import AppointmentQuery, object_id, serialize
from utils.slots import open_days, open_slots, upcoming_slots

logger = logging.getLogger("doctors")


class DoctorService:
    """Doctor catalog and availability."""

    # ================== CRUD ==================
    @staticmethod
    async def get_doctor(db: AsyncIOMotorDatabase, doctor_id: str) -> Optional[dict]:
        oid = object_id(doctor_id)
        if oid is None:
            return None
        return serialize(await db.doctors.find_one({"_id": oid}))

    @staticmethod
    async def create_doctor(db: AsyncIOMotorDatabase, doctor: DoctorCreate) -> dict:
        data = doctor.model_dump()
        result = await db.doctors.insert_one(data)
        data["_id"] = result.inserted_id
        logger.info("Doctor created", extra={"doctor_id": str(result.inserted_id)})
        return serialize(data)

    @staticmethod
    async def update_doctor(db: AsyncIOMotorDatabase, doctor_id: str, update_data: dict) -> Optional[dict]:
        """Partial update; raises ValueError when the merged hours are inverted."""
        oid = object_id(doctor_id)
        if oid is None:
            return None
        if ("start_time" in update_data) != ("end_time" in update_data):
            current = await db.doctors.find_one({"_id": oid}, {"start_time": 1, "end_time": 1})
            if current is None:
                return None
            merged = {**current, **update_data}
            check_hours(merged.get("start_time"), merged.get("end_time"))
        updated = await db.doctors.find_one_and_update(
            {"_id": oid},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        if updated:
            logger.info("Updated doctor", extra={"doctor_id": doctor_id})
        return serialize(updated)

    @staticmethod
    async def delete_doctor(db: AsyncIOMotorDatabase, doctor_id: str) -> bool:
        oid = object_id(doctor_id)
        if oid is None:
            return False
        result = await db.doctors.delete_one({"_id": oid})
        return result.deleted_count > 0

    @staticmethod
    async def all_doctors(db: AsyncIOMotorDatabase) -> List[dict]:
        """The whole catalog in insertion order."""
        cursor = db.doctors.find().sort("_id", 1)
        return [serialize(d) for d in await cursor.to_list(length=None)]

    @staticmethod
    async def list_specialties(db: AsyncIOMotorDatabase) -> List[str]:
        return sorted(set(await db.doctors.distinct("specialty")))

    # ================== AVAILABILITY ==================
    @staticmethod
    async def booked_times(
        db: AsyncIOMotorDatabase,
        doctor_ids: List[str],
        start: datetime,
        end: datetime,
    ) -> Dict[str, List[datetime]]:
        """Active appointment times per doctor in [start, end)."""
        cursor = db.appointments.find(
            AppointmentQuery.booked_for_doctors(doctor_ids, start, end),
            {"doctor_id": 1, "date_time": 1},
        )
        booked = defaultdict(list)
        for appt in await cursor.to_list(length=None):
            booked[appt["doctor_id"]].append(appt["date_time"])
        return booked

    @staticmethod
    async def with_upcoming_slots(
        db: AsyncIOMotorDatabase,
        doctors: List[dict],
        now: datetime,
    ) -> List[dict]:
        start = datetime.combine(now.date(), datetime.min.time())
        booked = await DoctorService.booked_times(
            db, [d["id"] for d in doctors], start, start + timedelta(days=SLOT_HORIZON_DAYS)
        )
        annotated = []
        for doctor in doctors:
            doctor = dict(doctor)
            taken = booked.get(doctor["id"], [])
            doctor["available_slots"] = upcoming_slots(doctor, taken, now)
            doctor["open_days"] = open_days(doctor, taken, now)
            annotated.append(doctor)
        return annotated

    @staticmethod
    async def day_availability(db: AsyncIOMotorDatabase, doctor: dict, day: date, now: datetime = None):
        now = now or utcnow()
        start = datetime.combine(day, datetime.min.time())
        booked = await DoctorService.booked_times(db, [doctor["id"]], start, start + timedelta(days=1))
        return open_slots(doctor, day, booked.get(doctor["id"], []), now)

    @staticmethod
    async def availability(db: AsyncIOMotorDatabase, doctor: dict, now: datetime = None) -> dict:
        now = now or utcnow()
        doctor = (await DoctorService.with_upcoming_slots(db, [doctor], now))[0]
        slots = doctor["available_slots"]
        return {
            "available": bool(slots),
            "next_available": slots[0] if slots else None,
            "slots": slots,
        }

    # ================== CATALOG ==================
    @staticmethod
    async def search(
        db: AsyncIOMotorDatabase,
        query: DoctorQuery,
        favorite_ids: List[str] = (),
        now: datetime = None,
    ) -> dict:
        now = now or utcnow()
        doctors = await DoctorService.with_upcoming_slots(db, await DoctorService.all_doctors(db), now)
        favorites = set(favorite_ids)
        for doctor in doctors:
            doctor["is_favorite"] = doctor["id"] in favorites

        page = query_doctors(doctors, query, now=now)
        logger.info(
            "Doctor search",
            extra={"total": page["total"], "page": page["page"], "sort": query.sort},
        )
        return page
