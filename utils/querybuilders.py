from bson import ObjectId
from bson.errors import InvalidId
from datetime import datetime, timedelta
from typing import Optional

from constants.status import ACTIVE_STATUSES


def object_id(value: str) -> Optional[ObjectId]:
    """ObjectId for a path id, or None when the string is malformed."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def by_id(value: str) -> dict:
    return {"_id": object_id(value)}


def serialize(document: Optional[dict]) -> Optional[dict]:
    """Swap Mongo's ``_id`` for a string ``id``."""
    if document is None:
        return None
    document = dict(document)
    document["id"] = str(document.pop("_id"))
    return document


class AppointmentQuery:
    """Standard appointment queries."""

    @staticmethod
    def by_id(appointment_id: str):
        return by_id(appointment_id)

    @staticmethod
    def owned_by(appointment_id: str, patient_id: str):
        return {"_id": object_id(appointment_id), "patient_id": patient_id}

    @staticmethod
    def duplicate_check(patient_id: str, doctor_id: str, date_time: datetime, exclude_id: str = None):
        """Active appointment held by the same patient or the same doctor at this time."""
        query = {
            "date_time": date_time,
            "status": {"$in": ACTIVE_STATUSES},
            "$or": [
                {"patient_id": patient_id},
                {"doctor_id": doctor_id},
            ],
        }
        if exclude_id:
            query["_id"] = {"$ne": object_id(exclude_id)}
        return query

    @staticmethod
    def booked_for_doctors(doctor_ids, start: datetime, end: datetime):
        return {
            "doctor_id": {"$in": list(doctor_ids)},
            "status": {"$in": ACTIVE_STATUSES},
            "date_time": {"$gte": start, "$lt": end},
        }

    @staticmethod
    def for_patient(patient_id: str, scope: str, now: datetime):
        query = {"patient_id": patient_id}
        if scope == "upcoming":
            query["date_time"] = {"$gt": now}
        elif scope == "past":
            query["date_time"] = {"$lte": now}
        return query

    @staticmethod
    def admin_filter(status: str = None, doctor_id: str = None, day: datetime = None):
        query = {}
        if status:
            query["status"] = status
        if doctor_id:
            query["doctor_id"] = doctor_id
        if day:
            query["date_time"] = {"$gte": day, "$lt": day + timedelta(days=1)}
        return query
