from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import List
import logging

from constants.status import ACTIVE_STATUSES
from encrypt.encryption import decrypt_fields, encrypt_fields
from services.appointment_service import AppointmentService
from utils.dateparse import utcnow
from utils.querybuilders import serialize

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = ["phone", "address"]
NESTED_SENSITIVE_FIELDS = {
    "emergency_contact": ["phone"],
    "insurance": ["policy_number"],
}

# collection name -> field used for newest-first ordering
RECORD_COLLECTIONS = {
    "medical_records": "visit_date",
    "prescriptions": "start_date",
    "test_results": "test_date",
}


def _encrypt_profile(data: dict) -> dict:
    encrypted = encrypt_fields(data, SENSITIVE_FIELDS)
    for parent, fields in NESTED_SENSITIVE_FIELDS.items():
        if isinstance(encrypted.get(parent), dict):
            encrypted[parent] = encrypt_fields(encrypted[parent], fields)
    return encrypted


def _profile_changes(data: dict) -> tuple:
    """
    Turn a partial profile into $set and $unset documents. Nested objects are
    flattened to dotted keys so unsent siblings are kept; a null object
    clears it.
    """
    to_set, to_unset = {}, {}
    for key, value in _encrypt_profile(data).items():
        if key in NESTED_SENSITIVE_FIELDS and value is None:
            to_unset[key] = ""
        elif key in NESTED_SENSITIVE_FIELDS:
            for field, field_value in value.items():
                to_set[f"{key}.{field}"] = field_value
        else:
            to_set[key] = value
    return to_set, to_unset


def _decrypt_profile(document: dict) -> dict:
    decrypted = decrypt_fields(document, SENSITIVE_FIELDS)
    for parent, fields in NESTED_SENSITIVE_FIELDS.items():
        if isinstance(decrypted.get(parent), dict):
            decrypted[parent] = decrypt_fields(decrypted[parent], fields)
    return decrypted


class PatientService:
    """Patient health profile and records. Sensitive fields are encrypted at rest."""

    @staticmethod
    async def get_profile(db: AsyncIOMotorDatabase, user: dict) -> dict:
        document = await db.patients.find_one({"user_id": user["id"]}, {"_id": 0})
        profile = _decrypt_profile(document) if document else {"user_id": user["id"]}
        profile["name"] = user["name"]
        profile["email"] = user["email"]
        return profile

    @staticmethod
    async def update_profile(db: AsyncIOMotorDatabase, user: dict, update_data: dict) -> dict:
        """Partial upsert; ``update_data`` is JSON-mode model output."""
        if update_data:
            to_set, to_unset = _profile_changes(update_data)
            changes = {"$set": {**to_set, "updated_at": utcnow()}}
            if to_unset:
                changes["$unset"] = to_unset
            await db.patients.update_one({"user_id": user["id"]}, changes, upsert=True)
            logger.info("Patient profile updated", extra={"user_id": user["id"]})
        return await PatientService.get_profile(db, user)

    @staticmethod
    async def list_records(db: AsyncIOMotorDatabase, collection: str, patient_id: str) -> List[dict]:
        order_field = RECORD_COLLECTIONS[collection]
        cursor = db[collection].find({"patient_id": patient_id}).sort(order_field, -1)
        return [serialize(r) for r in await cursor.to_list(length=None)]

    @staticmethod
    async def add_record(db: AsyncIOMotorDatabase, collection: str, patient_id: str, record: dict) -> dict:
        if collection not in RECORD_COLLECTIONS:
            raise ValueError(f"Unknown record collection: {collection}")
        document = {**record, "patient_id": patient_id, "created_at": utcnow()}
        result = await db[collection].insert_one(document)
        document["_id"] = result.inserted_id
        logger.info("Patient record added", extra={"collection": collection, "patient_id": patient_id})
        return serialize(document)

    @staticmethod
    async def dashboard(db: AsyncIOMotorDatabase, user: dict) -> dict:
        now = utcnow()
        # cancelled visits still in the future do not count as upcoming
        upcoming = [
            a for a in await AppointmentService.list_for_patient(db, user["id"], "upcoming", now)
            if a["status"] in ACTIVE_STATUSES
        ]
        past = await AppointmentService.list_for_patient(db, user["id"], "past", now)
        return {
            "upcoming": len(upcoming),
            "past": len(past),
            "favorites": len(user.get("favorite_doctor_ids") or []),
            "next_appointment": upcoming[0] if upcoming else None,
            "generated_at": now,
        }
