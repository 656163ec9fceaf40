from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from typing import Optional
import bcrypt
import logging

from constants.status import ROLES
from models.user import UserCreate, UserRegister
from utils.dateparse import utcnow
from utils.querybuilders import object_id, serialize

logger = logging.getLogger(__name__)

# fields a client is allowed to see
PUBLIC_PROJECTION = {"hashed_password": 0}


class EmailTakenError(ValueError):
    pass


def public_user(document: Optional[dict]) -> Optional[dict]:
    user = serialize(document)
    if user:
        user.pop("hashed_password", None)
    return user


class UserService:
    """Accounts, credentials and favorites."""

    # ================== PASSWORDS ==================
    @staticmethod
    def hash_password(password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt()).decode("utf-8")

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        if not hashed_password:
            return False
        return bcrypt.checkpw(plain_password.encode("utf-8")[:72], hashed_password.encode("utf-8"))

    # ================== LOOKUPS ==================
    @staticmethod
    async def get_by_email(db: AsyncIOMotorDatabase, email: str):
        return await db.users.find_one({"email": email.lower()})

    @staticmethod
    async def get_by_id(db: AsyncIOMotorDatabase, user_id: str):
        oid = object_id(user_id)
        if oid is None:
            return None
        return await db.users.find_one({"_id": oid})

    # ================== ACCOUNTS ==================
    @staticmethod
    async def create_user(db: AsyncIOMotorDatabase, data, role: str = ROLES["PATIENT"]) -> dict:
        """Insert a user; raises EmailTakenError on a duplicate email."""
        email = data.email.lower()
        if await db.users.find_one({"email": email}):
            raise EmailTakenError(email)

        document = {
            "name": data.name,
            "email": email,
            "hashed_password": UserService.hash_password(data.password),
            "role": role,
            "avatar": getattr(data, "avatar", None),
            "favorite_doctor_ids": [],
            "created_at": utcnow(),
        }
        try:
            result = await db.users.insert_one(document)
        except DuplicateKeyError:
            raise EmailTakenError(email)

        document["_id"] = result.inserted_id
        logger.info("User created", extra={"user_id": str(result.inserted_id), "role": role})
        return public_user(document)

    @staticmethod
    async def register(db: AsyncIOMotorDatabase, data: UserRegister) -> dict:
        return await UserService.create_user(db, data, role=ROLES["PATIENT"])

    @staticmethod
    async def create_by_admin(db: AsyncIOMotorDatabase, data: UserCreate) -> dict:
        return await UserService.create_user(db, data, role=data.role)

    @staticmethod
    async def authenticate(db: AsyncIOMotorDatabase, email: str, password: str) -> Optional[dict]:
        user = await UserService.get_by_email(db, email)
        if not user or not UserService.verify_password(password, user.get("hashed_password")):
            logger.warning("Failed login attempt", extra={"email": email})
            return None
        return public_user(user)

    @staticmethod
    async def update_user(db: AsyncIOMotorDatabase, user_id: str, update_data: dict) -> Optional[dict]:
        oid = object_id(user_id)
        if oid is None:
            return None
        if not update_data:
            return public_user(await db.users.find_one({"_id": oid}))
        updated = await db.users.find_one_and_update(
            {"_id": oid},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        return public_user(updated)

    @staticmethod
    async def change_password(db: AsyncIOMotorDatabase, user_id: str, current: str, new: str) -> bool:
        """False when the current password does not match."""
        user = await UserService.get_by_id(db, user_id)
        if not user or not UserService.verify_password(current, user.get("hashed_password")):
            return False
        await db.users.update_one(
            {"_id": user["_id"]},
            {"$set": {"hashed_password": UserService.hash_password(new)}},
        )
        logger.info("Password changed", extra={"user_id": user_id})
        return True

    @staticmethod
    async def list_users(db: AsyncIOMotorDatabase, role: str = None, page: int = 1, limit: int = 20):
        query = {"role": role} if role else {}
        total = await db.users.count_documents(query)
        cursor = (
            db.users.find(query, PUBLIC_PROJECTION)
            .sort("created_at", -1)
            .skip((page - 1) * limit)
            .limit(limit)
        )
        users = [serialize(u) for u in await cursor.to_list(length=limit)]
        return {"data": users, "total": total, "page": page, "limit": limit}

    @staticmethod
    async def delete_user(db: AsyncIOMotorDatabase, user_id: str) -> bool:
        oid = object_id(user_id)
        if oid is None:
            return False
        result = await db.users.delete_one({"_id": oid})
        if result.deleted_count:
            await db.patients.delete_one({"user_id": user_id})
        return result.deleted_count > 0

    # ================== FAVORITES ==================
    @staticmethod
    async def toggle_favorite(db: AsyncIOMotorDatabase, user_id: str, doctor_id: str) -> bool:
        """Flip the doctor in the user's favorites; returns the new state."""
        user = await UserService.get_by_id(db, user_id)
        if not user:
            return False
        if doctor_id in user.get("favorite_doctor_ids", []):
            await db.users.update_one({"_id": user["_id"]}, {"$pull": {"favorite_doctor_ids": doctor_id}})
            return False
        await db.users.update_one({"_id": user["_id"]}, {"$addToSet": {"favorite_doctor_ids": doctor_id}})
        return True
