import os
import logging
from motor.motor_asyncio import AsyncIOMotorClient
from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from dotenv import load_dotenv

from constants.status import ACTIVE_STATUSES

logger = logging.getLogger(__name__)

# --------------------------------
# Environment Variables
# --------------------------------
load_dotenv()

MONGODB_URI = os.getenv("MONGODB_URI")
DB_NAME = os.getenv("DB_NAME")
SEED_DOCTORS = os.getenv("SEED_DOCTORS", "false").lower() in ("1", "true", "yes")

if not MONGODB_URI:
    logger.critical(" MONGODB_URI is not set in .env")
    raise ValueError(" MONGODB_URI is not set in .env")

if not DB_NAME:
    logger.critical(" DB_NAME is not set in .env")
    raise ValueError(" DB_NAME is not set in .env")


async def ensure_indexes(db):
    await db.users.create_index("email", unique=True)
    # one active appointment per doctor slot and per patient slot
    active = {"status": {"$in": ACTIVE_STATUSES}}
    await db.appointments.create_index(
        [("doctor_id", 1), ("date_time", 1)],
        name="active_doctor_slot", unique=True, partialFilterExpression=active,
    )
    await db.appointments.create_index(
        [("patient_id", 1), ("date_time", 1)],
        name="active_patient_slot", unique=True, partialFilterExpression=active,
    )
    await db.appointments.create_index([("patient_id", 1), ("date_time", -1)])
    await db.patients.create_index("user_id", unique=True)
    await db.revoked_tokens.create_index("jti", unique=True)
    # drop revoked entries once the token would have expired anyway
    await db.revoked_tokens.create_index("expires_at", expireAfterSeconds=0)


# --------------------------------
# MongoDB Connection (Lifespan)
# --------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.mongodb_client = AsyncIOMotorClient(MONGODB_URI)
    try:
        app.mongodb = app.mongodb_client[DB_NAME]
        await ensure_indexes(app.mongodb)
        logger.info("MongoDB connected to %s", DB_NAME)

        if SEED_DOCTORS:
            from scripts.seed_doctors import seed_if_empty
            inserted = await seed_if_empty(app.mongodb)
            logger.info("Seeded %s doctors", inserted)
        yield
    except Exception as e:
        logger.exception(" MongoDB connection error: %s", e)
        raise
    finally:
        app.mongodb_client.close()
        logger.warning(" MongoDB disconnected.")


# --------------------------------
# Dependency
# --------------------------------
async def get_database(request: Request):
    return request.app.mongodb
