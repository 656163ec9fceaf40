"""Load the starter doctor catalog into MongoDB.

    python -m scripts.seed_doctors           # only if the collection is empty
    python -m scripts.seed_doctors --force   # wipe and reload
"""
import argparse
import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorClient

from models.doctor import DoctorCreate

logger = logging.getLogger(__name__)

DOCTORS = [
    {
        "name": "Sarah Johnson",
        "specialty": "Cardiology",
        "experience": 12,
        "rating": 4.8,
        "review_count": 128,
        "consultation_fee": 150,
        "location": "Main Hospital, Floor 3",
        "avatar": "https://randomuser.me/api/portraits/women/32.jpg",
        "bio": "Board-certified cardiologist focused on interventional cardiology and preventive care.",
    },
    {
        "name": "Michael Chen",
        "specialty": "Neurology",
        "experience": 8,
        "rating": 4.9,
        "review_count": 215,
        "consultation_fee": 140,
        "location": "Neurology Center, Building B",
        "avatar": "https://randomuser.me/api/portraits/men/45.jpg",
        "bio": "Neurologist treating migraines and movement disorders.",
        "working_days": [0, 1, 2, 3],
    },
    {
        "name": "Emily Rodriguez",
        "specialty": "Pediatrics",
        "experience": 6,
        "rating": 4.7,
        "review_count": 176,
        "consultation_fee": 90,
        "location": "Children's Wing, Floor 1",
        "avatar": "https://randomuser.me/api/portraits/women/68.jpg",
        "bio": "Pediatrician interested in childhood development and nutrition. Speaks English and Spanish.",
        "working_days": [0, 1, 2, 3, 4, 5],
    },
    {
        "name": "David Kim",
        "specialty": "Orthopedics",
        "experience": 15,
        "rating": 4.9,
        "review_count": 342,
        "consultation_fee": 180,
        "location": "Orthopedic Center, Floor 2",
        "avatar": "https://randomuser.me/api/portraits/men/22.jpg",
        "bio": "Orthopedic surgeon specializing in sports medicine and joint replacement.",
        "start_time": "08:00",
        "end_time": "14:00",
    },
    {
        "name": "Priya Patel",
        "specialty": "Dermatology",
        "experience": 7,
        "rating": 4.8,
        "review_count": 198,
        "consultation_fee": 120,
        "location": "Dermatology Clinic, Building C",
        "avatar": "https://randomuser.me/api/portraits/women/54.jpg",
        "bio": "Dermatologist in medical and cosmetic dermatology with a focus on skin cancer prevention.",
        "slot_minutes": 20,
    },
    {
        "name": "James Wilson",
        "specialty": "Ophthalmology",
        "experience": 11,
        "rating": 4.7,
        "review_count": 231,
        "consultation_fee": 130,
        "location": "Eye Center, Floor 1",
        "avatar": "https://randomuser.me/api/portraits/men/67.jpg",
        "bio": "Ophthalmologist specializing in cataract and refractive surgery.",
    },
    {
        "name": "Lisa Wong",
        "specialty": "Gynecology",
        "experience": 9,
        "rating": 4.9,
        "review_count": 287,
        "consultation_fee": 140,
        "location": "Women's Health Center, Floor 2",
        "avatar": "https://randomuser.me/api/portraits/women/29.jpg",
        "bio": "Gynecologist providing comprehensive women's health services and preventive care.",
    },
    {
        "name": "Robert Taylor",
        "specialty": "Urology",
        "experience": 14,
        "rating": 4.8,
        "review_count": 203,
        "consultation_fee": 160,
        "location": "Urology Department, Floor 3",
        "avatar": "https://randomuser.me/api/portraits/men/53.jpg",
        "bio": "Urologist experienced in minimally invasive procedures.",
        "working_days": [1, 3],
    },
]


async def seed(db, force: bool = False) -> int:
    if force:
        await db.doctors.delete_many({})
    documents = [DoctorCreate(**doctor).model_dump() for doctor in DOCTORS]
    result = await db.doctors.insert_many(documents)
    return len(result.inserted_ids)


async def seed_if_empty(db) -> int:
    if await db.doctors.count_documents({}) > 0:
        logger.info("Doctor catalog already populated, skipping seed")
        return 0
    return await seed(db)


async def main(force: bool):
    from database import DB_NAME, MONGODB_URI

    client = AsyncIOMotorClient(MONGODB_URI)
    try:
        db = client[DB_NAME]
        inserted = await seed(db, force=True) if force else await seed_if_empty(db)
        logger.info("Inserted %s doctors into %s", inserted, DB_NAME)
    finally:
        client.close()


if __name__ == "__main__":
    from log_config.logging_config import setup_logging
    setup_logging()

    parser = argparse.ArgumentParser(description="Seed the doctor catalog")
    parser.add_argument("--force", action="store_true", help="delete existing doctors first")
    asyncio.run(main(parser.parse_args().force))
