"""Create the first admin account.

    python -m scripts.create_admin --name "Clinic Admin" --email admin@example.com
"""
import argparse
import asyncio
import getpass
import logging

from motor.motor_asyncio import AsyncIOMotorClient

from models.user import UserCreate
from services.user_service import EmailTakenError, UserService

logger = logging.getLogger(__name__)


async def main(name: str, email: str, password: str):
    from database import DB_NAME, MONGODB_URI

    client = AsyncIOMotorClient(MONGODB_URI)
    try:
        admin = await UserService.create_by_admin(
            client[DB_NAME],
            UserCreate(name=name, email=email, password=password, role="admin"),
        )
        logger.info("Admin created: %s (%s)", admin["email"], admin["id"])
    except EmailTakenError:
        logger.error("A user with email %s already exists", email)
    finally:
        client.close()


if __name__ == "__main__":
    from log_config.logging_config import setup_logging
    setup_logging()

    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    args = parser.parse_args()
    asyncio.run(main(args.name, args.email, getpass.getpass("Password: ")))
