import jwt
import uuid
import logging
from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from database import get_database
from constants.status import ERRORS, ROLES
from services.user_service import UserService, public_user
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", 60))

if not JWT_SECRET_KEY:
    logger.critical("JWT_SECRET_KEY is not set in .env")
    raise ValueError("JWT_SECRET_KEY is not set in .env")

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str):
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token with a unique id so it can be revoked."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")
    if payload.get("sub") is None:
        raise _unauthorized("Invalid token")
    return payload


async def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> dict:
    """Validated claims of the bearer token; rejects revoked tokens."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if await db.revoked_tokens.find_one({"jti": payload.get("jti")}):
        raise _unauthorized("Token revoked")
    return payload


async def get_current_user(
    payload: dict = Depends(get_token_payload),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> dict:
    user = await UserService.get_by_id(db, payload["sub"])
    if user is None:
        raise _unauthorized("User no longer exists")
    return public_user(user)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Optional[dict]:
    """Current user when a valid token is sent, otherwise None."""
    if credentials is None:
        return None
    try:
        payload = await get_token_payload(credentials, db)
    except HTTPException:
        return None
    return public_user(await UserService.get_by_id(db, payload["sub"]))


async def get_current_admin_user(user: dict = Depends(get_current_user)) -> dict:
    """Get the current user and verify the admin role."""
    if user.get("role") != ROLES["ADMIN"]:
        raise HTTPException(**ERRORS["NOT_ENOUGH_PERMISSIONS"])
    return user


async def revoke_token(db: AsyncIOMotorDatabase, payload: dict) -> None:
    expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None)
    await db.revoked_tokens.update_one(
        {"jti": payload["jti"]},
        {"$set": {"jti": payload["jti"], "expires_at": expires_at}},
        upsert=True,
    )
