from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from motor.motor_asyncio import AsyncIOMotorDatabase
import logging

from constants.status import ERRORS
from database import get_database
from dependencies.auth import create_access_token, get_current_user, get_token_payload, revoke_token
from models.user import AuthResponse, PasswordChange, Token, UserLogin, UserPublic, UserRegister, UserUpdate
from services.user_service import EmailTakenError, UserService
from utils.responses import message_response

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)
logger = logging.getLogger("auth")


def _issue(user: dict) -> dict:
    token = create_access_token(data={"sub": user["id"], "role": user["role"]})
    return {"access_token": token, "token_type": "bearer", "user": user}


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserRegister, db: AsyncIOMotorDatabase = Depends(get_database)):
    try:
        user = await UserService.register(db, data)
    except EmailTakenError:
        raise HTTPException(**ERRORS["EMAIL_TAKEN"])
    return _issue(user)


@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, db: AsyncIOMotorDatabase = Depends(get_database)):
    user = await UserService.authenticate(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(**ERRORS["INVALID_CREDENTIALS"])
    logger.info("User logged in", extra={"user_id": user["id"]})
    return _issue(user)


@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    OAuth2 password flow for the interactive docs; username is the email.
    """
    user = await UserService.authenticate(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(**ERRORS["INVALID_CREDENTIALS"])
    issued = _issue(user)
    return {"access_token": issued["access_token"], "token_type": "bearer"}


@router.post("/logout")
async def logout(
    payload: dict = Depends(get_token_payload),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    await revoke_token(db, payload)
    logger.info("User logged out", extra={"user_id": payload["sub"]})
    return message_response("Logged out")


@router.get("/me", response_model=UserPublic)
async def read_me(user: dict = Depends(get_current_user)):
    return user


@router.put("/me", response_model=UserPublic)
async def update_me(
    data: UserUpdate,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    return await UserService.update_user(db, user["id"], update_data)


@router.put("/change-password")
async def change_password(
    data: PasswordChange,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    changed = await UserService.change_password(db, user["id"], data.current_password, data.new_password)
    if not changed:
        raise HTTPException(**ERRORS["WRONG_PASSWORD"])
    return message_response("Password updated")
