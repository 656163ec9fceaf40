from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Annotated, List, Optional
import logging

from constants.status import ERRORS
from database import get_database
from dependencies.auth import get_current_user, get_optional_user
from models.doctor import Doctor, DoctorAvailability, DoctorPage, DoctorQuery, FavoriteToggle
from services.doctor_service import DoctorService
from services.user_service import UserService

router = APIRouter(prefix="/doctors", tags=["Doctors"])
logger = logging.getLogger("doctors")


#---------------- Search the catalog ----------------#
@router.get("", response_model=DoctorPage)
async def list_doctors(
    query: Annotated[DoctorQuery, Query()],
    user: Optional[dict] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    favorites = user.get("favorite_doctor_ids", []) if user else []
    return await DoctorService.search(db, query, favorite_ids=favorites)


@router.get("/specialties", response_model=List[str])
async def list_specialties(db: AsyncIOMotorDatabase = Depends(get_database)):
    return await DoctorService.list_specialties(db)


#---------------- Get doctor by ID ----------------#
@router.get("/{doctor_id}", response_model=Doctor)
async def get_doctor(
    doctor_id: str,
    user: Optional[dict] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    doctor = await DoctorService.get_doctor(db, doctor_id)
    if not doctor:
        logger.warning("Doctor not found with doctor_id: %s", doctor_id)
        raise HTTPException(**ERRORS["DOCTOR_NOT_FOUND"])

    availability = await DoctorService.availability(db, doctor)
    doctor["available_slots"] = availability["slots"]
    doctor["is_favorite"] = bool(user) and doctor_id in user.get("favorite_doctor_ids", [])
    return doctor


@router.get("/{doctor_id}/availability", response_model=DoctorAvailability)
async def get_availability(doctor_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    doctor = await DoctorService.get_doctor(db, doctor_id)
    if not doctor:
        raise HTTPException(**ERRORS["DOCTOR_NOT_FOUND"])
    return await DoctorService.availability(db, doctor)


@router.post("/{doctor_id}/favorite", response_model=FavoriteToggle)
async def toggle_favorite(
    doctor_id: str,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    if not await DoctorService.get_doctor(db, doctor_id):
        raise HTTPException(**ERRORS["DOCTOR_NOT_FOUND"])
    is_favorite = await UserService.toggle_favorite(db, user["id"], doctor_id)
    return {"doctor_id": doctor_id, "is_favorite": is_favorite}
