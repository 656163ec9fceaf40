from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import List, Literal, Optional
from datetime import datetime

class UserRegister(BaseModel):
    """Self-service sign-up; always creates a patient."""
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserCreate(BaseModel):
    """Admin-side account creation."""
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    role: Literal["patient", "admin"] = "patient"
    avatar: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    avatar: Optional[str] = None


class AdminUserUpdate(UserUpdate):
    role: Optional[Literal["patient", "admin"]] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=72)


class UserPublic(BaseModel):
    """User as returned by the API (never carries the password hash)."""
    id: str
    name: str
    email: EmailStr
    role: str = "patient"
    avatar: Optional[str] = None
    favorite_doctor_ids: List[str] = []
    created_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")


class Token(BaseModel):
    """Response model for login (JWT)."""
    access_token: str
    token_type: str = "bearer"


class AuthResponse(Token):
    user: UserPublic


class UserPage(BaseModel):
    data: List[UserPublic]
    total: int
    page: int
    limit: int
