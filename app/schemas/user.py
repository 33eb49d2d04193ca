from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime

from app.models.user import Profession
from app.schemas.base import CamelModel

class UserCreate(CamelModel):
    full_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    profession: Profession
    gender: str = Field(min_length=1)
    age: int = Field(gt=0)

class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

class VerifyEmailRequest(CamelModel):
    email: EmailStr
    otp: str = Field(min_length=1)

class ForgotPasswordRequest(CamelModel):
    email: EmailStr

class ResetPasswordRequest(CamelModel):
    email: EmailStr
    otp: str = Field(min_length=1)
    password: str = Field(min_length=1)

class UserOut(CamelModel):
    """Sanitized projection: no password hash, no verification or reset tokens."""
    id: int
    full_name: str
    email: str
    role: Profession
    gender: str
    age: int
    is_verified: bool
    created_at: Optional[datetime] = None

class MessageResponse(CamelModel):
    message: str
