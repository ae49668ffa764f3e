from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


# User schemas
class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=8, description="Password must be at least 8 characters")


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    name: str
    email: EmailStr
    image: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


# Token schemas
class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"


# OTP schemas
class OTPRequest(BaseModel):
    email: EmailStr


class OTPVerify(BaseModel):
    email: EmailStr
    code: str


class OTPResponse(BaseModel):
    message: str
    expires_at: datetime
    expires_in: int


class OTPVerifyResponse(BaseModel):
    message: str
    email: EmailStr
    verified: bool


# Response schemas
class ErrorResponse(BaseModel):
    detail: str
    reason: str
