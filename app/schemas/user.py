from pydantic import BaseModel, Field, ConfigDict, EmailStr
from datetime import datetime
from typing import Optional


class RegisterRequest(BaseModel):
    """Schema for registering a new account."""
    name: str = Field(..., min_length=1, description="Display name")
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=6, description="Password (at least 6 characters)")


class LoginRequest(BaseModel):
    """Schema for opening a session."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserPublic(BaseModel):
    """User record without sensitive fields."""
    id: str
    name: Optional[str] = None
    email: str
    username: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
