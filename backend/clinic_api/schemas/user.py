"""
Clinic Tracker Backend — User Schemas
======================================

What:  Request and response bodies for /api/users.
How:   The raw password is accepted only by UserCreate; no response model
       has a password or hash field.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _normalize_email(v: str) -> str:
    email = v.strip().lower()
    local, _, domain = email.partition("@")
    if not local or "." not in domain:
        raise ValueError("Must be a valid email address")
    return email


# bcrypt only hashes the first 72 bytes and refuses longer input
MAX_PASSWORD_BYTES = 72


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=100)
    password: str = Field(min_length=6, max_length=128)
    patient_id: Optional[str] = Field(default=None, max_length=50)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
            )
        return v


class UserUpdate(BaseModel):
    """Partial update; at least one field must be present."""
    username: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, max_length=100)
    patient_id: Optional[str] = Field(default=None, max_length=50)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v) if v is not None else v


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    patient_id: Optional[str] = None
    created_at: datetime
    last_updated: datetime

    model_config = {"from_attributes": True}


class UserCreatedResponse(BaseModel):
    id: int
    message: str = "User created successfully"
    user: UserResponse


class UserUpdatedResponse(BaseModel):
    message: str = "User updated successfully"
    user: UserResponse
