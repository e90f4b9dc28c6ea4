"""
Clinic Tracker Backend — Verification Schemas
==============================================

What:  Bodies for the one-time-code endpoints under /api/auth.
How:   camelCase keys on the wire (patientId, authCode) via aliases.
"""

from pydantic import BaseModel, Field, field_validator

ALIASED = {"populate_by_name": True}


class GenerateCodeRequest(BaseModel):
    patient_id: str = Field(alias="patientId", min_length=1, max_length=50)

    model_config = ALIASED


class VerifyCodeRequest(BaseModel):
    patient_id: str = Field(alias="patientId", min_length=1, max_length=50)
    auth_code: str = Field(alias="authCode", min_length=1, max_length=10)

    model_config = ALIASED

    @field_validator("auth_code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        return v.strip()


class AuthResult(BaseModel):
    """A rejected code is reported with success=false and HTTP 200."""
    success: bool
    message: str
