"""
Clinic Tracker Backend — EMR Schemas
=====================================

What:  Request and response bodies for /api/emr and /api/auth/emr-data.
How:   EmrFields lists every optional clinical column once; the create,
       update and response models reuse it.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class EmrFields(BaseModel):
    phone: Optional[str] = Field(default=None, max_length=20)
    birth_date: Optional[date] = None
    gender: Optional[str] = Field(default=None, max_length=10)

    ast: Optional[float] = Field(default=None, ge=0)
    alt: Optional[float] = Field(default=None, ge=0)
    ggt: Optional[float] = Field(default=None, ge=0)
    albumin: Optional[float] = Field(default=None, ge=0)

    medical_record: Optional[str] = None
    prescription_record: Optional[str] = None

    weight: Optional[float] = Field(default=None, gt=0)
    waist_circumference: Optional[float] = Field(default=None, gt=0)
    bmi: Optional[float] = Field(default=None, gt=0)

    glucose: Optional[float] = Field(default=None, ge=0)
    hba1c: Optional[float] = Field(default=None, ge=0)
    triglyceride: Optional[float] = Field(default=None, ge=0)
    ldl: Optional[float] = Field(default=None, ge=0)
    hdl: Optional[float] = Field(default=None, ge=0)
    uric_acid: Optional[float] = Field(default=None, ge=0)

    sbp: Optional[int] = Field(default=None, ge=0)
    dbp: Optional[int] = Field(default=None, ge=0)
    gfr: Optional[float] = Field(default=None, ge=0)
    plt: Optional[int] = Field(default=None, ge=0, description="Platelets, 10³/μL")


class EmrCreate(EmrFields):
    patient_name: str = Field(min_length=1, max_length=100)
    patient_id: str = Field(min_length=1, max_length=50)
    email: str = Field(min_length=3, max_length=100)


class EmrUpdate(EmrFields):
    """Partial update. patient_id is immutable once issued."""
    patient_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=100)


class EmrResponse(EmrFields):
    id: int
    patient_name: str
    patient_id: str
    email: str
    created_at: datetime
    last_updated: datetime

    model_config = {"from_attributes": True}


class EmrCreatedResponse(BaseModel):
    id: int
    message: str = "EMR record created successfully"
    emr: EmrResponse


class EmrUpdatedResponse(BaseModel):
    message: str = "EMR record updated successfully"
    emr: EmrResponse
