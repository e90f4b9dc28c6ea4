"""
Clinic Tracker Backend — Diagnosis Schemas
===========================================

What:  Responses of /api/diagnosis.
How:   DiagnosisResult is a fresh calculation (preview or persisted);
       DiagnosisRecord is a row of the append-only history.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class IndexScore(BaseModel):
    """score and interpretation are null when the labs are incomplete."""
    name: str = Field(description="fli_ast, fli_logistic, hsi or fibrosis")
    score: Optional[float] = None
    interpretation: Optional[str] = Field(
        default=None, description="low, intermediate, high or elevated"
    )
    label: Optional[str] = Field(default=None, description="Human-readable interpretation")


class DiagnosisResult(BaseModel):
    id: Optional[int] = Field(default=None, description="diagnosis_details.id; null for previews")
    patient_id: str
    formula: str
    has_diabetes: bool
    index: IndexScore
    fibrosis: Optional[IndexScore] = None
    calculated_at: datetime
    persisted: bool = False


class DiagnosisRecord(BaseModel):
    id: int
    patient_id: str
    formula: str
    index_score: Optional[float] = None
    index_interpretation: Optional[str] = None
    fibrosis_score: Optional[float] = None
    fibrosis_interpretation: Optional[str] = None
    has_diabetes: bool
    diagnosis_date: datetime

    model_config = {"from_attributes": True}


class DiagnosisHistory(BaseModel):
    patient_id: str
    diagnoses: List[DiagnosisRecord]
