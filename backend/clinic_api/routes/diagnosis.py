"""
Clinic Tracker Backend — Diagnosis Routes
==========================================

What:  Liver index calculation over a patient's stored EMR labs.
How:   ?formula= selects fli_ast, fli_logistic or hsi for one request;
       without it the configured STEATOSIS_FORMULA is used.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.database import get_db_session
from clinic_api.schemas.common import ErrorResponse
from clinic_api.schemas.diagnosis import DiagnosisHistory, DiagnosisResult
from clinic_api.services.diagnosis_service import diagnosis_service

router = APIRouter(prefix="/api/diagnosis", tags=["Diagnosis"])

ERRORS = {
    400: {"description": "Unknown formula", "model": ErrorResponse},
    404: {"description": "Unknown patient", "model": ErrorResponse},
}

FORMULA_QUERY = Query(
    default=None,
    description="Override the steatosis formula: fli_ast, fli_logistic or hsi",
)


@router.get(
    "/patient/{patient_id}/preview",
    response_model=DiagnosisResult,
    responses=ERRORS,
    summary="Calculate indices without saving",
)
async def preview_diagnosis(
    patient_id: str,
    formula: Optional[str] = FORMULA_QUERY,
    db: AsyncSession = Depends(get_db_session),
) -> DiagnosisResult:
    return await diagnosis_service.preview(db, patient_id, formula)


@router.post(
    "/patient/{patient_id}",
    status_code=201,
    response_model=DiagnosisResult,
    responses=ERRORS,
    summary="Calculate indices and append them to the patient's history",
)
async def create_diagnosis(
    patient_id: str,
    formula: Optional[str] = FORMULA_QUERY,
    db: AsyncSession = Depends(get_db_session),
) -> DiagnosisResult:
    return await diagnosis_service.diagnose(db, patient_id, formula)


@router.get(
    "/patient/{patient_id}",
    response_model=DiagnosisHistory,
    responses={404: ERRORS[404]},
    summary="Stored diagnoses, most recent first",
)
async def diagnosis_history(
    patient_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DiagnosisHistory:
    return await diagnosis_service.history(db, patient_id)
