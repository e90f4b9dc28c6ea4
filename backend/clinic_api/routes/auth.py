"""
Clinic Tracker Backend — Verification Routes
=============================================

What:  One-time email code flow and the EMR lookup used by the sign-in
       screen. Requests under /api/auth/ are throttled per client IP by
       RateLimitMiddleware.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.database import get_db_session
from clinic_api.schemas.auth import AuthResult, GenerateCodeRequest, VerifyCodeRequest
from clinic_api.schemas.common import ErrorResponse
from clinic_api.schemas.emr import EmrResponse
from clinic_api.services.auth_service import auth_service
from clinic_api.services.emr_service import emr_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/generate-code",
    response_model=AuthResult,
    responses={
        404: {"description": "Unknown patient", "model": ErrorResponse},
        429: {"description": "Too many requests", "model": ErrorResponse},
        500: {"description": "Code stored but email could not be sent", "model": ErrorResponse},
    },
    summary="Email a verification code to the patient",
)
async def generate_code(
    payload: GenerateCodeRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResult:
    return await auth_service.generate_code(db, payload.patient_id)


@router.post(
    "/verify-code",
    response_model=AuthResult,
    responses={429: {"description": "Too many requests", "model": ErrorResponse}},
    summary="Verify a code",
    description="A wrong, expired or already used code returns success=false with HTTP 200.",
)
async def verify_code(
    payload: VerifyCodeRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResult:
    return await auth_service.verify_code(db, payload.patient_id, payload.auth_code)


@router.get(
    "/emr-data",
    response_model=List[EmrResponse],
    summary="EMR rows, optionally for one patient",
)
async def emr_data(
    patient_id: Optional[str] = Query(default=None, alias="patientId"),
    db: AsyncSession = Depends(get_db_session),
):
    return await emr_service.list_records(db, patient_id)
