"""
Clinic Tracker Backend — EMR Routes
====================================

What:  Electronic medical records under /api/emr.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.database import get_db_session
from clinic_api.schemas.common import ErrorResponse
from clinic_api.schemas.emr import (
    EmrCreate,
    EmrCreatedResponse,
    EmrResponse,
    EmrUpdate,
    EmrUpdatedResponse,
)
from clinic_api.services.emr_service import emr_service

router = APIRouter(prefix="/api/emr", tags=["EMR"])

NOT_FOUND = {404: {"description": "EMR record not found", "model": ErrorResponse}}


@router.get("", response_model=List[EmrResponse], summary="List EMR records ordered by id")
async def list_records(
    patient_id: Optional[str] = Query(default=None, description="Only this patient"),
    db: AsyncSession = Depends(get_db_session),
):
    return await emr_service.list_records(db, patient_id)


@router.get(
    "/patient/{patient_id}",
    response_model=EmrResponse,
    responses=NOT_FOUND,
    summary="EMR record by patient identifier",
)
async def get_by_patient(
    patient_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> EmrResponse:
    record = await emr_service.get_by_patient_id(db, patient_id)
    return EmrResponse.model_validate(record)


@router.get("/{record_id}", response_model=EmrResponse, responses=NOT_FOUND, summary="EMR record by id")
async def get_record(
    record_id: int = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
) -> EmrResponse:
    return await emr_service.get_record(db, record_id)


@router.post(
    "",
    status_code=201,
    response_model=EmrCreatedResponse,
    responses={400: {"description": "Invalid body or duplicate patient ID", "model": ErrorResponse}},
    summary="Create an EMR record",
)
async def create_record(
    payload: EmrCreate,
    db: AsyncSession = Depends(get_db_session),
) -> EmrCreatedResponse:
    return await emr_service.create_record(db, payload)


@router.put(
    "/{record_id}",
    response_model=EmrUpdatedResponse,
    responses={**NOT_FOUND, 400: {"description": "Nothing to update", "model": ErrorResponse}},
    summary="Update an EMR record",
)
async def update_record(
    payload: EmrUpdate,
    record_id: int = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
) -> EmrUpdatedResponse:
    return await emr_service.update_record(db, record_id, payload)
