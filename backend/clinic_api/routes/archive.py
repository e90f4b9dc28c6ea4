"""
Clinic Tracker Backend — Daily Archive Routes
==============================================

What:  POST /api/archive snapshots a user's day; GET reads a snapshot back.
"""

from datetime import date

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.database import get_db_session
from clinic_api.schemas.archive import ArchiveCreate, ArchiveCreatedResponse, ArchiveResponse
from clinic_api.schemas.common import ErrorResponse
from clinic_api.services.archive_service import archive_service

router = APIRouter(prefix="/api/archive", tags=["Archive"])


@router.post(
    "",
    response_model=ArchiveCreatedResponse,
    responses={
        400: {"description": "Invalid request", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        500: {"description": "Archive failed and was rolled back", "model": ErrorResponse},
    },
    summary="Archive one user's logs for one date",
    description=(
        "Copies the breakfast, lunch, dinner, snack, exercise, weight and daily "
        "review rows of the given date into one snapshot. Archiving the same "
        "user and date again replaces the previous snapshot."
    ),
)
async def create_archive(
    payload: ArchiveCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ArchiveCreatedResponse:
    return await archive_service.create_archive(db, payload.user_id, payload.archive_date)


@router.get(
    "/date/{day}/user/{user_id}",
    response_model=ArchiveResponse,
    responses={404: {"description": "No archive for that date", "model": ErrorResponse}},
    summary="Read an archived day",
)
async def get_archive(
    day: date,
    user_id: int = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
) -> ArchiveResponse:
    return await archive_service.get_archive(db, user_id, day)
