"""
Clinic Tracker Backend — Daily Review Routes
=============================================

What:  /api/daily-review. One review per user per day.
How:   POST is an upsert keyed on (user_id, review_date): 201 when the
       review is new, 200 when it overwrote the day's existing answers.
"""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.database import get_db_session
from clinic_api.routes.records import ERRORS, OWNED_ERRORS
from clinic_api.schemas.common import ErrorResponse
from clinic_api.schemas.records import (
    DailyReviewCreate,
    DailyReviewResponse,
    DailyReviewSaved,
    DailyReviewUpdate,
    RecordDeleted,
    RecordUpdated,
)
from clinic_api.services.record_service import DAILY_REVIEW, record_service

router = APIRouter(prefix="/api/daily-review", tags=["Daily Review"])


@router.post(
    "",
    status_code=201,
    response_model=DailyReviewSaved,
    responses={
        200: {"description": "Existing review for that day overwritten", "model": DailyReviewSaved},
        **ERRORS,
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Save the day's review",
)
async def save_review(
    payload: DailyReviewCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> DailyReviewSaved:
    saved, created = await record_service.save_review(db, payload)
    if not created:
        response.status_code = 200
    return saved


@router.get(
    "/user/{user_id}",
    response_model=List[DailyReviewResponse],
    responses=ERRORS,
    summary="List a user's reviews, newest first",
)
async def list_reviews(
    user_id: int = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
):
    return await record_service.list_for_user(db, DAILY_REVIEW, user_id)


@router.get(
    "/date/{day}/user/{user_id}",
    response_model=DailyReviewResponse,
    responses={**ERRORS, 404: {"description": "No review that day", "model": ErrorResponse}},
    summary="The review of one date",
)
async def get_review_for_date(
    day: date,
    user_id: int = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
):
    return await record_service.get_for_date(db, DAILY_REVIEW, user_id, day)


@router.put(
    "/{record_id}/user/{user_id}",
    response_model=RecordUpdated[DailyReviewResponse],
    responses=OWNED_ERRORS,
    summary="Update a review",
)
async def update_review(
    payload: DailyReviewUpdate,
    record_id: int = Path(gt=0),
    user_id: int = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
):
    return await record_service.update(db, DAILY_REVIEW, record_id, user_id, payload)


@router.delete(
    "/{record_id}/user/{user_id}",
    response_model=RecordDeleted[DailyReviewResponse],
    responses=OWNED_ERRORS,
    summary="Delete a review",
)
async def delete_review(
    record_id: int = Path(gt=0),
    user_id: int = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
):
    return await record_service.delete(db, DAILY_REVIEW, record_id, user_id)
