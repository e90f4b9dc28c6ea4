"""
Clinic Tracker Backend — Daily Log Routes
==========================================

What:  HTTP routes for the meal, exercise and weight logs.
How:   build_record_router() produces the same route set for every log from
       its RecordKind; handlers only unpack the request and call
       RecordService.

Routes (per log, e.g. prefix /api/breakfast):
    POST   ""                              create                      201
    GET    /user/{user_id}                 history, newest first       200
    GET    /date/{day}/user/{user_id}      one day's rows              200
    PUT    /{record_id}/user/{user_id}     partial update              200 / 400 / 403 / 404
    DELETE /{record_id}/user/{user_id}     delete                      200 / 403 / 404
    POST   /batch-delete/user/{user_id}    all-or-nothing delete       200 / 400 / 403
    GET    /latest/user/{user_id}          weight only                 200 / 404
"""

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.database import get_db_session
from clinic_api.schemas.common import ErrorResponse
from clinic_api.schemas.records import (
    BatchDeleted,
    BatchDeleteRequest,
    RecordDeleted,
    RecordUpdated,
)
from clinic_api.services.record_service import (
    BREAKFAST,
    DINNER,
    EXERCISE,
    LUNCH,
    SNACK,
    WEIGHT,
    RecordKind,
    record_service,
)

logger = logging.getLogger(__name__)

ERRORS = {
    400: {"description": "Invalid request", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
OWNED_ERRORS = {
    **ERRORS,
    403: {"description": "Record belongs to another user", "model": ErrorResponse},
    404: {"description": "Record not found", "model": ErrorResponse},
}


def build_record_router(
    kind: RecordKind,
    prefix: str,
    tag: str,
    with_latest: bool = False,
    date_not_found_when_empty: bool = False,
) -> APIRouter:
    """
    Args:
        with_latest:                add GET /latest/user/{user_id}
        date_not_found_when_empty:  GET /date/... answers 404 instead of []
    """
    router = APIRouter(prefix=prefix, tags=[tag])
    create_schema = kind.create_schema
    update_schema = kind.update_schema
    response_schema = kind.response_schema

    @router.post(
        "",
        status_code=201,
        response_model=kind.created_schema,
        responses={**ERRORS, 404: {"description": "User not found", "model": ErrorResponse}},
        summary=f"Create a {kind.label}",
    )
    async def create_record(
        payload: create_schema,
        db: AsyncSession = Depends(get_db_session),
    ):
        return await record_service.create(db, kind, payload)

    @router.get(
        "/user/{user_id}",
        response_model=List[response_schema],
        responses=ERRORS,
        summary=f"List a user's {kind.label}s, newest first",
    )
    async def list_for_user(
        user_id: int = Path(gt=0),
        db: AsyncSession = Depends(get_db_session),
    ):
        return await record_service.list_for_user(db, kind, user_id)

    @router.get(
        "/date/{day}/user/{user_id}",
        response_model=List[response_schema],
        responses=ERRORS,
        summary=f"List a user's {kind.label}s for one date",
    )
    async def list_for_date(
        day: date,
        user_id: int = Path(gt=0),
        db: AsyncSession = Depends(get_db_session),
    ):
        return await record_service.list_for_date(
            db, kind, user_id, day, not_found_when_empty=date_not_found_when_empty
        )

    if with_latest:
        @router.get(
            "/latest/user/{user_id}",
            response_model=response_schema,
            responses={**ERRORS, 404: {"description": "No records", "model": ErrorResponse}},
            summary=f"Most recent {kind.label} of a user",
        )
        async def latest_for_user(
            user_id: int = Path(gt=0),
            db: AsyncSession = Depends(get_db_session),
        ):
            return await record_service.latest(db, kind, user_id)

    @router.put(
        "/{record_id}/user/{user_id}",
        response_model=RecordUpdated[response_schema],
        responses=OWNED_ERRORS,
        summary=f"Update a {kind.label}",
    )
    async def update_record(
        payload: update_schema,
        record_id: int = Path(gt=0),
        user_id: int = Path(gt=0),
        db: AsyncSession = Depends(get_db_session),
    ):
        return await record_service.update(db, kind, record_id, user_id, payload)

    @router.delete(
        "/{record_id}/user/{user_id}",
        response_model=RecordDeleted[response_schema],
        responses=OWNED_ERRORS,
        summary=f"Delete a {kind.label}",
    )
    async def delete_record(
        record_id: int = Path(gt=0),
        user_id: int = Path(gt=0),
        db: AsyncSession = Depends(get_db_session),
    ):
        return await record_service.delete(db, kind, record_id, user_id)

    @router.post(
        "/batch-delete/user/{user_id}",
        response_model=BatchDeleted[response_schema],
        responses=OWNED_ERRORS,
        summary=f"Delete several {kind.label}s at once",
        description=(
            "Deletes every listed id or none. If any id is unknown or owned by "
            "another user the request fails with 403 and details.unauthorized_ids."
        ),
    )
    async def batch_delete(
        payload: BatchDeleteRequest,
        user_id: int = Path(gt=0),
        db: AsyncSession = Depends(get_db_session),
    ):
        return await record_service.batch_delete(db, kind, user_id, payload.ids)

    return router


# ── Router Instances ──────────────────────────────────────────────────────
breakfast_router = build_record_router(BREAKFAST, "/api/breakfast", "Breakfast")
lunch_router = build_record_router(LUNCH, "/api/lunch", "Lunch")
dinner_router = build_record_router(DINNER, "/api/dinner", "Dinner")
snack_router = build_record_router(SNACK, "/api/snack", "Snack")
exercise_router = build_record_router(EXERCISE, "/api/exercise", "Exercise")
weight_router = build_record_router(
    WEIGHT, "/api/weight", "Weight", with_latest=True, date_not_found_when_empty=True
)

record_routers = (
    breakfast_router,
    lunch_router,
    dinner_router,
    snack_router,
    exercise_router,
    weight_router,
)
