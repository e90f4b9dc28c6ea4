"""
Clinic Tracker Backend — User Routes
=====================================

What:  Account CRUD under /api/users. Password hashes never leave the
       service layer.
"""

from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.database import get_db_session
from clinic_api.schemas.common import ErrorResponse, MessageResponse
from clinic_api.schemas.user import (
    UserCreate,
    UserCreatedResponse,
    UserResponse,
    UserUpdate,
    UserUpdatedResponse,
)
from clinic_api.services.user_service import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])

NOT_FOUND = {404: {"description": "User not found", "model": ErrorResponse}}


@router.post(
    "",
    status_code=201,
    response_model=UserCreatedResponse,
    responses={400: {"description": "Invalid body or email already registered", "model": ErrorResponse}},
    summary="Create a user",
)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserCreatedResponse:
    return await user_service.create_user(db, payload)


@router.get("", response_model=List[UserResponse], summary="List users")
async def list_users(db: AsyncSession = Depends(get_db_session)):
    return await user_service.list_users(db)


@router.get("/{user_id}", response_model=UserResponse, responses=NOT_FOUND, summary="Get a user")
async def get_user(
    user_id: int = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_user(db, user_id)


@router.put(
    "/{user_id}",
    response_model=UserUpdatedResponse,
    responses={**NOT_FOUND, 400: {"description": "Nothing to update", "model": ErrorResponse}},
    summary="Update a user",
)
async def update_user(
    payload: UserUpdate,
    user_id: int = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
) -> UserUpdatedResponse:
    return await user_service.update_user(db, user_id, payload)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    responses=NOT_FOUND,
    summary="Delete a user",
)
async def delete_user(
    user_id: int = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await user_service.delete_user(db, user_id)
    return MessageResponse(message="User deleted successfully")
