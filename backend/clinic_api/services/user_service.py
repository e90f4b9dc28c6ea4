"""
Clinic Tracker Backend — User Service
======================================

What:  Account CRUD for /api/users plus the existence check other services
       run before writing rows that reference a user id.
How:   Passwords are hashed with bcrypt (salted, work factor from
       bcrypt.gensalt()) before they reach the session. Responses are built
       from UserResponse, which has no password field.
"""

import logging
from typing import List

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.exceptions import ClinicError, DatabaseError, NotFoundError, ValidationError
from clinic_api.models import User
from clinic_api.models._columns import utcnow
from clinic_api.schemas.user import (
    UserCreate,
    UserCreatedResponse,
    UserResponse,
    UserUpdate,
    UserUpdatedResponse,
)

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class UserService:
    """Business logic for application accounts."""

    async def ensure_exists(self, db: AsyncSession, user_id: int) -> None:
        """
        Raises NotFoundError unless a users row with this id exists.

        Log tables have no foreign key to users, so this is the only guard
        against rows for unknown accounts.
        """
        result = await db.execute(select(User.id).where(User.id == user_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError(resource="user", resource_id=user_id)

    async def create_user(self, db: AsyncSession, payload: UserCreate) -> UserCreatedResponse:
        """
        Raises:
            ValidationError: email (or patient_id) already registered (→ 400)
        """
        try:
            await self._ensure_email_free(db, payload.email)

            user = User(
                username=payload.username,
                email=payload.email,
                password_hash=hash_password(payload.password),
                patient_id=payload.patient_id,
            )
            db.add(user)
            await db.flush()
            logger.info("User %d created", user.id)

            return UserCreatedResponse(id=user.id, user=UserResponse.model_validate(user))
        except ClinicError:
            raise
        except IntegrityError as e:
            # Unique index race or duplicate patient_id
            logger.warning("User insert rejected by constraint: %s", e.orig)
            raise ValidationError(
                message="A user with this email or patient ID already exists",
                field="email",
            )
        except SQLAlchemyError as e:
            raise self._database_error("create", e)

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        try:
            result = await db.execute(select(User).order_by(User.id))
            return [UserResponse.model_validate(user) for user in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._database_error("list", e)

    async def get_user(self, db: AsyncSession, user_id: int) -> UserResponse:
        user = await self._load(db, user_id)
        return UserResponse.model_validate(user)

    async def update_user(
        self, db: AsyncSession, user_id: int, payload: UserUpdate
    ) -> UserUpdatedResponse:
        changes = payload.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError(message="Nothing to update. Provide username, email or patient_id.")

        try:
            user = await self._load(db, user_id)
            if "email" in changes and changes["email"] != user.email:
                await self._ensure_email_free(db, changes["email"])
            for field, value in changes.items():
                setattr(user, field, value)
            user.last_updated = utcnow()
            await db.flush()
            logger.info("User %d updated (%s)", user_id, ", ".join(changes))
            return UserUpdatedResponse(user=UserResponse.model_validate(user))
        except ClinicError:
            raise
        except IntegrityError as e:
            logger.warning("User update rejected by constraint: %s", e.orig)
            raise ValidationError(message="Email or patient ID is already in use")
        except SQLAlchemyError as e:
            raise self._database_error("update", e)

    async def delete_user(self, db: AsyncSession, user_id: int) -> None:
        try:
            user = await self._load(db, user_id)
            await db.delete(user)
            await db.flush()
            logger.info("User %d deleted", user_id)
        except ClinicError:
            raise
        except SQLAlchemyError as e:
            raise self._database_error("delete", e)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, user_id: int) -> User:
        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            raise self._database_error("get", e)
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user

    async def _ensure_email_free(self, db: AsyncSession, email: str) -> None:
        result = await db.execute(select(User.id).where(User.email == email))
        if result.scalar_one_or_none() is not None:
            raise ValidationError(message="A user with this email already exists", field="email")

    @staticmethod
    def _database_error(operation: str, error: Exception) -> DatabaseError:
        logger.error("Database error during user %s: %s", operation, error, exc_info=True)
        return DatabaseError(
            message="Could not process the user request. Please try again.",
            context={"operation": operation, "error_type": type(error).__name__},
        )


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
