"""
Clinic Tracker Backend — Daily Log Service
===========================================

What:  Create / list / update / delete logic shared by the seven daily logs.
How:   Each log is described once by a RecordKind (model, date column,
       schemas, display label). RecordService methods take the kind as an
       argument, so breakfast and weight run the same code path.
Who:   Called by the routers built in routes/records.py and routes/daily_review.py,
       and by ArchiveService (via RECORD_KINDS) to read a day's rows.

Ordering:
    A user's history is ORDER BY <date> DESC, created_at DESC.

Errors:
    NotFoundError / ForbiddenError come from the ownership check.
    Any SQLAlchemyError is logged and re-raised as DatabaseError; the session
    dependency rolls the transaction back.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.config import settings
from clinic_api.exceptions import (
    ClinicError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from clinic_api.models import (
    BreakfastRecord,
    DailyReview,
    DinnerRecord,
    ExerciseRecord,
    LunchRecord,
    SnackRecord,
    WeightRecord,
)
from clinic_api.models._columns import utcnow
from clinic_api.schemas import records as schemas
from clinic_api.services.ownership import require_ownership
from clinic_api.services.user_service import user_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordKind:
    """Static description of one daily log table."""

    name: str
    label: str
    model: Type[Any]
    date_field: str
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    response_schema: Type[BaseModel]

    @property
    def date_column(self):
        return getattr(self.model, self.date_field)

    @property
    def created_schema(self) -> Type[BaseModel]:
        return _CREATED_ENVELOPES[self.name]

    def to_response(self, record: Any) -> BaseModel:
        return self.response_schema.model_validate(record)


BREAKFAST = RecordKind(
    "breakfast", "breakfast record", BreakfastRecord, "breakfast_date",
    schemas.BreakfastCreate, schemas.BreakfastUpdate, schemas.BreakfastResponse,
)
LUNCH = RecordKind(
    "lunch", "lunch record", LunchRecord, "lunch_date",
    schemas.LunchCreate, schemas.LunchUpdate, schemas.LunchResponse,
)
DINNER = RecordKind(
    "dinner", "dinner record", DinnerRecord, "dinner_date",
    schemas.DinnerCreate, schemas.DinnerUpdate, schemas.DinnerResponse,
)
SNACK = RecordKind(
    "snack", "snack record", SnackRecord, "snack_date",
    schemas.SnackCreate, schemas.SnackUpdate, schemas.SnackResponse,
)
EXERCISE = RecordKind(
    "exercise", "exercise record", ExerciseRecord, "exercise_date",
    schemas.ExerciseCreate, schemas.ExerciseUpdate, schemas.ExerciseResponse,
)
WEIGHT = RecordKind(
    "weight", "weight record", WeightRecord, "weight_date",
    schemas.WeightCreate, schemas.WeightUpdate, schemas.WeightResponse,
)
DAILY_REVIEW = RecordKind(
    "daily_review", "daily review", DailyReview, "review_date",
    schemas.DailyReviewCreate, schemas.DailyReviewUpdate, schemas.DailyReviewResponse,
)

RECORD_KINDS: Dict[str, RecordKind] = {
    kind.name: kind
    for kind in (BREAKFAST, LUNCH, DINNER, SNACK, EXERCISE, WEIGHT, DAILY_REVIEW)
}

_CREATED_ENVELOPES = {
    name: schemas.created_envelope(name, kind.response_schema)
    for name, kind in RECORD_KINDS.items()
}


def _capitalized(kind: RecordKind) -> str:
    return kind.label[0].upper() + kind.label[1:]


class RecordService:
    """
    Business logic for the daily logs.

    Stateless: every method receives the request's AsyncSession and the
    RecordKind it operates on.
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def fetch_for_date(
        self, db: AsyncSession, kind: RecordKind, user_id: int, day: date
    ) -> Sequence[Any]:
        """ORM rows of one user for one calendar day, oldest first."""
        result = await db.execute(
            select(kind.model)
            .where(kind.model.user_id == user_id, kind.date_column == day)
            .order_by(kind.model.created_at, kind.model.id)
        )
        return result.scalars().all()

    async def list_for_user(
        self, db: AsyncSession, kind: RecordKind, user_id: int
    ) -> List[BaseModel]:
        try:
            result = await db.execute(
                select(kind.model)
                .where(kind.model.user_id == user_id)
                .order_by(kind.date_column.desc(), kind.model.created_at.desc())
            )
            return [kind.to_response(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._database_error(kind, "list", e)

    async def list_for_date(
        self,
        db: AsyncSession,
        kind: RecordKind,
        user_id: int,
        day: date,
        not_found_when_empty: bool = False,
    ) -> List[BaseModel]:
        try:
            rows = await self.fetch_for_date(db, kind, user_id, day)
        except SQLAlchemyError as e:
            raise self._database_error(kind, "list_for_date", e)
        if not rows and not_found_when_empty:
            raise NotFoundError(resource=kind.label, context={"date": day.isoformat()})
        return [kind.to_response(row) for row in rows]

    async def latest(self, db: AsyncSession, kind: RecordKind, user_id: int) -> BaseModel:
        """Most recent row by date, then by creation time. 404 when the log is empty."""
        try:
            result = await db.execute(
                select(kind.model)
                .where(kind.model.user_id == user_id)
                .order_by(kind.date_column.desc(), kind.model.created_at.desc())
                .limit(1)
            )
            record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._database_error(kind, "latest", e)
        if record is None:
            raise NotFoundError(resource=kind.label, context={"user_id": user_id})
        return kind.to_response(record)

    async def get_for_date(
        self, db: AsyncSession, kind: RecordKind, user_id: int, day: date
    ) -> BaseModel:
        """The single row of a one-per-day log (daily review). 404 when absent."""
        rows = await self.list_for_date(db, kind, user_id, day)
        if not rows:
            raise NotFoundError(resource=kind.label, context={"date": day.isoformat()})
        return rows[0]

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, kind: RecordKind, payload: BaseModel) -> BaseModel:
        """Inserts one row and returns the {id, message, <kind>_record} envelope."""
        try:
            if settings.require_existing_user:
                await user_service.ensure_exists(db, payload.user_id)

            record = kind.model(**payload.model_dump())
            db.add(record)
            await db.flush()
            logger.info("%s %d created for user %d", _capitalized(kind), record.id, record.user_id)

            return kind.created_schema(
                id=record.id,
                message=f"{_capitalized(kind)} created successfully",
                **{f"{kind.name}_record": kind.to_response(record)},
            )
        except ClinicError:
            raise
        except SQLAlchemyError as e:
            raise self._database_error(kind, "create", e)

    async def update(
        self,
        db: AsyncSession,
        kind: RecordKind,
        record_id: int,
        user_id: int,
        payload: BaseModel,
    ) -> BaseModel:
        """
        Partial update of a record owned by user_id.

        Only fields present (non-null) in the payload are written.

        Raises:
            ValidationError: payload carries no field (→ 400)
            NotFoundError / ForbiddenError: ownership check (→ 404 / 403)
        """
        changes = payload.model_dump(exclude_none=True)
        if not changes:
            raise ValidationError(
                message=f"Nothing to update. Provide at least one {kind.label} field.",
                context={"allowed_fields": sorted(kind.update_schema.model_fields)},
            )

        try:
            record = await require_ownership(
                db, kind.model, record_id, user_id, resource=kind.label, action="update"
            )
            for field, value in changes.items():
                setattr(record, field, value)
            record.last_updated = utcnow()
            await db.flush()
            logger.info("%s %d updated (%s)", _capitalized(kind), record_id, ", ".join(changes))

            return schemas.RecordUpdated[kind.response_schema](
                message=f"{_capitalized(kind)} updated successfully",
                updated_record=kind.to_response(record),
            )
        except ClinicError:
            raise
        except SQLAlchemyError as e:
            raise self._database_error(kind, "update", e)

    async def delete(
        self, db: AsyncSession, kind: RecordKind, record_id: int, user_id: int
    ) -> BaseModel:
        try:
            record = await require_ownership(
                db, kind.model, record_id, user_id, resource=kind.label, action="delete"
            )
            snapshot = kind.to_response(record)
            await db.delete(record)
            await db.flush()
            logger.info("%s %d deleted", _capitalized(kind), record_id)

            return schemas.RecordDeleted[kind.response_schema](
                message=f"{_capitalized(kind)} deleted successfully",
                deleted_record=snapshot,
            )
        except ClinicError:
            raise
        except SQLAlchemyError as e:
            raise self._database_error(kind, "delete", e)

    async def batch_delete(
        self, db: AsyncSession, kind: RecordKind, user_id: int, ids: List[int]
    ) -> BaseModel:
        """
        Deletes every listed record or none of them.

        Ids that do not exist or belong to another user are collected into
        ForbiddenError.unauthorized_ids and nothing is deleted.
        """
        requested = list(dict.fromkeys(ids))
        if not requested:
            raise ValidationError(message="ids must be a non-empty list", field="ids")

        try:
            result = await db.execute(
                select(kind.model)
                .where(kind.model.id.in_(requested))
                .order_by(kind.model.id)
            )
            found = result.scalars().all()
            owned = {row.id: row for row in found if row.user_id == user_id}
            unauthorized = [record_id for record_id in requested if record_id not in owned]
            if unauthorized:
                raise ForbiddenError(
                    resource=kind.label, action="delete", unauthorized_ids=unauthorized
                )

            snapshots = [kind.to_response(owned[record_id]) for record_id in requested]
            await db.execute(
                delete(kind.model)
                .where(kind.model.id.in_(requested), kind.model.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            for row in owned.values():
                db.expunge(row)
            logger.info(
                "Batch deleted %d %s rows for user %d", len(snapshots), kind.name, user_id
            )

            return schemas.BatchDeleted[kind.response_schema](
                message=f"{len(snapshots)} {kind.label}s deleted successfully",
                deleted_count=len(snapshots),
                deleted_records=snapshots,
            )
        except ClinicError:
            raise
        except SQLAlchemyError as e:
            raise self._database_error(kind, "batch_delete", e)

    async def save_review(
        self, db: AsyncSession, payload: schemas.DailyReviewCreate
    ) -> Tuple[schemas.DailyReviewSaved, bool]:
        """
        Inserts the day's review, or overwrites the answers of the existing
        one for the same (user_id, review_date).

        Returns:
            (envelope, created) where created is False for an overwrite
        """
        kind = DAILY_REVIEW
        try:
            if settings.require_existing_user:
                await user_service.ensure_exists(db, payload.user_id)

            result = await db.execute(
                select(DailyReview).where(
                    DailyReview.user_id == payload.user_id,
                    DailyReview.review_date == payload.review_date,
                )
            )
            review: Optional[DailyReview] = result.scalar_one_or_none()
            answers = payload.model_dump(exclude={"user_id", "review_date"})

            if review is not None:
                for field, value in answers.items():
                    setattr(review, field, value)
                review.last_updated = utcnow()
                await db.flush()
                logger.info("Daily review %d overwritten", review.id)
                return (
                    schemas.DailyReviewSaved(
                        message="Daily review updated successfully",
                        review=kind.to_response(review),
                    ),
                    False,
                )

            review = DailyReview(**payload.model_dump())
            db.add(review)
            await db.flush()
            logger.info("Daily review %d created for user %d", review.id, review.user_id)
            return (
                schemas.DailyReviewSaved(
                    message="Daily review created successfully",
                    review=kind.to_response(review),
                ),
                True,
            )
        except ClinicError:
            raise
        except SQLAlchemyError as e:
            raise self._database_error(kind, "save_review", e)

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _database_error(kind: RecordKind, operation: str, error: Exception) -> DatabaseError:
        logger.error(
            "Database error during %s %s: %s", kind.name, operation, error, exc_info=True
        )
        return DatabaseError(
            message=f"Could not {operation.replace('_', ' ')} the {kind.label}. Please try again.",
            context={"operation": operation, "error_type": type(error).__name__},
        )


# ── Singleton Instance ────────────────────────────────────────────────────
record_service = RecordService()
