"""
Clinic Tracker Backend — Daily Archive Service
===============================================

What:  Freezes one user's seven daily logs for one date into a single
       daily_archives row, and reads such snapshots back.
How:   create_archive() runs inside the request's transaction:

    ┌─────────────┐    ┌──────────────────┐    ┌──────────────────────┐
    │ 7 × SELECT  │───▶│ rows → JSON text │───▶│ INSERT snapshot ...  │
    │ (per log)   │    │ ("[]" when none) │    │ ON CONFLICT UPDATE   │
    └─────────────┘    └──────────────────┘    └──────────────────────┘

    Any database failure rolls the whole unit back and surfaces as
    DatabaseError (500). Nothing is retried.

Decoding:
    get_archive() decodes every *_data column with decode_with_fallback().
    NULL, "null", "" and "[]" mean "no records". Text that is not a JSON
    array becomes [] too, but that case is logged and the column is listed
    in the response's decode_fallbacks.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.config import settings
from clinic_api.exceptions import ClinicError, DatabaseError, NotFoundError
from clinic_api.models import DailyArchive
from clinic_api.models._columns import utcnow
from clinic_api.schemas.archive import ArchiveCreatedResponse, ArchivedCounts, ArchiveResponse
from clinic_api.services.record_service import (
    BREAKFAST,
    DAILY_REVIEW,
    DINNER,
    EXERCISE,
    LUNCH,
    SNACK,
    WEIGHT,
    RecordKind,
    record_service,
)
from clinic_api.services.user_service import user_service

logger = logging.getLogger(__name__)

# Column values that mean "no records" without being a decode failure
EMPTY_MARKERS = ("", "null", "[]")


@dataclass(frozen=True)
class ArchiveSource:
    column: str
    count_key: str
    kind: RecordKind


ARCHIVE_SOURCES: Tuple[ArchiveSource, ...] = (
    ArchiveSource("breakfast_data", "breakfasts", BREAKFAST),
    ArchiveSource("lunch_data", "lunches", LUNCH),
    ArchiveSource("dinner_data", "dinners", DINNER),
    ArchiveSource("snack_data", "snacks", SNACK),
    ArchiveSource("exercise_data", "exercises", EXERCISE),
    ArchiveSource("weight_data", "weights", WEIGHT),
    ArchiveSource("daily_review_data", "daily_reviews", DAILY_REVIEW),
)


# ── JSON column codec ─────────────────────────────────────────────────────

def encode_rows(kind: RecordKind, rows: Sequence[Any]) -> str:
    """Serializes ORM rows through the kind's response schema. Never returns NULL."""
    payload = [kind.to_response(row).model_dump(mode="json") for row in rows]
    return json.dumps(payload, ensure_ascii=False)


def decode_with_fallback(raw: Optional[str]) -> Tuple[List[Any], bool]:
    """
    Decodes a stored *_data column.

    Returns:
        (records, ok). ok is False when the text had to be replaced by []
        because it was malformed JSON or not a JSON array.
    """
    if raw is None or raw.strip() in EMPTY_MARKERS:
        return [], True
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return [], False
    if not isinstance(value, list):
        return [], False
    return value, True


class ArchiveService:

    @staticmethod
    def _upsert(dialect_name: str, values: dict):
        """
        Single INSERT ... ON CONFLICT (archive_date, user_id) DO UPDATE, so
        concurrent archives of the same day resolve to the last writer
        instead of a unique-constraint violation.
        """
        values = {**values, "created_at": utcnow()}
        if dialect_name == "postgresql":
            stmt = postgresql.insert(DailyArchive).values(**values)
            conflict = {"constraint": "uq_daily_archive_date_user"}
        elif dialect_name == "sqlite":
            stmt = sqlite.insert(DailyArchive).values(**values)
            conflict = {"index_elements": ["archive_date", "user_id"]}
        else:
            raise ValueError(f"Archive upsert is not supported on '{dialect_name}'")
        replaced = {
            column: stmt.excluded[column]
            for column in values
            if column not in ("archive_date", "user_id")
        }
        return stmt.on_conflict_do_update(set_=replaced, **conflict)

    async def create_archive(
        self, db: AsyncSession, user_id: int, archive_date: date
    ) -> ArchiveCreatedResponse:
        """
        Snapshots every log of user_id for archive_date, replacing any
        earlier snapshot of the same (archive_date, user_id).

        Raises:
            NotFoundError: unknown user (only with REQUIRE_EXISTING_USER on)
            DatabaseError: any query failed; the transaction is rolled back
        """
        try:
            if settings.require_existing_user:
                await user_service.ensure_exists(db, user_id)

            columns = {}
            counts = {}
            for source in ARCHIVE_SOURCES:
                rows = await record_service.fetch_for_date(db, source.kind, user_id, archive_date)
                columns[source.column] = encode_rows(source.kind, rows)
                counts[source.count_key] = len(rows)

            values = {"archive_date": archive_date, "user_id": user_id, **columns}
            await db.execute(self._upsert(db.get_bind().dialect.name, values))
        except ClinicError:
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Archive of user %d for %s failed: %s", user_id, archive_date, e, exc_info=True
            )
            raise DatabaseError(
                message="Could not archive the day's records. Please try again.",
                context={"user_id": user_id, "archive_date": archive_date.isoformat()},
            )

        logger.info("Archived %s for user %d: %s", archive_date, user_id, counts)
        return ArchiveCreatedResponse(
            archived_date=archive_date,
            archived_counts=ArchivedCounts(**counts),
        )

    async def get_archive(
        self, db: AsyncSession, user_id: int, archive_date: date
    ) -> ArchiveResponse:
        try:
            result = await db.execute(
                select(DailyArchive).where(
                    DailyArchive.archive_date == archive_date,
                    DailyArchive.user_id == user_id,
                )
            )
            archive = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Archive lookup failed: %s", e, exc_info=True)
            raise DatabaseError(message="Could not retrieve the archive. Please try again.")

        if archive is None:
            raise NotFoundError(
                resource="archive",
                context={"user_id": user_id, "archive_date": archive_date.isoformat()},
            )

        decoded = {}
        fallbacks = []
        for source in ARCHIVE_SOURCES:
            records, ok = decode_with_fallback(getattr(archive, source.column))
            decoded[source.column] = records
            if not ok:
                fallbacks.append(source.column)

        if fallbacks:
            logger.warning(
                "Archive %d has undecodable columns %s; returned as empty lists",
                archive.id, fallbacks,
            )

        return ArchiveResponse(
            id=archive.id,
            archive_date=archive.archive_date,
            user_id=archive.user_id,
            created_at=archive.created_at,
            decode_fallbacks=fallbacks,
            **decoded,
        )


archive_service = ArchiveService()
