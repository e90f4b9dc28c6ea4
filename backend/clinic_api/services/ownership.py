"""
Clinic Tracker Backend — Record Ownership Check
================================================

What:  One predicate deciding whether a user may touch a daily log record.
How:   Look the record up by primary key, then compare its user_id with the
       caller's. The outcome is a tagged Ownership value; require_ownership()
       turns it into the record or the matching HTTP error.
Who:   Every update and delete in RecordService.

Outcomes:
    OK          record exists and user_id matches
    NOT_FOUND   no record with that id           → 404
    FORBIDDEN   record exists, other owner       → 403
"""

import enum
from typing import Any, Optional, Tuple, Type

from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.exceptions import ForbiddenError, NotFoundError


class Ownership(str, enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


def classify(record: Optional[Any], user_id: int) -> Ownership:
    """Pure part of the check, for a record that has already been loaded."""
    if record is None:
        return Ownership.NOT_FOUND
    if record.user_id != user_id:
        return Ownership.FORBIDDEN
    return Ownership.OK


async def check_ownership(
    db: AsyncSession,
    model: Type[Any],
    record_id: int,
    user_id: int,
) -> Tuple[Ownership, Optional[Any]]:
    """Returns the outcome and the loaded record (None when not found)."""
    record = await db.get(model, record_id)
    return classify(record, user_id), record


async def require_ownership(
    db: AsyncSession,
    model: Type[Any],
    record_id: int,
    user_id: int,
    resource: str,
    action: str,
) -> Any:
    """
    Returns the record owned by user_id.

    Raises:
        NotFoundError:  no record with record_id
        ForbiddenError: the record belongs to another user
    """
    outcome, record = await check_ownership(db, model, record_id, user_id)
    if outcome is Ownership.NOT_FOUND:
        raise NotFoundError(resource=resource, resource_id=record_id)
    if outcome is Ownership.FORBIDDEN:
        raise ForbiddenError(resource=resource, action=action)
    return record
