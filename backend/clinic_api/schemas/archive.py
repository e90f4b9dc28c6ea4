"""
Clinic Tracker Backend — Daily Archive Schemas
===============================================

What:  Request and response bodies for /api/archive.
How:   The POST body and its summary use camelCase keys on the wire
       (userId, archiveDate, archivedCounts, ...) through field aliases;
       Python code uses the snake_case names.
"""

from datetime import date, datetime
from typing import Any, List

from pydantic import BaseModel, Field

ALIASED = {"populate_by_name": True}


class ArchiveCreate(BaseModel):
    user_id: int = Field(alias="userId", gt=0)
    archive_date: date = Field(alias="archiveDate")

    model_config = ALIASED


class ArchivedCounts(BaseModel):
    """Number of rows captured per source log."""
    breakfasts: int = 0
    lunches: int = 0
    dinners: int = 0
    snacks: int = 0
    exercises: int = 0
    weights: int = 0
    daily_reviews: int = Field(default=0, alias="dailyReviews")

    model_config = ALIASED


class ArchiveCreatedResponse(BaseModel):
    message: str = "Archive completed"
    archived_date: date = Field(alias="archivedDate")
    archived_counts: ArchivedCounts = Field(alias="archivedCounts")

    model_config = ALIASED


class ArchiveResponse(BaseModel):
    """
    A stored snapshot with every *_data column decoded to a list.

    decode_fallbacks names the columns whose stored text was not a JSON
    array and were therefore returned as []. It is empty for snapshots
    written by this service.
    """
    id: int
    archive_date: date
    user_id: int
    breakfast_data: List[Any] = Field(default_factory=list)
    lunch_data: List[Any] = Field(default_factory=list)
    dinner_data: List[Any] = Field(default_factory=list)
    snack_data: List[Any] = Field(default_factory=list)
    exercise_data: List[Any] = Field(default_factory=list)
    weight_data: List[Any] = Field(default_factory=list)
    daily_review_data: List[Any] = Field(default_factory=list)
    created_at: datetime
    decode_fallbacks: List[str] = Field(default_factory=list)
