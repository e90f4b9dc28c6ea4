"""
Clinic Tracker Backend — Daily Log Schemas
===========================================

What:  Request and response bodies for the seven daily logs.
How:   The four meal logs differ only in their column prefix, so their
       schemas are generated by _meal_schemas(). Exercise, weight and the
       daily review carry extra rules and are written out by hand.

Envelopes (shared by every log):
    POST   → {id, message, <kind>_record}
    PUT    → {message, updated_record}
    DELETE → {message, deleted_record}
    batch  → {message, deleted_count, deleted_records}
"""

from datetime import date, datetime
from typing import Annotated, Generic, List, Literal, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, BeforeValidator, Field, create_model

# Labels sent by existing clients; stored as their English equivalents
LEGACY_INTENSITY_LABELS = {"저강도": "low", "중강도": "moderate", "고강도": "high"}


def _normalize_intensity(value):
    if isinstance(value, str):
        return LEGACY_INTENSITY_LABELS.get(value.strip(), value)
    return value


Intensity = Annotated[
    Literal["low", "moderate", "high"], BeforeValidator(_normalize_intensity)
]

UserId = Annotated[int, Field(gt=0, description="Owner's users.id")]
ReviewOption = Annotated[int, Field(ge=1, le=5)]
ReviewText = Annotated[str, Field(min_length=1, max_length=100)]

RecordT = TypeVar("RecordT")


# ══════════════════════════════════════════════════════════════════════════
# Shared envelopes
# ══════════════════════════════════════════════════════════════════════════


class RecordResponseBase(BaseModel):
    id: int
    user_id: int
    created_at: datetime
    last_updated: datetime

    model_config = {"from_attributes": True}


class RecordUpdated(BaseModel, Generic[RecordT]):
    message: str
    updated_record: RecordT


class RecordDeleted(BaseModel, Generic[RecordT]):
    message: str
    deleted_record: RecordT


class BatchDeleteRequest(BaseModel):
    ids: List[int] = Field(min_length=1, description="Record ids to delete")


class BatchDeleted(BaseModel, Generic[RecordT]):
    message: str
    deleted_count: int
    deleted_records: List[RecordT]


def created_envelope(kind: str, response: Type[BaseModel]) -> Type[BaseModel]:
    """{id, message, <kind>_record} for a POST response."""
    title = "".join(part.capitalize() for part in kind.split("_"))
    return create_model(
        f"{title}Created",
        id=(int, ...),
        message=(str, ...),
        **{f"{kind}_record": (response, ...)},
    )


# ══════════════════════════════════════════════════════════════════════════
# Meals
# ══════════════════════════════════════════════════════════════════════════


def _meal_schemas(meal: str) -> Tuple[Type[BaseModel], Type[BaseModel], Type[BaseModel]]:
    title = meal.capitalize()
    text_field, date_field = f"{meal}_text", f"{meal}_date"

    create = create_model(
        f"{title}Create",
        user_id=(UserId, ...),
        **{
            text_field: (str, Field(min_length=1, max_length=500)),
            date_field: (date, ...),
        },
    )
    update = create_model(
        f"{title}Update",
        **{
            text_field: (Optional[str], Field(default=None, min_length=1, max_length=500)),
            date_field: (Optional[date], None),
        },
    )
    response = create_model(
        f"{title}Response",
        __base__=RecordResponseBase,
        **{text_field: (str, ...), date_field: (date, ...)},
    )
    return create, update, response


BreakfastCreate, BreakfastUpdate, BreakfastResponse = _meal_schemas("breakfast")
LunchCreate, LunchUpdate, LunchResponse = _meal_schemas("lunch")
DinnerCreate, DinnerUpdate, DinnerResponse = _meal_schemas("dinner")
SnackCreate, SnackUpdate, SnackResponse = _meal_schemas("snack")


# ══════════════════════════════════════════════════════════════════════════
# Exercise
# ══════════════════════════════════════════════════════════════════════════


class ExerciseCreate(BaseModel):
    user_id: UserId
    exercise_text: str = Field(min_length=1)
    intensity: Intensity
    exercise_date: date


class ExerciseUpdate(BaseModel):
    exercise_text: Optional[str] = Field(default=None, min_length=1)
    intensity: Optional[Intensity] = None
    exercise_date: Optional[date] = None


class ExerciseResponse(RecordResponseBase):
    exercise_text: str
    intensity: str
    exercise_date: date


# ══════════════════════════════════════════════════════════════════════════
# Weight
# ══════════════════════════════════════════════════════════════════════════


class WeightCreate(BaseModel):
    """`weight` accepts numeric strings ("72.5") as well as numbers."""
    user_id: UserId
    weight: float = Field(gt=0, description="Body weight in kg")
    weight_date: date


class WeightUpdate(BaseModel):
    weight: Optional[float] = Field(default=None, gt=0)
    weight_date: Optional[date] = None


class WeightResponse(RecordResponseBase):
    weight: float
    weight_date: date


# ══════════════════════════════════════════════════════════════════════════
# Daily review
# ══════════════════════════════════════════════════════════════════════════


class DailyReviewCreate(BaseModel):
    """
    Posting a review for a (user_id, review_date) that already has one
    replaces its answers instead of creating a second row.
    """
    user_id: UserId
    review_date: date
    hunger_option: ReviewOption
    hunger_text: ReviewText
    sleep_option: ReviewOption
    sleep_text: ReviewText
    activity_option: ReviewOption
    activity_text: ReviewText
    emotion_option: ReviewOption
    emotion_text: ReviewText
    alcohol_option: ReviewOption
    alcohol_text: ReviewText
    comment: Optional[str] = None


class DailyReviewUpdate(BaseModel):
    hunger_option: Optional[ReviewOption] = None
    hunger_text: Optional[ReviewText] = None
    sleep_option: Optional[ReviewOption] = None
    sleep_text: Optional[ReviewText] = None
    activity_option: Optional[ReviewOption] = None
    activity_text: Optional[ReviewText] = None
    emotion_option: Optional[ReviewOption] = None
    emotion_text: Optional[ReviewText] = None
    alcohol_option: Optional[ReviewOption] = None
    alcohol_text: Optional[ReviewText] = None
    comment: Optional[str] = None


class DailyReviewResponse(RecordResponseBase):
    review_date: date
    hunger_option: int
    hunger_text: str
    sleep_option: int
    sleep_text: str
    activity_option: int
    activity_text: str
    emotion_option: int
    emotion_text: str
    alcohol_option: int
    alcohol_text: str
    comment: Optional[str] = None


class DailyReviewSaved(BaseModel):
    message: str
    review: DailyReviewResponse
