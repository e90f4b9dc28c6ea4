"""
Clinic Tracker Backend — Daily Log SQLAlchemy Models
=====================================================

What:  ORM models for the seven per-user, per-day logs:
       breakfast, lunch, dinner, snack, exercise, weight and daily review.
How:   Every log row carries `user_id`, a DATE column named after the log
       (`breakfast_date`, `weight_date`, `review_date`, ...) and the
       created/updated timestamps from DailyLogMixin.

Query Patterns:
    - A user's history:   WHERE user_id = ? ORDER BY <date> DESC, created_at DESC
    - One day (archive):  WHERE user_id = ? AND <date> = ?
      → composite (user_id, <date>) index on every table

`user_id` has no database-level foreign key; user existence is checked by
the services when settings.require_existing_user is on.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from clinic_api.database import Base
from clinic_api.models._columns import created_at_column, last_updated_column


class DailyLogMixin:
    """Columns shared by every daily log table."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = created_at_column()
    last_updated: Mapped[datetime] = last_updated_column()


# ── Meals ─────────────────────────────────────────────────────────────────

class BreakfastRecord(DailyLogMixin, Base):
    __tablename__ = "breakfast_records"

    breakfast_text: Mapped[str] = mapped_column(String(500), nullable=False)
    breakfast_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (Index("idx_breakfast_user_date", "user_id", "breakfast_date"),)


class LunchRecord(DailyLogMixin, Base):
    __tablename__ = "lunch_records"

    lunch_text: Mapped[str] = mapped_column(String(500), nullable=False)
    lunch_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (Index("idx_lunch_user_date", "user_id", "lunch_date"),)


class DinnerRecord(DailyLogMixin, Base):
    __tablename__ = "dinner_records"

    dinner_text: Mapped[str] = mapped_column(String(500), nullable=False)
    dinner_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (Index("idx_dinner_user_date", "user_id", "dinner_date"),)


class SnackRecord(DailyLogMixin, Base):
    __tablename__ = "snack_records"

    snack_text: Mapped[str] = mapped_column(String(500), nullable=False)
    snack_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (Index("idx_snack_user_date", "user_id", "snack_date"),)


# ── Exercise & weight ─────────────────────────────────────────────────────

class ExerciseRecord(DailyLogMixin, Base):
    __tablename__ = "exercise_records"

    exercise_text: Mapped[str] = mapped_column(Text, nullable=False)
    # One of: low, moderate, high (validated by the request schema)
    intensity: Mapped[str] = mapped_column(String(20), nullable=False)
    exercise_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (Index("idx_exercise_user_date", "user_id", "exercise_date"),)


class WeightRecord(DailyLogMixin, Base):
    __tablename__ = "weight_records"

    weight: Mapped[float] = mapped_column(Float, nullable=False, comment="Body weight in kg")
    weight_date: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (Index("idx_weight_user_date", "user_id", "weight_date"),)


# ── Daily review ──────────────────────────────────────────────────────────

class DailyReview(DailyLogMixin, Base):
    """
    End-of-day self assessment. At most one per (user_id, review_date):
    posting a second review for the same day updates the first.

    Each *_option is a 1-5 rating; the matching *_text is the label the
    client showed for that rating.
    """

    __tablename__ = "daily_reviews"

    review_date: Mapped[date] = mapped_column(Date, nullable=False)

    hunger_option: Mapped[int] = mapped_column(Integer, nullable=False)
    hunger_text: Mapped[str] = mapped_column(String(100), nullable=False)
    sleep_option: Mapped[int] = mapped_column(Integer, nullable=False)
    sleep_text: Mapped[str] = mapped_column(String(100), nullable=False)
    activity_option: Mapped[int] = mapped_column(Integer, nullable=False)
    activity_text: Mapped[str] = mapped_column(String(100), nullable=False)
    emotion_option: Mapped[int] = mapped_column(Integer, nullable=False)
    emotion_text: Mapped[str] = mapped_column(String(100), nullable=False)
    alcohol_option: Mapped[int] = mapped_column(Integer, nullable=False)
    alcohol_text: Mapped[str] = mapped_column(String(100), nullable=False)

    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "review_date", name="uq_daily_review_user_date"),
    )
