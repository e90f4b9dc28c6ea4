"""
Clinic Tracker Backend — Daily Archive SQLAlchemy Model
========================================================

What:  ORM model for `daily_archives`: a frozen JSON snapshot of one user's
       seven daily logs for one calendar date.
How:   Each *_data column holds a JSON array serialized as TEXT ("[]" when
       the day had no rows in that log). The (archive_date, user_id) pair is
       unique; archiving the same pair again replaces the row.

Lifecycle:
    Created or replaced only by ArchiveService.create_archive; never
    updated in place and never deleted automatically.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from clinic_api.database import Base
from clinic_api.models._columns import created_at_column


class DailyArchive(Base):
    __tablename__ = "daily_archives"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    archive_date: Mapped[date] = mapped_column(Date, nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)

    breakfast_data: Mapped[Optional[str]] = mapped_column(Text)
    lunch_data: Mapped[Optional[str]] = mapped_column(Text)
    dinner_data: Mapped[Optional[str]] = mapped_column(Text)
    snack_data: Mapped[Optional[str]] = mapped_column(Text)
    exercise_data: Mapped[Optional[str]] = mapped_column(Text)
    weight_data: Mapped[Optional[str]] = mapped_column(Text)
    daily_review_data: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = created_at_column()

    __table_args__ = (
        UniqueConstraint("archive_date", "user_id", name="uq_daily_archive_date_user"),
    )

    def __repr__(self) -> str:
        return f"<DailyArchive(user_id={self.user_id}, archive_date='{self.archive_date}')>"
