"""
Clinic Tracker Backend — Diagnosis Detail SQLAlchemy Model
===========================================================

What:  Append-only log of clinical index calculations.
How:   DiagnosisService.diagnose() inserts one row per call and never updates
       or de-duplicates earlier rows. History is read newest first.

`formula` records which steatosis formula produced index_score, since the
formula is selectable per deployment and per request.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from clinic_api.database import Base
from clinic_api.models._columns import created_at_column, utcnow


class DiagnosisDetail(Base):
    __tablename__ = "diagnosis_details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("emr_data.patient_id"), nullable=False
    )

    formula: Mapped[str] = mapped_column(String(30), nullable=False)
    # NULL score = not computable from the stored labs
    index_score: Mapped[Optional[float]] = mapped_column(Float)
    index_interpretation: Mapped[Optional[str]] = mapped_column(String(50))

    fibrosis_score: Mapped[Optional[float]] = mapped_column(Float)
    fibrosis_interpretation: Mapped[Optional[str]] = mapped_column(String(50))

    has_diabetes: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    diagnosis_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    created_at: Mapped[datetime] = created_at_column()

    __table_args__ = (
        Index("idx_diagnosis_patient_date", "patient_id", "diagnosis_date"),
    )
