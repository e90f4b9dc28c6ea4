"""
Clinic Tracker Backend — EMR SQLAlchemy Model
==============================================

What:  ORM model for the `emr_data` table: one row per patient holding the
       demographics and the latest lab panel.
Who:   Read by the diagnosis service (lab profile for the index formulas)
       and the auth service (recipient address for verification codes).

Units:
    ast / alt / ggt         U/L
    albumin                 g/dL
    weight                  kg
    waist_circumference     cm
    glucose                 mg/dL (fasting)
    hba1c                   %
    triglyceride/ldl/hdl    mg/dL
    uric_acid               mg/dL
    sbp / dbp               mmHg
    gfr                     mL/min/1.73m²
    plt                     10³/μL
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clinic_api.database import Base
from clinic_api.models._columns import created_at_column, last_updated_column


class EmrRecord(Base):
    """Electronic medical record for a single patient."""

    __tablename__ = "emr_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    patient_name: Mapped[str] = mapped_column(String(100), nullable=False)
    patient_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Clinic-issued patient identifier",
    )
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    birth_date: Mapped[Optional[date]] = mapped_column(Date)
    gender: Mapped[Optional[str]] = mapped_column(String(10))

    # ── Liver function ────────────────────────────────────────────────────
    ast: Mapped[Optional[float]] = mapped_column(Float)
    alt: Mapped[Optional[float]] = mapped_column(Float)
    ggt: Mapped[Optional[float]] = mapped_column(Float)
    albumin: Mapped[Optional[float]] = mapped_column(Float)

    # ── Clinical notes ────────────────────────────────────────────────────
    medical_record: Mapped[Optional[str]] = mapped_column(Text)
    prescription_record: Mapped[Optional[str]] = mapped_column(Text)

    # ── Body measurements ─────────────────────────────────────────────────
    weight: Mapped[Optional[float]] = mapped_column(Float)
    waist_circumference: Mapped[Optional[float]] = mapped_column(Float)
    bmi: Mapped[Optional[float]] = mapped_column(Float)

    # ── Glycaemic / lipid panel ───────────────────────────────────────────
    glucose: Mapped[Optional[float]] = mapped_column(Float)
    hba1c: Mapped[Optional[float]] = mapped_column(Float)
    triglyceride: Mapped[Optional[float]] = mapped_column(Float)
    ldl: Mapped[Optional[float]] = mapped_column(Float)
    hdl: Mapped[Optional[float]] = mapped_column(Float)
    uric_acid: Mapped[Optional[float]] = mapped_column(Float)

    # ── Blood pressure, kidney, haematology ───────────────────────────────
    sbp: Mapped[Optional[int]] = mapped_column(Integer)
    dbp: Mapped[Optional[int]] = mapped_column(Integer)
    gfr: Mapped[Optional[float]] = mapped_column(Float)
    plt: Mapped[Optional[int]] = mapped_column(Integer)

    created_at: Mapped[datetime] = created_at_column()
    last_updated: Mapped[datetime] = last_updated_column()

    def __repr__(self) -> str:
        return f"<EmrRecord(id={self.id}, patient_id='{self.patient_id}')>"
