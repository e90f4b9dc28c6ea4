"""
Clinic Tracker Backend — Verification SQLAlchemy Models
========================================================

What:  Persisted state of the one-time-code email verification flow.

    auth_codes        issued codes; expires_at = issue time + TTL; is_used
                      flips to true on the first successful verification
    verified_codes    append-only audit log of successful verifications
    user_management   one row per patient identifier; last_login refreshed
                      on every successful verification
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from clinic_api.database import Base
from clinic_api.models._columns import created_at_column, utcnow


class AuthCode(Base):
    __tablename__ = "auth_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("emr_data.patient_id"), nullable=False
    )
    auth_code: Mapped[str] = mapped_column(String(10), nullable=False)
    created_at: Mapped[datetime] = created_at_column()
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_used: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    __table_args__ = (Index("idx_auth_codes_patient_code", "patient_id", "auth_code"),)


class VerifiedCode(Base):
    __tablename__ = "verified_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("emr_data.patient_id"), nullable=False
    )
    auth_code: Mapped[str] = mapped_column(String(10), nullable=False)
    verified_at: Mapped[datetime] = created_at_column()


class UserManagement(Base):
    __tablename__ = "user_management"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("emr_data.patient_id"), nullable=False, unique=True
    )
    last_login: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
