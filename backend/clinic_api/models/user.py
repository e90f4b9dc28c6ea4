"""
Clinic Tracker Backend — User SQLAlchemy Model
===============================================

What:  ORM model for the `users` table (application accounts).
How:   Integer identity primary key; `user_id` on every log table refers to
       this id. `patient_id` optionally links the account to its EMR row.

Table Design:
    - email is unique (duplicate sign-ups are rejected with 400)
    - password_hash holds a bcrypt hash, never the raw password
    - last_updated is refreshed by the ORM on every UPDATE
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from clinic_api.database import Base
from clinic_api.models._columns import created_at_column, last_updated_column


class User(Base):
    """An application account that owns daily log records."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Login identifier; unique across accounts",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the account password",
    )

    # Nullable: accounts can exist before their EMR record is linked
    patient_id: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        unique=True,
        comment="Patient identifier of the linked emr_data row",
    )

    created_at: Mapped[datetime] = created_at_column()
    last_updated: Mapped[datetime] = last_updated_column()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
