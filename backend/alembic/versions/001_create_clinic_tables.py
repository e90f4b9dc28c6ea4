"""Create clinic tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates every table of the clinic tracker: accounts, EMR, the seven
       daily logs, archives, verification state and the diagnosis log.

Rollback: downgrade() drops all of them (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(with_last_updated: bool = True):
    columns = [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]
    if with_last_updated:
        columns.append(
            sa.Column(
                "last_updated",
                sa.TIMESTAMP(timezone=True),
                server_default=sa.text("CURRENT_TIMESTAMP"),
                nullable=False,
            )
        )
    return columns


def _log_table(name: str, date_column: str, *columns, index: bool = True) -> None:
    """A daily log table: id, user_id, the log's own columns, timestamps."""
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        *columns,
        sa.Column(date_column, sa.Date(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=f"pk_{name}"),
    )
    if index:
        prefix = name.replace("_records", "")
        op.create_index(f"idx_{prefix}_user_date", name, ["user_id", date_column])


def upgrade() -> None:
    # ── Accounts & EMR ────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(100), nullable=False,
                  comment="Login identifier; unique across accounts"),
        sa.Column("password_hash", sa.String(255), nullable=False,
                  comment="bcrypt hash of the account password"),
        sa.Column("patient_id", sa.String(50), nullable=True,
                  comment="Patient identifier of the linked emr_data row"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("patient_id", name="uq_users_patient_id"),
    )

    op.create_table(
        "emr_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_name", sa.String(100), nullable=False),
        sa.Column("patient_id", sa.String(50), nullable=False,
                  comment="Clinic-issued patient identifier"),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(20)),
        sa.Column("birth_date", sa.Date()),
        sa.Column("gender", sa.String(10)),
        sa.Column("ast", sa.Float()),
        sa.Column("alt", sa.Float()),
        sa.Column("ggt", sa.Float()),
        sa.Column("albumin", sa.Float()),
        sa.Column("medical_record", sa.Text()),
        sa.Column("prescription_record", sa.Text()),
        sa.Column("weight", sa.Float()),
        sa.Column("waist_circumference", sa.Float()),
        sa.Column("bmi", sa.Float()),
        sa.Column("glucose", sa.Float()),
        sa.Column("hba1c", sa.Float()),
        sa.Column("triglyceride", sa.Float()),
        sa.Column("ldl", sa.Float()),
        sa.Column("hdl", sa.Float()),
        sa.Column("uric_acid", sa.Float()),
        sa.Column("sbp", sa.Integer()),
        sa.Column("dbp", sa.Integer()),
        sa.Column("gfr", sa.Float()),
        sa.Column("plt", sa.Integer()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_emr_data"),
        sa.UniqueConstraint("patient_id", name="uq_emr_data_patient_id"),
    )

    # ── Daily logs ────────────────────────────────────────────────────────
    for meal in ("breakfast", "lunch", "dinner", "snack"):
        _log_table(
            f"{meal}_records",
            f"{meal}_date",
            sa.Column(f"{meal}_text", sa.String(500), nullable=False),
        )

    _log_table(
        "exercise_records",
        "exercise_date",
        sa.Column("exercise_text", sa.Text(), nullable=False),
        sa.Column("intensity", sa.String(20), nullable=False),
    )
    _log_table(
        "weight_records",
        "weight_date",
        sa.Column("weight", sa.Float(), nullable=False, comment="Body weight in kg"),
    )

    review_columns = []
    for topic in ("hunger", "sleep", "activity", "emotion", "alcohol"):
        review_columns.append(sa.Column(f"{topic}_option", sa.Integer(), nullable=False))
        review_columns.append(sa.Column(f"{topic}_text", sa.String(100), nullable=False))
    review_columns.append(sa.Column("comment", sa.Text(), nullable=True))
    _log_table("daily_reviews", "review_date", *review_columns, index=False)
    op.create_unique_constraint(
        "uq_daily_review_user_date", "daily_reviews", ["user_id", "review_date"]
    )

    # ── Archives ──────────────────────────────────────────────────────────
    op.create_table(
        "daily_archives",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("archive_date", sa.Date(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("breakfast_data", sa.Text()),
        sa.Column("lunch_data", sa.Text()),
        sa.Column("dinner_data", sa.Text()),
        sa.Column("snack_data", sa.Text()),
        sa.Column("exercise_data", sa.Text()),
        sa.Column("weight_data", sa.Text()),
        sa.Column("daily_review_data", sa.Text()),
        *_timestamps(with_last_updated=False),
        sa.PrimaryKeyConstraint("id", name="pk_daily_archives"),
        sa.UniqueConstraint("archive_date", "user_id", name="uq_daily_archive_date_user"),
    )

    # ── Verification ──────────────────────────────────────────────────────
    op.create_table(
        "auth_codes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.String(50), nullable=False),
        sa.Column("auth_code", sa.String(10), nullable=False),
        *_timestamps(with_last_updated=False),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("is_used", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_auth_codes"),
        sa.ForeignKeyConstraint(["patient_id"], ["emr_data.patient_id"]),
    )
    op.create_index("idx_auth_codes_patient_code", "auth_codes", ["patient_id", "auth_code"])

    op.create_table(
        "verified_codes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.String(50), nullable=False),
        sa.Column("auth_code", sa.String(10), nullable=False),
        sa.Column(
            "verified_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_verified_codes"),
        sa.ForeignKeyConstraint(["patient_id"], ["emr_data.patient_id"]),
    )

    op.create_table(
        "user_management",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.String(50), nullable=False),
        sa.Column("last_login", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_user_management"),
        sa.UniqueConstraint("patient_id", name="uq_user_management_patient_id"),
        sa.ForeignKeyConstraint(["patient_id"], ["emr_data.patient_id"]),
    )

    # ── Diagnosis log ─────────────────────────────────────────────────────
    op.create_table(
        "diagnosis_details",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("patient_id", sa.String(50), nullable=False),
        sa.Column("formula", sa.String(30), nullable=False),
        sa.Column("index_score", sa.Float()),
        sa.Column("index_interpretation", sa.String(50)),
        sa.Column("fibrosis_score", sa.Float()),
        sa.Column("fibrosis_interpretation", sa.String(50)),
        sa.Column("has_diabetes", sa.Boolean(), nullable=False),
        sa.Column("diagnosis_date", sa.TIMESTAMP(timezone=True), nullable=False),
        *_timestamps(with_last_updated=False),
        sa.PrimaryKeyConstraint("id", name="pk_diagnosis_details"),
        sa.ForeignKeyConstraint(["patient_id"], ["emr_data.patient_id"]),
    )
    op.create_index(
        "idx_diagnosis_patient_date", "diagnosis_details", ["patient_id", "diagnosis_date"]
    )


def downgrade() -> None:
    op.drop_index("idx_diagnosis_patient_date", table_name="diagnosis_details")
    op.drop_table("diagnosis_details")
    op.drop_table("user_management")
    op.drop_table("verified_codes")
    op.drop_index("idx_auth_codes_patient_code", table_name="auth_codes")
    op.drop_table("auth_codes")
    op.drop_table("daily_archives")
    op.drop_table("daily_reviews")
    for name in ("weight", "exercise", "snack", "dinner", "lunch", "breakfast"):
        op.drop_index(f"idx_{name}_user_date", table_name=f"{name}_records")
        op.drop_table(f"{name}_records")
    op.drop_table("emr_data")
    op.drop_table("users")
