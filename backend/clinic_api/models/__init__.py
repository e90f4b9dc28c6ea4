"""
ORM models. Importing this package registers every table on Base.metadata
(used by Alembic autogenerate and by the test-suite's create_all).
"""

from clinic_api.models.archive import DailyArchive
from clinic_api.models.auth import AuthCode, UserManagement, VerifiedCode
from clinic_api.models.diagnosis import DiagnosisDetail
from clinic_api.models.emr import EmrRecord
from clinic_api.models.records import (
    BreakfastRecord,
    DailyReview,
    DinnerRecord,
    ExerciseRecord,
    LunchRecord,
    SnackRecord,
    WeightRecord,
)
from clinic_api.models.user import User

__all__ = [
    "AuthCode",
    "BreakfastRecord",
    "DailyArchive",
    "DailyReview",
    "DiagnosisDetail",
    "DinnerRecord",
    "EmrRecord",
    "ExerciseRecord",
    "LunchRecord",
    "SnackRecord",
    "User",
    "UserManagement",
    "VerifiedCode",
    "WeightRecord",
]
