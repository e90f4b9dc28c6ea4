"""
Clinic Tracker Backend — Liver Index Formulas
==============================================

What:  Pure, deterministic functions mapping lab values to a liver index and
       an interpretation bucket.
How:   Closed-form arithmetic, rounded to 2 decimals. A missing input
       (None, 0 or any other falsy value) makes the result None ("not
       computable"); these functions never raise for missing labs.
Who:   Called through the strategies in clinic_api.clinical.formulas.

Formulas:
    FLI (AST/ALT/platelet form)
        fli = age * AST / (platelets * sqrt(ALT))
        < 2 → low, otherwise high

    Fibrosis score
        -1.675 + 0.037*age + 0.094*BMI + 1.13*diabetes
               + 0.99*(AST/ALT) - 0.013*platelets + 0.66*albumin
        < -1.455 → low, otherwise elevated

    FLI (logistic form)
        z   = 0.953*ln(TG) + 0.139*BMI + 0.718*ln(GGT) + 0.053*waist - 15.745
        fli = 100 * e^z / (1 + e^z)
        < 30 → low, 30 to < 60 → intermediate, ≥ 60 → high

    Hepatic Steatosis Index
        hsi = 8 * (ALT/AST) + BMI, +2 if female, +2 if diabetic
        > 36 → high, < 30 → low, otherwise intermediate

    Diabetes
        glucose ≥ 126 mg/dL OR HbA1c ≥ 6.5 %
"""

import math
from datetime import date
from typing import Optional

LOW = "low"
INTERMEDIATE = "intermediate"
HIGH = "high"
ELEVATED = "elevated"

# Human-readable text for each interpretation code
INTERPRETATION_LABELS = {
    "fli_ast": {
        LOW: "Low probability of fatty liver",
        HIGH: "High probability of fatty liver",
    },
    "fibrosis": {
        LOW: "Low risk of advanced fibrosis",
        ELEVATED: "Elevated risk of advanced fibrosis",
    },
    "fli_logistic": {
        LOW: "Fatty liver ruled out",
        INTERMEDIATE: "Indeterminate for fatty liver",
        HIGH: "Fatty liver likely",
    },
    "hsi": {
        LOW: "Fatty liver ruled out",
        INTERMEDIATE: "Indeterminate for fatty liver",
        HIGH: "Fatty liver likely",
    },
}

GLUCOSE_DIABETES_THRESHOLD = 126.0
HBA1C_DIABETES_THRESHOLD = 6.5

FEMALE_VALUES = {"f", "female", "woman"}


def _all_present(*values) -> bool:
    return all(values)


# ── Shared derivations ────────────────────────────────────────────────────

def has_diabetes(glucose: Optional[float], hba1c: Optional[float]) -> bool:
    """True if either glucose or HbA1c reaches its diagnostic threshold."""
    if glucose is not None and glucose >= GLUCOSE_DIABETES_THRESHOLD:
        return True
    if hba1c is not None and hba1c >= HBA1C_DIABETES_THRESHOLD:
        return True
    return False


def is_female(gender: Optional[str]) -> bool:
    return bool(gender) and gender.strip().lower() in FEMALE_VALUES


def age_from_birth_date(birth_date: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Completed years between birth_date and today; None without a birth date."""
    if birth_date is None:
        return None
    today = today or date.today()
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


# ── FLI, AST/ALT/platelet form ────────────────────────────────────────────

def calculate_fli(
    age: Optional[float],
    ast: Optional[float],
    platelets: Optional[float],
    alt: Optional[float],
) -> Optional[float]:
    if not _all_present(age, ast, platelets, alt):
        return None
    return round(age * ast / (platelets * math.sqrt(alt)), 2)


def interpret_fli(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    return LOW if score < 2 else HIGH


# ── Fibrosis score ────────────────────────────────────────────────────────

def calculate_fibrosis_score(
    age: Optional[float],
    bmi: Optional[float],
    diabetic: bool,
    ast: Optional[float],
    alt: Optional[float],
    platelets: Optional[float],
    albumin: Optional[float],
) -> Optional[float]:
    if not _all_present(age, bmi, ast, alt, platelets, albumin):
        return None
    diabetes_flag = 1.0 if diabetic else 0.0
    score = (
        -1.675
        + 0.037 * age
        + 0.094 * bmi
        + 1.13 * diabetes_flag
        + 0.99 * (ast / alt)
        - 0.013 * platelets
        + 0.66 * albumin
    )
    return round(score, 2)


def interpret_fibrosis(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    return LOW if score < -1.455 else ELEVATED


# ── FLI, logistic form ────────────────────────────────────────────────────

def calculate_logistic_fli(
    triglycerides: Optional[float],
    bmi: Optional[float],
    ggt: Optional[float],
    waist: Optional[float],
) -> Optional[float]:
    if not _all_present(triglycerides, bmi, ggt, waist):
        return None
    # ln() is undefined for non-positive labs
    if triglycerides < 0 or ggt < 0:
        return None
    z = (
        0.953 * math.log(triglycerides)
        + 0.139 * bmi
        + 0.718 * math.log(ggt)
        + 0.053 * waist
        - 15.745
    )
    # 100 * e^z / (1 + e^z), written as a logistic to stay finite for large z
    return round(100.0 / (1.0 + math.exp(-z)), 2)


def interpret_logistic_fli(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    if score < 30:
        return LOW
    if score < 60:
        return INTERMEDIATE
    return HIGH


# ── Hepatic Steatosis Index ───────────────────────────────────────────────

def calculate_hsi(
    alt: Optional[float],
    ast: Optional[float],
    bmi: Optional[float],
    female: bool,
    diabetic: bool,
) -> Optional[float]:
    if not _all_present(alt, ast, bmi):
        return None
    hsi = 8 * (alt / ast) + bmi
    if female:
        hsi += 2
    if diabetic:
        hsi += 2
    return round(hsi, 2)


def interpret_hsi(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    if score > 36:
        return HIGH
    if score < 30:
        return LOW
    return INTERMEDIATE
