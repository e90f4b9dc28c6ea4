"""
Clinic Tracker Backend — Steatosis Formula Strategies
======================================================

What:  Strategy objects wrapping the index functions in indices.py, plus the
       registry used to pick one by name.
How:   Every strategy takes a LabProfile and returns an IndexResult. The
       diagnosis service resolves the strategy from settings.steatosis_formula
       or from the request's ?formula= override.
Who:   DiagnosisService.

Adding a formula:
    Subclass SteatosisFormula, register it in FORMULA_REGISTRY and add its
    name to config.STEATOSIS_FORMULA_NAMES.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional

from clinic_api.clinical import indices
from clinic_api.exceptions import ValidationError


@dataclass(frozen=True)
class LabProfile:
    """Lab values of one patient at the moment of calculation."""

    age: Optional[int] = None
    ast: Optional[float] = None
    alt: Optional[float] = None
    ggt: Optional[float] = None
    platelets: Optional[float] = None
    bmi: Optional[float] = None
    waist: Optional[float] = None
    triglycerides: Optional[float] = None
    albumin: Optional[float] = None
    glucose: Optional[float] = None
    hba1c: Optional[float] = None
    gender: Optional[str] = None

    @classmethod
    def from_emr(cls, emr, today: Optional[date] = None) -> "LabProfile":
        """Builds a profile from an EmrRecord; age is derived from birth_date."""
        return cls(
            age=indices.age_from_birth_date(emr.birth_date, today),
            ast=emr.ast,
            alt=emr.alt,
            ggt=emr.ggt,
            platelets=emr.plt,
            bmi=emr.bmi,
            waist=emr.waist_circumference,
            triglycerides=emr.triglyceride,
            albumin=emr.albumin,
            glucose=emr.glucose,
            hba1c=emr.hba1c,
            gender=emr.gender,
        )

    @property
    def has_diabetes(self) -> bool:
        return indices.has_diabetes(self.glucose, self.hba1c)

    @property
    def is_female(self) -> bool:
        return indices.is_female(self.gender)


@dataclass(frozen=True)
class IndexResult:
    """Score plus interpretation; both None when the labs are incomplete."""

    name: str
    score: Optional[float]
    interpretation: Optional[str]

    @property
    def computable(self) -> bool:
        return self.score is not None

    @property
    def label(self) -> Optional[str]:
        if self.interpretation is None:
            return None
        return indices.INTERPRETATION_LABELS[self.name][self.interpretation]


class SteatosisFormula(ABC):
    """A fatty-liver index computed from a LabProfile."""

    name: str = ""
    description: str = ""

    @abstractmethod
    def score(self, profile: LabProfile) -> Optional[float]:
        ...

    @abstractmethod
    def interpret(self, score: Optional[float]) -> Optional[str]:
        ...

    def evaluate(self, profile: LabProfile) -> IndexResult:
        value = self.score(profile)
        return IndexResult(name=self.name, score=value, interpretation=self.interpret(value))


class AstAltFli(SteatosisFormula):
    name = "fli_ast"
    description = "age × AST / (platelets × √ALT)"

    def score(self, profile: LabProfile) -> Optional[float]:
        return indices.calculate_fli(profile.age, profile.ast, profile.platelets, profile.alt)

    def interpret(self, score: Optional[float]) -> Optional[str]:
        return indices.interpret_fli(score)


class LogisticFli(SteatosisFormula):
    name = "fli_logistic"
    description = "Logistic fatty liver index from triglycerides, BMI, GGT and waist"

    def score(self, profile: LabProfile) -> Optional[float]:
        return indices.calculate_logistic_fli(
            profile.triglycerides, profile.bmi, profile.ggt, profile.waist
        )

    def interpret(self, score: Optional[float]) -> Optional[str]:
        return indices.interpret_logistic_fli(score)


class HepaticSteatosisIndex(SteatosisFormula):
    name = "hsi"
    description = "8 × ALT/AST + BMI (+2 female, +2 diabetes)"

    def score(self, profile: LabProfile) -> Optional[float]:
        return indices.calculate_hsi(
            profile.alt, profile.ast, profile.bmi, profile.is_female, profile.has_diabetes
        )

    def interpret(self, score: Optional[float]) -> Optional[str]:
        return indices.interpret_hsi(score)


def evaluate_fibrosis(profile: LabProfile) -> IndexResult:
    """Fibrosis score; computed next to whichever steatosis formula is active."""
    score = indices.calculate_fibrosis_score(
        profile.age,
        profile.bmi,
        profile.has_diabetes,
        profile.ast,
        profile.alt,
        profile.platelets,
        profile.albumin,
    )
    return IndexResult(name="fibrosis", score=score, interpretation=indices.interpret_fibrosis(score))


# ── Registry ──────────────────────────────────────────────────────────────
FORMULA_REGISTRY: Dict[str, SteatosisFormula] = {
    formula.name: formula
    for formula in (AstAltFli(), LogisticFli(), HepaticSteatosisIndex())
}


def get_formula(name: str) -> SteatosisFormula:
    """
    Looks up a formula strategy by name (case-insensitive).

    Raises:
        ValidationError: Unknown formula name (→ 400)
    """
    key = (name or "").strip().lower()
    try:
        return FORMULA_REGISTRY[key]
    except KeyError:
        raise ValidationError(
            message=f"Unknown formula '{name}'. Must be one of: {sorted(FORMULA_REGISTRY)}",
            field="formula",
        ) from None
