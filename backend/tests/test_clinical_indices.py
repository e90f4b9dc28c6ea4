"""
Clinic Tracker Backend — Clinical Index Unit Tests
===================================================

What:  Tests for the pure liver index functions and the formula registry.
How:   Known inputs with hand-computed results; no database.

What we test:
    ✅ Every calculator returns None when an input is missing or zero
    ✅ Scores for known lab panels and the interpretation boundaries
    ✅ Diabetes and sex derivations, age from birth date
    ✅ Formula registry matches the names STEATOSIS_FORMULA accepts
    ✅ Unknown formula names raise ValidationError
"""

from datetime import date
from types import SimpleNamespace

import pytest

from clinic_api.clinical import indices
from clinic_api.clinical.formulas import (
    FORMULA_REGISTRY,
    LabProfile,
    evaluate_fibrosis,
    get_formula,
)
from clinic_api.config import STEATOSIS_FORMULA_NAMES
from clinic_api.exceptions import ValidationError


class TestDerivations:

    def test_diabetes_by_glucose(self):
        assert indices.has_diabetes(127, 5.0) is True
        assert indices.has_diabetes(126, None) is True

    def test_diabetes_by_hba1c(self):
        assert indices.has_diabetes(100, 6.5) is True
        assert indices.has_diabetes(None, 7.1) is True

    def test_no_diabetes_below_thresholds(self):
        assert indices.has_diabetes(125.9, 6.4) is False
        assert indices.has_diabetes(None, None) is False

    @pytest.mark.parametrize("gender", ["F", "female", " Woman "])
    def test_female_values(self, gender):
        assert indices.is_female(gender) is True

    @pytest.mark.parametrize("gender", ["M", "male", "", None])
    def test_non_female_values(self, gender):
        assert indices.is_female(gender) is False

    def test_age_counts_completed_years(self):
        born = date(1980, 6, 15)
        assert indices.age_from_birth_date(born, today=date(2024, 6, 14)) == 43
        assert indices.age_from_birth_date(born, today=date(2024, 6, 15)) == 44

    def test_age_without_birth_date(self):
        assert indices.age_from_birth_date(None) is None


class TestFli:

    def test_known_value(self):
        # 40 * 30 / (200 * sqrt(25)) = 1200 / 1000
        assert indices.calculate_fli(40, 30, 200, 25) == 1.2

    @pytest.mark.parametrize(
        "args",
        [(None, 30, 200, 25), (40, None, 200, 25), (40, 30, 0, 25), (40, 30, 200, 0)],
    )
    def test_missing_input_returns_none(self, args):
        assert indices.calculate_fli(*args) is None

    def test_interpretation_boundary(self):
        assert indices.interpret_fli(1.99) == indices.LOW
        assert indices.interpret_fli(2.0) == indices.HIGH
        assert indices.interpret_fli(None) is None


class TestFibrosis:

    def test_elevated_panel(self):
        score = indices.calculate_fibrosis_score(50, 30, True, 40, 40, 200, 4.0)
        assert score == pytest.approx(5.155, abs=0.01)
        assert indices.interpret_fibrosis(score) == indices.ELEVATED

    def test_low_panel(self):
        score = indices.calculate_fibrosis_score(20, 20, False, 20, 40, 400, 3.0)
        assert score == pytest.approx(-1.78, abs=0.01)
        assert indices.interpret_fibrosis(score) == indices.LOW

    def test_missing_albumin_returns_none(self):
        assert indices.calculate_fibrosis_score(50, 30, True, 40, 40, 200, None) is None

    def test_interpretation_boundary(self):
        assert indices.interpret_fibrosis(-1.46) == indices.LOW
        assert indices.interpret_fibrosis(-1.455) == indices.ELEVATED


class TestLogisticFli:

    def test_high_panel(self):
        score = indices.calculate_logistic_fli(150, 30, 50, 100)
        assert score == pytest.approx(78.73, abs=0.05)
        assert indices.interpret_logistic_fli(score) == indices.HIGH

    def test_low_panel(self):
        score = indices.calculate_logistic_fli(80, 22, 20, 80)
        assert score < 30
        assert indices.interpret_logistic_fli(score) == indices.LOW

    def test_negative_lab_returns_none(self):
        assert indices.calculate_logistic_fli(-5, 30, 50, 100) is None

    def test_interpretation_boundaries(self):
        assert indices.interpret_logistic_fli(29.99) == indices.LOW
        assert indices.interpret_logistic_fli(30) == indices.INTERMEDIATE
        assert indices.interpret_logistic_fli(59.99) == indices.INTERMEDIATE
        assert indices.interpret_logistic_fli(60) == indices.HIGH


class TestHsi:

    def test_female_bonus(self):
        # 8 * 40/20 + 25 + 2
        assert indices.calculate_hsi(40, 20, 25, female=True, diabetic=False) == 43
        assert indices.interpret_hsi(43) == indices.HIGH

    def test_diabetes_bonus(self):
        assert indices.calculate_hsi(20, 40, 24, female=False, diabetic=True) == 30

    def test_buckets(self):
        assert indices.interpret_hsi(29.99) == indices.LOW
        assert indices.interpret_hsi(30) == indices.INTERMEDIATE
        assert indices.interpret_hsi(36) == indices.INTERMEDIATE
        assert indices.interpret_hsi(36.01) == indices.HIGH


class TestFormulaRegistry:

    def test_registry_matches_configurable_names(self):
        assert set(FORMULA_REGISTRY) == set(STEATOSIS_FORMULA_NAMES)

    def test_lookup_is_case_insensitive(self):
        assert get_formula(" HSI ").name == "hsi"

    def test_unknown_formula_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            get_formula("apri")
        assert exc_info.value.field == "formula"

    def test_profile_from_emr(self):
        emr = SimpleNamespace(
            birth_date=date(1970, 1, 1), ast=40.0, alt=25.0, ggt=50.0, plt=200,
            bmi=30.0, waist_circumference=100.0, triglyceride=150.0, albumin=4.0,
            glucose=130.0, hba1c=None, gender="F",
        )
        profile = LabProfile.from_emr(emr, today=date(2010, 1, 1))

        assert profile.age == 40
        assert profile.platelets == 200
        assert profile.has_diabetes is True
        assert profile.is_female is True

        result = get_formula("fli_ast").evaluate(profile)
        assert result.score == 1.6  # 40 * 40 / (200 * 5)
        assert result.interpretation == indices.LOW
        assert result.label == "Low probability of fatty liver"

    def test_incomplete_profile_is_not_computable(self):
        result = get_formula("fli_logistic").evaluate(LabProfile(bmi=30.0))
        assert result.computable is False
        assert result.interpretation is None
        assert result.label is None

    def test_fibrosis_result_name(self):
        assert evaluate_fibrosis(LabProfile()).name == "fibrosis"
