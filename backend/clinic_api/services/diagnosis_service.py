"""
Clinic Tracker Backend — Diagnosis Service
===========================================

What:  Runs the liver index formulas over a patient's stored EMR labs.
How:   The EMR row becomes a LabProfile; the steatosis formula strategy is
       taken from ?formula= when given, else from STEATOSIS_FORMULA. The
       fibrosis score is computed alongside when INCLUDE_FIBROSIS_SCORE is on.

    preview()   compute only
    diagnose()  compute and append a diagnosis_details row
    history()   stored rows, most recent first

Incomplete labs are not an error: the affected score and interpretation
are null in the result and in the stored row.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.clinical.formulas import (
    IndexResult,
    LabProfile,
    SteatosisFormula,
    evaluate_fibrosis,
    get_formula,
)
from clinic_api.config import settings
from clinic_api.exceptions import ClinicError, DatabaseError
from clinic_api.models import DiagnosisDetail
from clinic_api.models._columns import utcnow
from clinic_api.schemas.diagnosis import (
    DiagnosisHistory,
    DiagnosisRecord,
    DiagnosisResult,
    IndexScore,
)
from clinic_api.services.emr_service import emr_service

logger = logging.getLogger(__name__)


def _index_score(result: IndexResult) -> IndexScore:
    return IndexScore(
        name=result.name,
        score=result.score,
        interpretation=result.interpretation,
        label=result.label,
    )


class DiagnosisService:

    def resolve_formula(self, name: Optional[str] = None) -> SteatosisFormula:
        """Request override first, then the configured default. Unknown name → 400."""
        return get_formula(name if name else settings.steatosis_formula)

    async def preview(
        self, db: AsyncSession, patient_id: str, formula: Optional[str] = None
    ) -> DiagnosisResult:
        strategy = self.resolve_formula(formula)
        emr = await emr_service.get_by_patient_id(db, patient_id)
        return self._calculate(patient_id, LabProfile.from_emr(emr), strategy)

    async def diagnose(
        self, db: AsyncSession, patient_id: str, formula: Optional[str] = None
    ) -> DiagnosisResult:
        strategy = self.resolve_formula(formula)
        emr = await emr_service.get_by_patient_id(db, patient_id)
        result = self._calculate(patient_id, LabProfile.from_emr(emr), strategy)

        fibrosis = result.fibrosis
        row = DiagnosisDetail(
            patient_id=patient_id,
            formula=result.formula,
            index_score=result.index.score,
            index_interpretation=result.index.interpretation,
            fibrosis_score=fibrosis.score if fibrosis else None,
            fibrosis_interpretation=fibrosis.interpretation if fibrosis else None,
            has_diabetes=result.has_diabetes,
            diagnosis_date=result.calculated_at,
        )
        try:
            db.add(row)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Could not store diagnosis for %s: %s", patient_id, e, exc_info=True)
            raise DatabaseError(
                message="Could not save the diagnosis. Please try again.",
                context={"patient_id": patient_id},
            )

        logger.info(
            "Diagnosis %d stored for %s: %s=%s (%s)",
            row.id, patient_id, result.formula, result.index.score, result.index.interpretation,
        )
        return result.model_copy(update={"id": row.id, "persisted": True})

    async def history(self, db: AsyncSession, patient_id: str) -> DiagnosisHistory:
        try:
            await emr_service.get_by_patient_id(db, patient_id)
            result = await db.execute(
                select(DiagnosisDetail)
                .where(DiagnosisDetail.patient_id == patient_id)
                .order_by(DiagnosisDetail.diagnosis_date.desc(), DiagnosisDetail.id.desc())
            )
            rows = result.scalars().all()
        except ClinicError:
            raise
        except SQLAlchemyError as e:
            logger.error("Diagnosis history for %s failed: %s", patient_id, e, exc_info=True)
            raise DatabaseError(message="Could not retrieve the diagnosis history.")

        return DiagnosisHistory(
            patient_id=patient_id,
            diagnoses=[DiagnosisRecord.model_validate(row) for row in rows],
        )

    def _calculate(
        self, patient_id: str, profile: LabProfile, strategy: SteatosisFormula
    ) -> DiagnosisResult:
        index = strategy.evaluate(profile)
        fibrosis = evaluate_fibrosis(profile) if settings.include_fibrosis_score else None
        if not index.computable:
            logger.info("%s not computable for %s: incomplete labs", strategy.name, patient_id)

        return DiagnosisResult(
            patient_id=patient_id,
            formula=strategy.name,
            has_diabetes=profile.has_diabetes,
            index=_index_score(index),
            fibrosis=_index_score(fibrosis) if fibrosis else None,
            calculated_at=utcnow(),
        )


diagnosis_service = DiagnosisService()
