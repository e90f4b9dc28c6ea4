"""
Clinic Tracker Backend — EMR Service
=====================================

What:  Read and maintain emr_data rows (patient demographics and labs).
Who:   /api/emr routes, /api/auth/emr-data, and DiagnosisService /
       AuthService through get_by_patient_id().
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.exceptions import ClinicError, DatabaseError, NotFoundError, ValidationError
from clinic_api.models import EmrRecord
from clinic_api.models._columns import utcnow
from clinic_api.schemas.emr import (
    EmrCreate,
    EmrCreatedResponse,
    EmrResponse,
    EmrUpdate,
    EmrUpdatedResponse,
)

logger = logging.getLogger(__name__)


class EmrService:

    async def list_records(
        self, db: AsyncSession, patient_id: Optional[str] = None
    ) -> List[EmrResponse]:
        """All EMR rows ordered by id, optionally narrowed to one patient."""
        query = select(EmrRecord).order_by(EmrRecord.id.asc())
        if patient_id:
            query = query.where(EmrRecord.patient_id == patient_id)
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            raise self._database_error("list", e)
        return [EmrResponse.model_validate(row) for row in result.scalars().all()]

    async def get_record(self, db: AsyncSession, record_id: int) -> EmrResponse:
        try:
            record = await db.get(EmrRecord, record_id)
        except SQLAlchemyError as e:
            raise self._database_error("get", e)
        if record is None:
            raise NotFoundError(resource="EMR record", resource_id=record_id)
        return EmrResponse.model_validate(record)

    async def get_by_patient_id(self, db: AsyncSession, patient_id: str) -> EmrRecord:
        """ORM row for a patient identifier. Raises NotFoundError when unknown."""
        try:
            result = await db.execute(
                select(EmrRecord).where(EmrRecord.patient_id == patient_id)
            )
            record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._database_error("get_by_patient_id", e)
        if record is None:
            raise NotFoundError(resource="patient", resource_id=patient_id)
        return record

    async def create_record(self, db: AsyncSession, payload: EmrCreate) -> EmrCreatedResponse:
        try:
            existing = await db.execute(
                select(EmrRecord.id).where(EmrRecord.patient_id == payload.patient_id)
            )
            if existing.scalar_one_or_none() is not None:
                raise ValidationError(
                    message=f"Patient ID '{payload.patient_id}' is already registered",
                    field="patient_id",
                )
            record = EmrRecord(**payload.model_dump())
            db.add(record)
            await db.flush()
            logger.info("EMR record %d created for patient %s", record.id, record.patient_id)
            return EmrCreatedResponse(id=record.id, emr=EmrResponse.model_validate(record))
        except ClinicError:
            raise
        except IntegrityError as e:
            logger.warning("EMR insert rejected by constraint: %s", e.orig)
            raise ValidationError(
                message=f"Patient ID '{payload.patient_id}' is already registered",
                field="patient_id",
            )
        except SQLAlchemyError as e:
            raise self._database_error("create", e)

    async def update_record(
        self, db: AsyncSession, record_id: int, payload: EmrUpdate
    ) -> EmrUpdatedResponse:
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError(message="Nothing to update. Provide at least one EMR field.")
        # Lab values may be cleared with null; identity fields may not
        for required in ("patient_name", "email"):
            if required in changes and changes[required] is None:
                raise ValidationError(message=f"{required} cannot be null", field=required)
        try:
            record = await db.get(EmrRecord, record_id)
            if record is None:
                raise NotFoundError(resource="EMR record", resource_id=record_id)
            for field, value in changes.items():
                setattr(record, field, value)
            record.last_updated = utcnow()
            await db.flush()
            logger.info("EMR record %d updated (%s)", record_id, ", ".join(changes))
            return EmrUpdatedResponse(emr=EmrResponse.model_validate(record))
        except ClinicError:
            raise
        except SQLAlchemyError as e:
            raise self._database_error("update", e)

    @staticmethod
    def _database_error(operation: str, error: Exception) -> DatabaseError:
        logger.error("Database error during EMR %s: %s", operation, error, exc_info=True)
        return DatabaseError(
            message="Could not process the EMR request. Please try again.",
            context={"operation": operation, "error_type": type(error).__name__},
        )


emr_service = EmrService()
