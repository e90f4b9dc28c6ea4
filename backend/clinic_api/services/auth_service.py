"""
Clinic Tracker Backend — One-Time Code Verification
====================================================

What:  Issues short numeric codes to a patient's EMR email address and
       verifies them.
How:

    generate_code(patient_id)
        1. Look up the EMR row (404 if unknown)
        2. Insert auth_codes row, expires_at = now + AUTH_CODE_TTL_MINUTES
        3. COMMIT
        4. Send the code by mail (MailDeliveryError → 500, code stays valid)

    verify_code(patient_id, code)
        1. Newest unused, unexpired row matching (patient_id, code)
        2. Mark it used, append verified_codes, upsert user_management
        3. No match → {"success": false} with HTTP 200

Codes come from the `secrets` module, one decimal digit at a time.
"""

import logging
import secrets
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_api.config import settings
from clinic_api.exceptions import ClinicError, DatabaseError
from clinic_api.models import AuthCode, UserManagement, VerifiedCode
from clinic_api.models._columns import utcnow
from clinic_api.schemas.auth import AuthResult
from clinic_api.services.emr_service import emr_service
from clinic_api.services.mail_service import MailSender, mail_sender

logger = logging.getLogger(__name__)

DIGITS = "0123456789"


def generate_auth_code(length: int = 6) -> str:
    return "".join(secrets.choice(DIGITS) for _ in range(length))


def code_email_body(patient_name: str, code: str, ttl_minutes: int) -> str:
    return (
        f"Hello {patient_name},\n\n"
        f"Your verification code is {code}.\n"
        f"It expires in {ttl_minutes} minutes.\n\n"
        "Thank you."
    )


class AuthService:

    def __init__(self, sender: MailSender):
        self.sender = sender

    async def generate_code(self, db: AsyncSession, patient_id: str) -> AuthResult:
        """
        Raises:
            NotFoundError:     no EMR row for patient_id (→ 404)
            MailDeliveryError: the code was stored but could not be mailed (→ 500)
            DatabaseError:     the code could not be stored (→ 500)
        """
        patient = await emr_service.get_by_patient_id(db, patient_id)
        code = generate_auth_code(settings.auth_code_length)
        ttl = settings.auth_code_ttl_minutes

        try:
            db.add(
                AuthCode(
                    patient_id=patient_id,
                    auth_code=code,
                    expires_at=utcnow() + timedelta(minutes=ttl),
                )
            )
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Could not store auth code for %s: %s", patient_id, e, exc_info=True)
            raise DatabaseError(
                message="Could not issue a verification code. Please try again.",
                context={"patient_id": patient_id},
            )
        logger.info("Auth code issued for patient %s (expires in %d min)", patient_id, ttl)

        await self.sender.send(
            to=patient.email,
            subject="Your verification code",
            body=code_email_body(patient.patient_name, code, ttl),
        )
        return AuthResult(
            success=True,
            message="A verification code has been generated and sent by email.",
        )

    async def verify_code(self, db: AsyncSession, patient_id: str, code: str) -> AuthResult:
        try:
            now = utcnow()
            result = await db.execute(
                select(AuthCode)
                .where(
                    AuthCode.patient_id == patient_id,
                    AuthCode.auth_code == code,
                    AuthCode.expires_at > now,
                    AuthCode.is_used.is_(False),
                )
                .order_by(AuthCode.created_at.desc(), AuthCode.id.desc())
                .limit(1)
            )
            issued = result.scalar_one_or_none()
            if issued is None:
                logger.info("Rejected verification attempt for patient %s", patient_id)
                return AuthResult(success=False, message="Invalid or expired verification code.")

            issued.is_used = True
            db.add(VerifiedCode(patient_id=patient_id, auth_code=code))

            managed = await db.execute(
                select(UserManagement).where(UserManagement.patient_id == patient_id)
            )
            account = managed.scalar_one_or_none()
            if account is None:
                db.add(UserManagement(patient_id=patient_id, last_login=now))
            else:
                account.last_login = now
            await db.flush()
        except ClinicError:
            raise
        except SQLAlchemyError as e:
            logger.error("Verification for %s failed: %s", patient_id, e, exc_info=True)
            raise DatabaseError(
                message="Could not verify the code. Please try again.",
                context={"patient_id": patient_id},
            )

        logger.info("Patient %s verified", patient_id)
        return AuthResult(success=True, message="Verification completed successfully.")


auth_service = AuthService(mail_sender)
