"""Certificate service: issuance on course completion and public verification.

Pure business logic, no FastAPI imports. Issuance does not commit; the
progress rollup queues the new row in its own unit of work.
"""

from __future__ import annotations

import logging
import secrets
import string
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import CertificateNotFoundError
from app.models.certificate import Certificate
from app.models.course import Course

logger = logging.getLogger(__name__)

CODE_PREFIX = "CERT-"
_CODE_ALPHABET = string.ascii_uppercase + string.digits
_CODE_LENGTH = 10


def generate_certificate_code() -> str:
    """Human-readable verification code, e.g. ``CERT-7QK2M9XA1B``."""
    return CODE_PREFIX + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(_CODE_LENGTH))


async def get_certificate(
    db: AsyncSession, user_id: UUID, course_id: UUID
) -> Certificate | None:
    result = await db.execute(
        select(Certificate).where(
            Certificate.user_id == user_id,
            Certificate.course_id == course_id,
        )
    )
    return result.scalar_one_or_none()


def build_certificate(user_id: UUID, course: Course) -> Certificate:
    certificate = Certificate(
        certificate_code=generate_certificate_code(),
        user_id=user_id,
        course_id=course.course_id,
        course_name=course.title,
        instructor_name=course.instructor_name,
    )
    logger.info(
        "Issuing certificate %s to user %s for course %s",
        certificate.certificate_code, user_id, course.course_id,
    )
    return certificate


async def list_my_certificates(db: AsyncSession, user_id: UUID) -> list[Certificate]:
    result = await db.execute(
        select(Certificate)
        .where(Certificate.user_id == user_id)
        .order_by(Certificate.issued_at.desc())
    )
    return list(result.scalars().all())


async def get_certificate_by_code(db: AsyncSession, code: str) -> Certificate:
    result = await db.execute(
        select(Certificate).where(Certificate.certificate_code == code.strip().upper())
    )
    certificate = result.scalar_one_or_none()
    if certificate is None:
        raise CertificateNotFoundError()
    return certificate
