"""
Instructor applications: pure business logic (zero FastAPI imports).

State machine enforced here:
  (none)    → PENDING    submit_application()
  PENDING   → APPROVED   review_application(decision=APPROVED), user promoted to INSTRUCTOR
  PENDING   → REJECTED   review_application(decision=REJECTED)
  APPROVED / REJECTED → (blocked)  ApplicationAlreadyReviewedError

A user holds at most one PENDING application. The rule is checked by query
before insert; there is no partial unique index behind it.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    ApplicationAlreadyPendingError,
    ApplicationAlreadyReviewedError,
    ApplicationNotFoundError,
    UserNotFoundError,
)
from app.models.enums import ApplicationStatus
from app.models.instructor_application import InstructorApplication
from app.models.user import User
from app.unit_of_work import UnitOfWork
from shared.constants import Role

logger = logging.getLogger(__name__)


async def submit_application(
    session: AsyncSession,
    user_id: uuid.UUID,
    *,
    headline: str,
    bio: str,
) -> InstructorApplication:
    pending = await session.scalar(
        sa.select(InstructorApplication.application_id).where(
            InstructorApplication.user_id == user_id,
            InstructorApplication.status == ApplicationStatus.PENDING,
        )
    )
    if pending is not None:
        raise ApplicationAlreadyPendingError()

    application = InstructorApplication(user_id=user_id, headline=headline, bio=bio)
    session.add(application)
    await session.flush()
    logger.info("Instructor application %s submitted by %s", application.application_id, user_id)
    return application


async def get_latest_application(
    session: AsyncSession, user_id: uuid.UUID
) -> InstructorApplication | None:
    result = await session.execute(
        sa.select(InstructorApplication)
        .where(InstructorApplication.user_id == user_id)
        .order_by(InstructorApplication.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def list_applications(
    session: AsyncSession,
    status: ApplicationStatus | None = None,
) -> list[tuple[InstructorApplication, User | None]]:
    """All applications with their applicant, PENDING first, newest first within a status."""
    pending_first = sa.case(
        (InstructorApplication.status == ApplicationStatus.PENDING, 0), else_=1
    )
    stmt = (
        sa.select(InstructorApplication, User)
        .outerjoin(User, User.user_id == InstructorApplication.user_id)
        .order_by(pending_first, InstructorApplication.created_at.desc())
    )
    if status is not None:
        stmt = stmt.where(InstructorApplication.status == status)
    result = await session.execute(stmt)
    return [(application, user) for application, user in result.all()]


async def review_application(
    session: AsyncSession,
    application_id: uuid.UUID,
    reviewer_id: uuid.UUID,
    *,
    decision: ApplicationStatus,
    admin_note: str | None,
) -> InstructorApplication:
    """Approve or reject a PENDING application.

    Approval also promotes the applicant to INSTRUCTOR and copies the
    application's headline and bio onto the user; both rows commit together.
    """
    application = await session.get(InstructorApplication, application_id)
    if application is None:
        raise ApplicationNotFoundError()
    if application.status != ApplicationStatus.PENDING:
        raise ApplicationAlreadyReviewedError()
    if decision == ApplicationStatus.APPROVED and await session.get(User, application.user_id) is None:
        raise UserNotFoundError()

    uow = UnitOfWork(session)
    application.status = decision
    application.admin_note = admin_note
    application.reviewed_by_id = reviewer_id
    application.reviewed_at = datetime.now(timezone.utc)
    uow.add(application)

    if decision == ApplicationStatus.APPROVED:
        uow.execute(
            sa.update(User)
            .where(User.user_id == application.user_id)
            .values(role=Role.INSTRUCTOR, headline=application.headline, bio=application.bio)
        )

    await uow.commit()
    logger.info(
        "Application %s %s by admin %s", application_id, decision.value, reviewer_id
    )
    return application
