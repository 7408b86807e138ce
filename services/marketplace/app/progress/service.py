"""Lecture progress and course completion rollup.

Course progress is always recomputed from the full set of the user's progress
rows for the course, never maintained as a running counter. Reaching 100%
for the first time stamps the enrollment and issues the certificate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.service import get_enrollment
from app.certificates.service import build_certificate, get_certificate
from app.exceptions import LectureNotFoundError, NotEnrolledError
from app.models.course import Course
from app.models.lecture import Lecture
from app.models.lecture_progress import LectureProgress
from app.models.section import Section
from app.money import percent
from app.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

@dataclass
class ProgressResult:
    progress: LectureProgress
    course_progress: int
    course_completed: bool
    certificate_generated: bool


async def _get_course_id_for_lecture(db: AsyncSession, lecture_id: UUID) -> UUID:
    result = await db.execute(
        select(Section.course_id)
        .join(Lecture, Lecture.section_id == Section.section_id)
        .where(Lecture.lecture_id == lecture_id)
    )
    course_id = result.scalar_one_or_none()
    if course_id is None:
        raise LectureNotFoundError()
    return course_id


async def _count_lectures(db: AsyncSession, course_id: UUID) -> int:
    stmt = (
        select(func.count())
        .select_from(Lecture)
        .join(Section, Lecture.section_id == Section.section_id)
        .where(Section.course_id == course_id)
    )
    return await db.scalar(stmt) or 0


async def _count_completed_elsewhere(
    db: AsyncSession, user_id: UUID, course_id: UUID, lecture_id: UUID
) -> int:
    """Completed lectures of the course for this user, excluding ``lecture_id``."""
    stmt = (
        select(func.count())
        .select_from(LectureProgress)
        .join(Lecture, LectureProgress.lecture_id == Lecture.lecture_id)
        .join(Section, Lecture.section_id == Section.section_id)
        .where(
            Section.course_id == course_id,
            LectureProgress.user_id == user_id,
            LectureProgress.is_completed.is_(True),
            LectureProgress.lecture_id != lecture_id,
        )
    )
    return await db.scalar(stmt) or 0


def _apply_changes(progress: LectureProgress, changes: dict[str, Any], now: datetime) -> None:
    if "watched_duration" in changes:
        progress.watched_duration = changes["watched_duration"]
    if "last_position" in changes:
        progress.last_position = changes["last_position"]
    if "is_completed" in changes:
        progress.is_completed = changes["is_completed"]
        progress.completed_at = now if changes["is_completed"] else None


async def update_lecture_progress(
    db: AsyncSession,
    user_id: UUID,
    lecture_id: UUID,
    changes: dict[str, Any],
) -> ProgressResult:
    """Merge-patch one lecture's progress and roll the result up to the course.

    ``changes`` holds only the fields the client sent (``is_completed``,
    ``watched_duration``, ``last_position``); anything absent keeps its
    stored value.
    """
    course_id = await _get_course_id_for_lecture(db, lecture_id)
    enrollment = await get_enrollment(db, user_id, course_id)
    if enrollment is None:
        raise NotEnrolledError()

    now = datetime.now(timezone.utc)
    result = await db.execute(
        select(LectureProgress).where(
            LectureProgress.user_id == user_id,
            LectureProgress.lecture_id == lecture_id,
        )
    )
    progress = result.scalar_one_or_none()
    if progress is None:
        progress = LectureProgress(
            user_id=user_id,
            lecture_id=lecture_id,
            is_completed=False,
            watched_duration=0,
            last_position=0,
        )
    _apply_changes(progress, changes, now)
    progress.updated_at = now

    total = await _count_lectures(db, course_id)
    completed = await _count_completed_elsewhere(db, user_id, course_id, lecture_id)
    if progress.is_completed:
        completed += 1
    course_progress = percent(completed, total)

    uow = UnitOfWork(db)
    uow.add(progress)

    enrollment.progress = course_progress
    enrollment.last_accessed_at = now
    course_completed = False
    if course_progress == 100 and enrollment.completed_at is None:
        enrollment.completed_at = now
        course_completed = True
    uow.add(enrollment)

    certificate_generated = False
    if course_completed and await get_certificate(db, user_id, course_id) is None:
        course = await db.get(Course, course_id)
        uow.add(build_certificate(user_id, course))
        certificate_generated = True

    await uow.commit()

    if course_completed:
        logger.info("User %s completed course %s", user_id, course_id)
    return ProgressResult(
        progress=progress,
        course_progress=course_progress,
        course_completed=course_completed,
        certificate_generated=certificate_generated,
    )
