"""Catalog business logic: published course browsing, free enrollment, enrollment lookups.

Pure business logic, no FastAPI imports. ``get_published_course`` and
``get_enrollment`` are the shared lookups the other domains guard with.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import CourseNotFoundError, OwnCourseError, PaymentRequiredError
from app.models.cart_item import CartItem
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.enums import CourseStatus
from app.models.section import Section
from app.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


async def get_published_course(db: AsyncSession, course_id: UUID) -> Course:
    result = await db.execute(
        select(Course).where(
            Course.course_id == course_id,
            Course.status == CourseStatus.PUBLISHED,
        )
    )
    course = result.scalar_one_or_none()
    if course is None:
        raise CourseNotFoundError()
    return course


async def get_enrollment(
    db: AsyncSession, user_id: UUID, course_id: UUID
) -> Enrollment | None:
    result = await db.execute(
        select(Enrollment).where(
            Enrollment.user_id == user_id,
            Enrollment.course_id == course_id,
        )
    )
    return result.scalar_one_or_none()


async def enrolled_course_ids(
    db: AsyncSession, user_id: UUID, course_ids: list[UUID]
) -> set[UUID]:
    """Subset of ``course_ids`` the user already holds an enrollment for."""
    if not course_ids:
        return set()
    result = await db.execute(
        select(Enrollment.course_id).where(
            Enrollment.user_id == user_id,
            Enrollment.course_id.in_(course_ids),
        )
    )
    return set(result.scalars().all())


async def list_courses(
    db: AsyncSession,
    *,
    category: str | None = None,
    search: str | None = None,
    is_free: bool | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Course], int]:
    filters = [Course.status == CourseStatus.PUBLISHED]
    if category is not None:
        filters.append(Course.category == category)
    if search:
        filters.append(Course.title.ilike(f"%{search}%"))
    if is_free is not None:
        filters.append(Course.is_free.is_(is_free))

    total = await db.scalar(select(func.count()).select_from(Course).where(*filters)) or 0
    stmt = (
        select(Course)
        .where(*filters)
        .order_by(Course.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all()), total


async def get_course_detail(db: AsyncSession, course_id: UUID) -> tuple[Course, list[Section]]:
    course = await get_published_course(db, course_id)
    result = await db.execute(
        select(Section)
        .where(Section.course_id == course_id)
        .options(selectinload(Section.lectures))
        .order_by(Section.sort_order)
    )
    return course, list(result.scalars().all())


async def enroll_free(db: AsyncSession, user_id: UUID, course_id: UUID) -> tuple[Enrollment, bool]:
    """Enroll in a free course. Returns ``(enrollment, already_enrolled)``."""
    course = await get_published_course(db, course_id)
    if course.instructor_id == user_id:
        raise OwnCourseError("You cannot enroll in your own course.")
    if not course.is_free:
        raise PaymentRequiredError()

    existing = await get_enrollment(db, user_id, course_id)
    if existing is not None:
        return existing, True

    enrollment = Enrollment(user_id=user_id, course_id=course_id)
    uow = UnitOfWork(db)
    uow.add(enrollment)
    uow.execute(
        update(Course)
        .where(Course.course_id == course_id)
        .values(total_students=Course.total_students + 1)
    )
    uow.execute(
        delete(CartItem).where(CartItem.user_id == user_id, CartItem.course_id == course_id)
    )
    try:
        await uow.commit()
    except IntegrityError:
        logger.warning("Concurrent free enrollment for user %s course %s", user_id, course_id)
        return await get_enrollment(db, user_id, course_id), True

    logger.info("User %s enrolled in free course %s", user_id, course_id)
    return enrollment, False


async def list_my_enrollments(db: AsyncSession, user_id: UUID) -> list[Enrollment]:
    result = await db.execute(
        select(Enrollment)
        .where(Enrollment.user_id == user_id)
        .order_by(Enrollment.created_at.desc())
    )
    return list(result.scalars().all())
