"""Review business logic and course rating aggregation.

Pure business logic, no FastAPI imports. Every mutation flushes and then
recomputes the course aggregate from the full set of approved reviews
inside the request's transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.service import get_enrollment, get_published_course
from app.exceptions import (
    AlreadyReviewedError,
    CourseNotFoundError,
    NotEnrolledError,
    NotReviewOwnerError,
    ReviewNotFoundError,
    SelfReviewError,
)
from app.models.course import Course
from app.models.enums import ReviewSort
from app.models.review import Review
from app.models.user import User
from app.money import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class ReviewPage:
    rows: list[tuple[Review, User | None]]
    total: int
    distribution: dict[int, int]
    rating_avg: Decimal
    review_count: int


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


async def recalculate_course_rating(db: AsyncSession, course_id: UUID) -> tuple[Decimal, int]:
    """Recompute ``rating_avg``/``review_count`` from every approved review.

    The average is rounded half-up to one decimal: {5,5,4,3,1} -> 3.6,
    {5,5,4,3} -> 4.3.
    """
    stmt = select(
        func.coalesce(func.sum(Review.rating), 0),
        func.count(Review.review_id),
    ).where(Review.course_id == course_id, Review.is_approved.is_(True))
    rating_sum, count = (await db.execute(stmt)).one()

    if count:
        rating_avg = round_half_up(Decimal(int(rating_sum)) / Decimal(count), 1)
    else:
        rating_avg = Decimal("0.0")

    await db.execute(
        update(Course)
        .where(Course.course_id == course_id)
        .values(rating_avg=rating_avg, review_count=count)
    )
    logger.debug("Course %s rating recomputed: %s over %d reviews", course_id, rating_avg, count)
    return rating_avg, count


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


async def _get_own_review(
    db: AsyncSession, course_id: UUID, review_id: UUID, user_id: UUID
) -> Review:
    review = await db.get(Review, review_id)
    if review is None or review.course_id != course_id:
        raise ReviewNotFoundError()
    if review.user_id != user_id:
        raise NotReviewOwnerError()
    return review


async def get_author(db: AsyncSession, user_id: UUID) -> User | None:
    return await db.get(User, user_id)


async def has_reviewed(db: AsyncSession, user_id: UUID, course_id: UUID) -> bool:
    existing = await db.scalar(
        select(Review.review_id).where(
            Review.user_id == user_id,
            Review.course_id == course_id,
        )
    )
    return existing is not None


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def create_review(
    db: AsyncSession,
    user_id: UUID,
    course_id: UUID,
    *,
    rating: int,
    comment: str | None,
) -> Review:
    course = await get_published_course(db, course_id)
    if course.instructor_id == user_id:
        raise SelfReviewError()

    if await get_enrollment(db, user_id, course_id) is None:
        raise NotEnrolledError("You must be enrolled in this course to review it.")

    if await has_reviewed(db, user_id, course_id):
        raise AlreadyReviewedError()

    review = Review(
        user_id=user_id,
        course_id=course_id,
        rating=rating,
        comment=comment or None,
    )
    db.add(review)
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Concurrent review for user %s course %s", user_id, course_id)
        raise AlreadyReviewedError() from exc
    await recalculate_course_rating(db, course_id)
    await db.refresh(review)
    return review


async def update_review(
    db: AsyncSession,
    user_id: UUID,
    course_id: UUID,
    review_id: UUID,
    *,
    rating: int,
    comment: str | None,
) -> Review:
    review = await _get_own_review(db, course_id, review_id, user_id)
    review.rating = rating
    review.comment = comment or None
    await db.flush()
    await recalculate_course_rating(db, course_id)
    await db.refresh(review)
    return review


async def delete_review(
    db: AsyncSession,
    user_id: UUID,
    course_id: UUID,
    review_id: UUID,
) -> None:
    review = await _get_own_review(db, course_id, review_id, user_id)
    await db.delete(review)
    await db.flush()
    await recalculate_course_rating(db, course_id)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


_SORT_ORDER = {
    ReviewSort.NEWEST: (Review.created_at.desc(),),
    ReviewSort.HIGHEST: (Review.rating.desc(), Review.created_at.desc()),
    ReviewSort.LOWEST: (Review.rating.asc(), Review.created_at.desc()),
}


async def list_reviews(
    db: AsyncSession,
    course_id: UUID,
    *,
    page: int,
    page_size: int,
    sort: ReviewSort = ReviewSort.NEWEST,
) -> ReviewPage:
    approved = (Review.course_id == course_id, Review.is_approved.is_(True))

    total = await db.scalar(select(func.count()).select_from(Review).where(*approved)) or 0

    stmt = (
        select(Review, User)
        .outerjoin(User, User.user_id == Review.user_id)
        .where(*approved)
        .order_by(*_SORT_ORDER[sort])
        .limit(page_size)
        .offset((page - 1) * page_size)
    )
    rows = [(review, user) for review, user in (await db.execute(stmt)).all()]

    distribution = {star: 0 for star in range(1, 6)}
    grouped = await db.execute(
        select(Review.rating, func.count()).where(*approved).group_by(Review.rating)
    )
    for rating, count in grouped.all():
        distribution[rating] = count

    course = await db.get(Course, course_id)
    return ReviewPage(
        rows=rows,
        total=total,
        distribution=distribution,
        rating_avg=course.rating_avg if course else Decimal("0.0"),
        review_count=course.review_count if course else 0,
    )
