"""Reviews controller: maps service results to HTTP responses, converts domain errors."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import MarketplaceError
from app.http_errors import to_http_exception
from app.models.enums import ReviewSort
from app.models.review import Review
from app.models.user import User
from app.reviews import service
from app.reviews.schemas import (
    DeleteReviewResponse,
    ReviewAuthor,
    ReviewListResponse,
    ReviewRequest,
    ReviewResponse,
)
from shared.models.pagination import PageMeta


def _to_response(review: Review, author: User | None) -> ReviewResponse:
    return ReviewResponse(
        review_id=review.review_id,
        course_id=review.course_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        updated_at=review.updated_at,
        author=ReviewAuthor(
            user_id=review.user_id,
            name=author.name if author else None,
            image_url=author.image_url if author else None,
        ),
    )


async def list_reviews(
    db: AsyncSession,
    course_id: UUID,
    *,
    page: int,
    page_size: int,
    sort: ReviewSort,
) -> ReviewListResponse:
    result = await service.list_reviews(
        db, course_id, page=page, page_size=page_size, sort=sort,
    )
    return ReviewListResponse(
        reviews=[_to_response(review, user) for review, user in result.rows],
        meta=PageMeta.build(total=result.total, page=page, page_size=page_size),
        rating_distribution=result.distribution,
        rating_avg=result.rating_avg,
        review_count=result.review_count,
    )


async def create_review(
    db: AsyncSession, user_id: UUID, course_id: UUID, body: ReviewRequest
) -> ReviewResponse:
    try:
        review = await service.create_review(
            db, user_id, course_id, rating=body.rating, comment=body.comment,
        )
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return _to_response(review, await service.get_author(db, user_id))


async def update_review(
    db: AsyncSession,
    user_id: UUID,
    course_id: UUID,
    review_id: UUID,
    body: ReviewRequest,
) -> ReviewResponse:
    try:
        review = await service.update_review(
            db, user_id, course_id, review_id, rating=body.rating, comment=body.comment,
        )
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return _to_response(review, await service.get_author(db, user_id))


async def delete_review(
    db: AsyncSession, user_id: UUID, course_id: UUID, review_id: UUID
) -> DeleteReviewResponse:
    try:
        await service.delete_review(db, user_id, course_id, review_id)
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return DeleteReviewResponse()
