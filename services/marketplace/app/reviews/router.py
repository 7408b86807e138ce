"""Reviews router: HTTP layer only.

Kept free of ``from __future__ import annotations`` because of the slowapi
decorator on review creation.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.dependencies import get_current_user, get_settings
from app.models.enums import ReviewSort
from app.rate_limit import limiter
from app.reviews import controller
from app.reviews.schemas import (
    DeleteReviewResponse,
    ReviewListResponse,
    ReviewRequest,
    ReviewResponse,
)
from shared.models.user import CurrentUser

router = APIRouter(prefix="/courses/{course_id}/reviews", tags=["Reviews"])


@router.get(
    "",
    response_model=ReviewListResponse,
    summary="List approved reviews for a course",
    description="Public. Includes the star histogram and the stored course aggregate.",
)
async def list_reviews(
    course_id: UUID,
    page: int = Query(1, ge=1, description="1-based page number."),
    sort: ReviewSort = Query(ReviewSort.NEWEST, description="newest | highest | lowest"),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ReviewListResponse:
    return await controller.list_reviews(
        db, course_id, page=page, page_size=settings.reviews_page_size, sort=sort,
    )


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a course",
    description="Enrolled students only, one review per course, never on your own course.",
)
@limiter.limit("10/minute")
async def create_review(
    request: Request,
    course_id: UUID,
    body: ReviewRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ReviewResponse:
    return await controller.create_review(db, current_user.id, course_id, body)


@router.put(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Edit your review",
)
async def update_review(
    course_id: UUID,
    review_id: UUID,
    body: ReviewRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ReviewResponse:
    return await controller.update_review(db, current_user.id, course_id, review_id, body)


@router.delete(
    "/{review_id}",
    response_model=DeleteReviewResponse,
    summary="Delete your review",
)
async def delete_review(
    course_id: UUID,
    review_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> DeleteReviewResponse:
    return await controller.delete_review(db, current_user.id, course_id, review_id)
