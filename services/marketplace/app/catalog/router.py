"""Catalog router: HTTP layer only.

Public course browsing plus free enrollment and the caller's enrollment list.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog import controller
from app.catalog.schemas import (
    CourseDetailResponse,
    CourseListResponse,
    EnrollmentListResponse,
    EnrollResponse,
)
from app.database import get_db
from app.dependencies import get_current_user
from shared.models.user import CurrentUser

router = APIRouter(tags=["Catalog"])


@router.get(
    "/courses",
    response_model=CourseListResponse,
    summary="List / search published courses",
)
async def list_courses(
    category: str | None = Query(None, description="Filter by category."),
    search: str | None = Query(None, max_length=200, description="Case-insensitive title match."),
    is_free: bool | None = Query(None, description="Only free (true) or paid (false) courses."),
    limit: int = Query(20, ge=1, le=100, description="Items per page."),
    offset: int = Query(0, ge=0, description="Number of items to skip."),
    db: AsyncSession = Depends(get_db),
) -> CourseListResponse:
    return await controller.list_courses(
        db,
        category=category,
        search=search,
        is_free=is_free,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/courses/{course_id}",
    response_model=CourseDetailResponse,
    summary="Course detail with curriculum",
    description="Sections and lectures in display order. 404 for unpublished courses.",
)
async def get_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> CourseDetailResponse:
    return await controller.get_course_detail(db, course_id)


@router.post(
    "/courses/{course_id}/enroll",
    response_model=EnrollResponse,
    summary="Enroll in a free course",
    description="Idempotent. Paid courses go through checkout instead (402).",
)
async def enroll_free(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> EnrollResponse:
    return await controller.enroll_free(db, current_user.id, course_id)


@router.get(
    "/enrollments",
    response_model=EnrollmentListResponse,
    summary="My enrollments",
    description="Course id and progress for every course the caller is enrolled in.",
)
async def list_my_enrollments(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> EnrollmentListResponse:
    return await controller.list_my_enrollments(db, current_user.id)
