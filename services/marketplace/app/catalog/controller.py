"""Catalog controller: maps service results to HTTP responses, converts domain errors."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog import service
from app.catalog.schemas import (
    CourseDetailResponse,
    CourseListResponse,
    CourseResponse,
    CourseSummary,
    EnrollmentItem,
    EnrollmentListResponse,
    EnrollResponse,
    LectureResponse,
    SectionResponse,
)
from app.exceptions import MarketplaceError
from app.http_errors import to_http_exception


async def list_courses(
    db: AsyncSession,
    *,
    category: str | None,
    search: str | None,
    is_free: bool | None,
    limit: int,
    offset: int,
) -> CourseListResponse:
    courses, total = await service.list_courses(
        db,
        category=category,
        search=search,
        is_free=is_free,
        limit=limit,
        offset=offset,
    )
    return CourseListResponse(
        items=[CourseSummary.model_validate(c) for c in courses],
        total=total,
        limit=limit,
        offset=offset,
    )


async def get_course_detail(db: AsyncSession, course_id: UUID) -> CourseDetailResponse:
    try:
        course, sections = await service.get_course_detail(db, course_id)
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc

    section_responses = []
    for s in sections:
        lectures = s.lectures or []
        section_responses.append(
            SectionResponse(
                section_id=s.section_id,
                title=s.title,
                sort_order=s.sort_order,
                lectures=[
                    LectureResponse.model_validate(l).model_copy(
                        update={"video_url": l.video_url if l.is_preview else None}
                    )
                    for l in lectures
                ],
            )
        )
    return CourseDetailResponse(
        course=CourseResponse.model_validate(course),
        sections=section_responses,
        total_lectures=sum(len(s.lectures) for s in section_responses),
    )


async def enroll_free(db: AsyncSession, user_id: UUID, course_id: UUID) -> EnrollResponse:
    try:
        enrollment, already_enrolled = await service.enroll_free(db, user_id, course_id)
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return EnrollResponse(course_id=enrollment.course_id, already_enrolled=already_enrolled)


async def list_my_enrollments(db: AsyncSession, user_id: UUID) -> EnrollmentListResponse:
    enrollments = await service.list_my_enrollments(db, user_id)
    return EnrollmentListResponse(
        enrollments=[EnrollmentItem.model_validate(e) for e in enrollments],
    )
