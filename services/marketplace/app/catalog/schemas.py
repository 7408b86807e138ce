from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import CourseStatus, LectureType
from app.pagination import OffsetPage


class CourseSummary(BaseModel):
    """Lightweight course card for catalog, cart and favourites views."""

    model_config = ConfigDict(from_attributes=True)

    course_id: UUID
    title: str
    slug: str
    thumbnail_url: str | None
    instructor_id: UUID
    instructor_name: str
    category: str | None
    price: Decimal
    discount_price: Decimal | None
    is_free: bool
    currency: str
    rating_avg: float
    review_count: int
    total_students: int


CourseListResponse = OffsetPage[CourseSummary]


class CourseResponse(CourseSummary):
    description: str | None
    status: CourseStatus
    created_at: datetime
    updated_at: datetime


class LectureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lecture_id: UUID
    title: str
    lecture_type: LectureType
    duration_secs: int | None
    sort_order: int
    is_preview: bool
    # Only set for preview lectures; the rest stream from the player
    video_url: str | None = None


class SectionResponse(BaseModel):
    section_id: UUID
    title: str
    sort_order: int
    lectures: list[LectureResponse]


class CourseDetailResponse(BaseModel):
    course: CourseResponse
    sections: list[SectionResponse]
    total_lectures: int


class EnrollResponse(BaseModel):
    course_id: UUID
    enrolled: bool = True
    already_enrolled: bool = Field(description="True when the caller was enrolled before this call.")


class EnrollmentItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: UUID
    progress: int
    completed_at: datetime | None
    last_accessed_at: datetime | None


class EnrollmentListResponse(BaseModel):
    enrollments: list[EnrollmentItem]
