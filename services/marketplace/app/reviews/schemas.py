from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from shared.models.pagination import PageMeta


class ReviewRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    rating: int = Field(ge=1, le=5, description="Star rating, 1 to 5.")
    comment: str | None = Field(None, max_length=2000)


class ReviewAuthor(BaseModel):
    user_id: UUID
    name: str | None = None
    image_url: str | None = None


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    review_id: UUID
    course_id: UUID
    rating: int
    comment: str | None
    created_at: datetime
    updated_at: datetime
    author: ReviewAuthor


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    meta: PageMeta
    rating_distribution: dict[int, int] = Field(
        description="Approved review count per star value, keys 1..5."
    )
    rating_avg: float
    review_count: int


class DeleteReviewResponse(BaseModel):
    deleted: bool = True
