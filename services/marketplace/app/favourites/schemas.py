from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.catalog.schemas import CourseSummary


class ToggleFavouriteRequest(BaseModel):
    course_id: UUID


class ToggleFavouriteResponse(BaseModel):
    favourited: bool


class FavouriteStatusResponse(BaseModel):
    is_favourited: bool


class FavouriteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    wishlist_id: UUID
    course_id: UUID
    created_at: datetime
    course: CourseSummary


class FavouriteListResponse(BaseModel):
    favourites: list[FavouriteResponse]
