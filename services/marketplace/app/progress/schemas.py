from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UpdateLectureProgressRequest(BaseModel):
    """Merge-patch body: only the fields present are changed."""

    model_config = ConfigDict(extra="forbid")

    is_completed: bool = Field(False, description="Mark the lecture (un)completed.")
    watched_duration: int = Field(0, ge=0, description="Total seconds watched.")
    last_position: int = Field(0, ge=0, description="Playback position in seconds.")


class LectureProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lecture_id: UUID
    is_completed: bool
    watched_duration: int
    last_position: int
    completed_at: datetime | None = None


class ProgressUpdateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    progress: LectureProgressResponse
    course_progress: int = Field(ge=0, le=100)
    course_completed: bool = Field(description="True only on the update that first reached 100%.")
    certificate_generated: bool
