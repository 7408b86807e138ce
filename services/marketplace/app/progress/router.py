"""Progress router: HTTP layer only."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.progress import controller
from app.progress.schemas import ProgressUpdateResponse, UpdateLectureProgressRequest
from shared.models.user import CurrentUser

router = APIRouter(prefix="/lectures", tags=["Progress"])


@router.post(
    "/{lecture_id}/progress",
    response_model=ProgressUpdateResponse,
    summary="Update lecture progress",
    description="Merge-patch the caller's progress on one lecture, recompute the "
    "course percentage and issue the certificate on first completion.",
)
async def update_lecture_progress(
    lecture_id: UUID,
    body: UpdateLectureProgressRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ProgressUpdateResponse:
    return await controller.update_progress(db, current_user.id, lecture_id, body)
