"""Progress controller."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import MarketplaceError
from app.http_errors import to_http_exception
from app.progress import service
from app.progress.schemas import ProgressUpdateResponse, UpdateLectureProgressRequest


async def update_progress(
    db: AsyncSession,
    user_id: UUID,
    lecture_id: UUID,
    body: UpdateLectureProgressRequest,
) -> ProgressUpdateResponse:
    try:
        result = await service.update_lecture_progress(
            db, user_id, lecture_id, body.model_dump(exclude_unset=True),
        )
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return ProgressUpdateResponse.model_validate(result)
