"""Favourites controller."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import MarketplaceError
from app.favourites import service
from app.favourites.schemas import (
    FavouriteListResponse,
    FavouriteResponse,
    FavouriteStatusResponse,
    ToggleFavouriteResponse,
)
from app.http_errors import to_http_exception


async def toggle(db: AsyncSession, user_id: UUID, course_id: UUID) -> ToggleFavouriteResponse:
    try:
        favourited = await service.toggle_favourite(db, user_id, course_id)
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return ToggleFavouriteResponse(favourited=favourited)


async def query(
    db: AsyncSession, user_id: UUID, course_id: UUID | None
) -> FavouriteListResponse | FavouriteStatusResponse:
    if course_id is not None:
        return FavouriteStatusResponse(
            is_favourited=await service.is_favourited(db, user_id, course_id),
        )
    favourites = await service.list_favourites(db, user_id)
    return FavouriteListResponse(
        favourites=[FavouriteResponse.model_validate(f) for f in favourites],
    )
