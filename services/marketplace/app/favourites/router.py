"""Favourites router: HTTP layer only."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.favourites import controller
from app.favourites.schemas import (
    FavouriteListResponse,
    FavouriteStatusResponse,
    ToggleFavouriteRequest,
    ToggleFavouriteResponse,
)
from shared.models.user import CurrentUser

router = APIRouter(prefix="/favourites", tags=["Favourites"])


@router.get(
    "",
    response_model=FavouriteListResponse | FavouriteStatusResponse,
    summary="List favourites, or check one course",
    description="With `course_id` returns `{is_favourited}`; without it lists "
    "favourites newest first.",
)
async def get_favourites(
    course_id: UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> FavouriteListResponse | FavouriteStatusResponse:
    return await controller.query(db, current_user.id, course_id)


@router.post(
    "",
    response_model=ToggleFavouriteResponse,
    summary="Toggle a favourite",
    responses={201: {"model": ToggleFavouriteResponse, "description": "Favourited"}},
)
async def toggle_favourite(
    body: ToggleFavouriteRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ToggleFavouriteResponse:
    result = await controller.toggle(db, current_user.id, body.course_id)
    if result.favourited:
        response.status_code = status.HTTP_201_CREATED
    return result
