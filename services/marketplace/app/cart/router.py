"""Cart router: HTTP layer only."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.cart import controller
from app.cart.schemas import (
    AddToCartRequest,
    CartAddedResponse,
    CartRemovedResponse,
    CartResponse,
)
from app.database import get_db
from app.dependencies import get_current_user
from shared.models.user import CurrentUser

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get(
    "",
    response_model=CartResponse,
    summary="List my cart",
)
async def list_cart(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> CartResponse:
    return await controller.list_cart(db, current_user.id)


@router.post(
    "",
    response_model=CartAddedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a course to my cart",
)
async def add_to_cart(
    body: AddToCartRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> CartAddedResponse:
    return await controller.add(db, current_user.id, body.course_id)


@router.delete(
    "",
    response_model=CartRemovedResponse,
    summary="Remove one course, or clear the cart",
    description="With `course_id` removes that item (404 NOT_IN_CART if absent); "
    "without it empties the cart.",
)
async def remove_from_cart(
    course_id: UUID | None = Query(None, description="Course to remove. Omit to clear."),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> CartRemovedResponse:
    return await controller.remove(db, current_user.id, course_id)
