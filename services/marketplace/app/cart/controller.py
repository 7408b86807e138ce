"""Cart controller."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.cart import service
from app.cart.schemas import (
    CartAddedResponse,
    CartItemResponse,
    CartRemovedResponse,
    CartResponse,
)
from app.exceptions import MarketplaceError
from app.http_errors import to_http_exception


async def list_cart(db: AsyncSession, user_id: UUID) -> CartResponse:
    items, subtotal = await service.list_cart(db, user_id)
    return CartResponse(
        items=[CartItemResponse.model_validate(i) for i in items],
        subtotal=subtotal,
    )


async def add(db: AsyncSession, user_id: UUID, course_id: UUID) -> CartAddedResponse:
    try:
        await service.add_to_cart(db, user_id, course_id)
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return CartAddedResponse()


async def remove(db: AsyncSession, user_id: UUID, course_id: UUID | None) -> CartRemovedResponse:
    if course_id is None:
        await service.clear_cart(db, user_id)
        return CartRemovedResponse(cleared=True)
    try:
        await service.remove_from_cart(db, user_id, course_id)
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return CartRemovedResponse(removed=True)
