"""Cart business logic.

Pure business logic, no FastAPI imports. Cart-add checks run in a fixed
order (course, ownership, enrollment, duplicate) so each failure has its own
code; the unique constraint on ``cart_items(user_id, course_id)`` backs the
duplicate check.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.catalog.service import get_enrollment, get_published_course
from app.exceptions import (
    AlreadyEnrolledError,
    AlreadyInCartError,
    NotInCartError,
    OwnCourseError,
)
from app.models.cart_item import CartItem


async def _get_cart_item(db: AsyncSession, user_id: UUID, course_id: UUID) -> CartItem | None:
    result = await db.execute(
        select(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.course_id == course_id,
        )
    )
    return result.scalar_one_or_none()


async def list_cart(db: AsyncSession, user_id: UUID) -> tuple[list[CartItem], Decimal]:
    """Cart items newest first, plus the subtotal of their current prices."""
    result = await db.execute(
        select(CartItem)
        .where(CartItem.user_id == user_id)
        .options(selectinload(CartItem.course))
        .order_by(CartItem.created_at.desc())
    )
    items = list(result.scalars().all())
    subtotal = sum((item.course.effective_price for item in items), Decimal("0.00"))
    return items, subtotal


async def add_to_cart(db: AsyncSession, user_id: UUID, course_id: UUID) -> CartItem:
    course = await get_published_course(db, course_id)
    if course.instructor_id == user_id:
        raise OwnCourseError("Cannot add your own course to cart.")
    if await get_enrollment(db, user_id, course_id) is not None:
        raise AlreadyEnrolledError()
    if await _get_cart_item(db, user_id, course_id) is not None:
        raise AlreadyInCartError()

    item = CartItem(user_id=user_id, course_id=course_id)
    db.add(item)
    await db.flush()
    return item


async def remove_from_cart(db: AsyncSession, user_id: UUID, course_id: UUID) -> None:
    item = await _get_cart_item(db, user_id, course_id)
    if item is None:
        raise NotInCartError()
    await db.delete(item)
    await db.flush()


async def clear_cart(db: AsyncSession, user_id: UUID) -> int:
    """Remove every cart item of the user; returns how many were removed."""
    result = await db.execute(delete(CartItem).where(CartItem.user_id == user_id))
    return result.rowcount or 0
