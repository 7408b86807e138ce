"""Favourites (wishlist) business logic. A single toggle, no separate add/remove."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.catalog.service import get_published_course
from app.models.wishlist import Wishlist

logger = logging.getLogger(__name__)


async def _get_favourite(db: AsyncSession, user_id: UUID, course_id: UUID) -> Wishlist | None:
    result = await db.execute(
        select(Wishlist).where(
            Wishlist.user_id == user_id,
            Wishlist.course_id == course_id,
        )
    )
    return result.scalar_one_or_none()


async def toggle_favourite(db: AsyncSession, user_id: UUID, course_id: UUID) -> bool:
    """Flip the favourite for (user, course); returns the new state."""
    await get_published_course(db, course_id)

    existing = await _get_favourite(db, user_id, course_id)
    if existing is not None:
        await db.delete(existing)
        await db.flush()
        return False

    db.add(Wishlist(user_id=user_id, course_id=course_id))
    try:
        await db.flush()
    except IntegrityError:
        # a concurrent toggle already inserted the row
        await db.rollback()
        logger.warning("Concurrent favourite for user %s course %s", user_id, course_id)
    return True


async def is_favourited(db: AsyncSession, user_id: UUID, course_id: UUID) -> bool:
    return await _get_favourite(db, user_id, course_id) is not None


async def list_favourites(db: AsyncSession, user_id: UUID) -> list[Wishlist]:
    result = await db.execute(
        select(Wishlist)
        .where(Wishlist.user_id == user_id)
        .options(selectinload(Wishlist.course))
        .order_by(Wishlist.created_at.desc())
    )
    return list(result.scalars().all())
