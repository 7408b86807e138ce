from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.catalog.schemas import CourseSummary


class AddToCartRequest(BaseModel):
    course_id: UUID


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cart_item_id: UUID
    course_id: UUID
    created_at: datetime
    course: CourseSummary


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    subtotal: Decimal


class CartAddedResponse(BaseModel):
    added: bool = True


class CartRemovedResponse(BaseModel):
    removed: bool = False
    cleared: bool = False
