from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class VerifyCheckoutRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    session_id: str = Field(
        min_length=1,
        max_length=255,
        pattern=r"^cs_[A-Za-z0-9_]+$",
        description="Stripe Checkout Session id (cs_...).",
    )


class FulfillmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool
    already_enrolled: bool = Field(
        description="True when every course in the session was already owned; nothing was written."
    )
    course_ids: list[UUID]


class CreateCheckoutSessionRequest(BaseModel):
    course_id: UUID | None = Field(
        None, description="Course to buy. Omit to check out the whole cart."
    )


class CheckoutSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: str
    url: str
