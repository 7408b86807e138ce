"""Checkout controller: maps service results to HTTP responses, converts domain errors."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.checkout import service
from app.checkout.gateway import StripeCheckoutGateway
from app.checkout.schemas import (
    CheckoutSessionResponse,
    CreateCheckoutSessionRequest,
    FulfillmentResponse,
    VerifyCheckoutRequest,
)
from app.config import Settings
from app.exceptions import MarketplaceError
from app.http_errors import to_http_exception
from shared.models.user import CurrentUser


async def create_session(
    db: AsyncSession,
    gateway: StripeCheckoutGateway,
    user: CurrentUser,
    body: CreateCheckoutSessionRequest,
) -> CheckoutSessionResponse:
    try:
        session = await service.create_checkout_session(db, gateway, user, body.course_id)
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return CheckoutSessionResponse.model_validate(session)


async def verify(
    db: AsyncSession,
    gateway: StripeCheckoutGateway,
    settings: Settings,
    user_id: UUID,
    body: VerifyCheckoutRequest,
) -> FulfillmentResponse:
    try:
        result = await service.verify_checkout(
            db, gateway, user_id, body.session_id,
            platform_fee_rate=settings.platform_fee_rate,
        )
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return FulfillmentResponse.model_validate(result)
