"""Checkout router: HTTP layer only.

No ``from __future__ import annotations`` here: slowapi wraps the endpoints
and FastAPI must see real annotation objects.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.checkout import controller
from app.checkout.gateway import StripeCheckoutGateway
from app.checkout.schemas import (
    CheckoutSessionResponse,
    CreateCheckoutSessionRequest,
    FulfillmentResponse,
    VerifyCheckoutRequest,
)
from app.config import Settings
from app.database import get_db
from app.dependencies import get_current_user, get_payment_gateway, get_settings
from app.rate_limit import limiter
from shared.models.user import CurrentUser

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post(
    "/session",
    response_model=CheckoutSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a Stripe checkout session",
    description="Single course when `course_id` is given, otherwise every purchasable "
    "course in the caller's cart. Returns the hosted checkout URL.",
)
async def create_session(
    body: CreateCheckoutSessionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    gateway: StripeCheckoutGateway = Depends(get_payment_gateway),
) -> CheckoutSessionResponse:
    return await controller.create_session(db, gateway, current_user, body)


@router.post(
    "/verify",
    response_model=FulfillmentResponse,
    summary="Verify a paid session and grant access",
    description="Idempotent: verifying the same session again reports "
    "`already_enrolled` and writes nothing.",
)
@limiter.limit("20/minute")
async def verify_checkout(
    request: Request,
    body: VerifyCheckoutRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    gateway: StripeCheckoutGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
) -> FulfillmentResponse:
    return await controller.verify(db, gateway, settings, current_user.id, body)
