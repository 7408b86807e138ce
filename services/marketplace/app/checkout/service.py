"""Checkout business logic: session creation and purchase fulfillment.

Fulfillment is idempotent per (user, course). Existing enrollments are
excluded before anything is written, and the unique constraint on
``enrollments(user_id, course_id)`` turns a concurrent duplicate into the
same "already enrolled" outcome instead of an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.service import enrolled_course_ids, get_published_course
from app.checkout.gateway import (
    CheckoutLineItem,
    CheckoutSession,
    PaymentConfirmation,
    StripeCheckoutGateway,
)
from app.exceptions import (
    AlreadyEnrolledError,
    CartEmptyError,
    CourseIsFreeError,
    CourseNotFoundError,
    MissingCourseMetadataError,
    OwnCourseError,
    PaymentNotCompletedError,
    SessionOwnershipError,
)
from app.models.cart_item import CartItem
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.enums import CourseStatus, PurchaseStatus
from app.models.purchase import Purchase
from app.money import split_platform_fee, to_minor_units
from app.unit_of_work import UnitOfWork
from shared.models.user import CurrentUser

logger = logging.getLogger(__name__)

# Checkout Session metadata keys
META_USER_ID = "userId"
META_COURSE_ID = "courseId"
META_COURSE_IDS = "courseIds"
META_CART_CHECKOUT = "cartCheckout"


@dataclass
class FulfillmentResult:
    success: bool
    already_enrolled: bool
    course_ids: list[UUID] = field(default_factory=list)


def parse_course_ids(metadata: dict[str, str]) -> tuple[list[UUID], bool]:
    """Return ``(course_ids, is_cart_checkout)`` from session metadata.

    Cart checkouts carry a comma-delimited ``courseIds``; blanks are dropped and
    duplicates collapsed, keeping first-seen order. Malformed ids are skipped.
    """
    if metadata.get(META_CART_CHECKOUT) == "true" and metadata.get(META_COURSE_IDS):
        tokens, is_cart = metadata[META_COURSE_IDS].split(","), True
    elif metadata.get(META_COURSE_ID):
        tokens, is_cart = [metadata[META_COURSE_ID]], False
    else:
        raise MissingCourseMetadataError()

    course_ids: list[UUID] = []
    for token in tokens:
        token = token.strip()
        if not token:
            continue
        try:
            course_id = UUID(token)
        except ValueError:
            logger.warning("Skipping malformed course id %r in checkout metadata", token)
            continue
        if course_id not in course_ids:
            course_ids.append(course_id)
    return course_ids, is_cart


async def fulfill_purchase(
    db: AsyncSession,
    user_id: UUID,
    confirmation: PaymentConfirmation,
    *,
    platform_fee_rate: Decimal,
) -> FulfillmentResult:
    """Grant every not-yet-owned course paid for by ``confirmation``.

    Builds the full write set (enrollment, purchase, student counter per course,
    then the cart clear) and commits it in one unit of work.
    """
    course_ids, is_cart = parse_course_ids(confirmation.metadata)
    if not course_ids:
        raise CourseNotFoundError()

    owned = await enrolled_course_ids(db, user_id, course_ids)
    remaining = [cid for cid in course_ids if cid not in owned]
    if not remaining:
        return FulfillmentResult(success=True, already_enrolled=True, course_ids=course_ids)

    result = await db.execute(select(Course).where(Course.course_id.in_(remaining)))
    by_id = {c.course_id: c for c in result.scalars().all()}
    courses = [by_id[cid] for cid in remaining if cid in by_id]
    if not courses:
        raise CourseNotFoundError()
    if len(courses) < len(remaining):
        missing = [str(cid) for cid in remaining if cid not in by_id]
        logger.warning(
            "Session %s: skipping unknown courses %s", confirmation.session_id, ", ".join(missing)
        )

    uow = UnitOfWork(db)
    for course in courses:
        if is_cart:
            # Per-line amount from the current price, not the processor's total
            amount = to_minor_units(course.discount_price or course.price)
        else:
            amount = confirmation.amount_total
        platform_fee, instructor_earning = split_platform_fee(amount, platform_fee_rate)

        payment_intent_id = confirmation.payment_intent_id
        if is_cart and payment_intent_id:
            payment_intent_id = f"{payment_intent_id}_{course.course_id}"

        uow.add(Enrollment(user_id=user_id, course_id=course.course_id))
        uow.add(
            Purchase(
                user_id=user_id,
                course_id=course.course_id,
                amount=amount,
                platform_fee=platform_fee,
                instructor_earning=instructor_earning,
                currency=confirmation.currency,
                stripe_session_id=confirmation.session_id,
                stripe_payment_intent_id=payment_intent_id,
                status=PurchaseStatus.COMPLETED,
                course_name=course.title,
                course_price=course.price,
            )
        )
        uow.execute(
            update(Course)
            .where(Course.course_id == course.course_id)
            .values(total_students=Course.total_students + 1)
        )
    uow.execute(
        delete(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.course_id.in_(course_ids),
        )
    )

    fulfilled = [c.course_id for c in courses]
    try:
        await uow.commit()
    except IntegrityError:
        logger.warning(
            "Session %s: concurrent fulfillment for user %s, treating as already enrolled",
            confirmation.session_id, user_id,
        )
        return FulfillmentResult(success=True, already_enrolled=True, course_ids=course_ids)

    logger.info(
        "Session %s fulfilled for user %s: %d course(s)",
        confirmation.session_id, user_id, len(fulfilled),
    )
    return FulfillmentResult(success=True, already_enrolled=False, course_ids=fulfilled)


async def verify_checkout(
    db: AsyncSession,
    gateway: StripeCheckoutGateway,
    user_id: UUID,
    session_id: str,
    *,
    platform_fee_rate: Decimal,
) -> FulfillmentResult:
    confirmation = await gateway.retrieve_session(session_id)
    if not confirmation.is_paid:
        raise PaymentNotCompletedError()
    if confirmation.metadata.get(META_USER_ID) != str(user_id):
        raise SessionOwnershipError()
    return await fulfill_purchase(
        db, user_id, confirmation, platform_fee_rate=platform_fee_rate,
    )


# ---------------------------------------------------------------------------
# Session creation
# ---------------------------------------------------------------------------


async def create_checkout_session(
    db: AsyncSession,
    gateway: StripeCheckoutGateway,
    user: CurrentUser,
    course_id: UUID | None,
) -> CheckoutSession:
    """Open a Stripe Checkout Session for one course, or the whole cart when
    ``course_id`` is omitted. Cart lines the caller cannot buy are left out."""
    metadata = {META_USER_ID: str(user.id)}

    if course_id is not None:
        course = await get_published_course(db, course_id)
        if course.instructor_id == user.id:
            raise OwnCourseError()
        if course.is_free:
            raise CourseIsFreeError()
        if await enrolled_course_ids(db, user.id, [course_id]):
            raise AlreadyEnrolledError()
        metadata[META_COURSE_ID] = str(course.course_id)
        courses = [course]
    else:
        result = await db.execute(
            select(Course)
            .join(CartItem, CartItem.course_id == Course.course_id)
            .where(
                CartItem.user_id == user.id,
                Course.status == CourseStatus.PUBLISHED,
                Course.is_free.is_(False),
                Course.instructor_id != user.id,
            )
            .order_by(CartItem.created_at)
        )
        candidates = list(result.scalars().all())
        owned = await enrolled_course_ids(db, user.id, [c.course_id for c in candidates])
        courses = [c for c in candidates if c.course_id not in owned]
        if not courses:
            raise CartEmptyError()
        metadata[META_COURSE_IDS] = ",".join(str(c.course_id) for c in courses)
        metadata[META_CART_CHECKOUT] = "true"

    line_items = [
        CheckoutLineItem(name=c.title, unit_amount=to_minor_units(c.effective_price))
        for c in courses
    ]
    return await gateway.create_session(
        line_items=line_items, metadata=metadata, customer_email=user.email,
    )
