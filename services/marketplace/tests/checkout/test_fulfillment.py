import uuid
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.checkout import service as checkout_service
from app.checkout.gateway import PaymentConfirmation
from app.checkout.service import fulfill_purchase, parse_course_ids
from app.exceptions import CourseNotFoundError, MissingCourseMetadataError
from app.models import CartItem, Enrollment, Purchase

FEE_RATE = Decimal("0.30")


def _confirmation(user_id: uuid.UUID, metadata: dict[str, str], amount_total: int = 0) -> PaymentConfirmation:
    return PaymentConfirmation(
        session_id="cs_test_fulfil",
        payment_status="paid",
        amount_total=amount_total,
        currency="usd",
        payment_intent_id="pi_123",
        metadata={"userId": str(user_id), **metadata},
    )


def test_parse_course_ids_single() -> None:
    course_id = uuid.uuid4()
    ids, is_cart = parse_course_ids({"courseId": str(course_id)})
    assert ids == [course_id]
    assert is_cart is False


def test_parse_course_ids_cart_drops_blanks_duplicates_and_garbage() -> None:
    a, b = uuid.uuid4(), uuid.uuid4()
    ids, is_cart = parse_course_ids(
        {"cartCheckout": "true", "courseIds": f"{a}, ,{b},{a},not-a-uuid,"}
    )
    assert ids == [a, b]
    assert is_cart is True


def test_parse_course_ids_without_course_metadata() -> None:
    with pytest.raises(MissingCourseMetadataError):
        parse_course_ids({"userId": str(uuid.uuid4())})


@pytest.mark.asyncio
async def test_single_purchase_splits_fee_and_is_idempotent(db_session, create_course, count_rows) -> None:
    course = await create_course(price=Decimal("49.99"))
    user_id = uuid.uuid4()
    confirmation = _confirmation(user_id, {"courseId": str(course.course_id)}, amount_total=4999)

    first = await fulfill_purchase(db_session, user_id, confirmation, platform_fee_rate=FEE_RATE)
    second = await fulfill_purchase(db_session, user_id, confirmation, platform_fee_rate=FEE_RATE)

    assert first.success and not first.already_enrolled
    assert first.course_ids == [course.course_id]
    assert second.success and second.already_enrolled

    assert await count_rows(Enrollment, Enrollment.user_id == user_id) == 1
    purchase = (await db_session.execute(select(Purchase))).scalar_one()
    assert purchase.amount == 4999
    assert purchase.platform_fee == 1500
    assert purchase.instructor_earning == 3499
    assert purchase.stripe_payment_intent_id == "pi_123"
    assert purchase.course_name == course.title

    await db_session.refresh(course)
    assert course.total_students == 1


@pytest.mark.asyncio
async def test_cart_purchase_prices_each_line_and_keeps_unrelated_cart_items(
    db_session, create_course, add_to_cart, count_rows
) -> None:
    user_id = uuid.uuid4()
    a = await create_course(price=Decimal("20.00"), discount_price=Decimal("15.00"))
    b = await create_course(price=Decimal("10.00"))
    c = await create_course(price=Decimal("30.00"))
    for course in (a, b, c):
        await add_to_cart(user_id, course.course_id)

    confirmation = _confirmation(
        user_id,
        {"cartCheckout": "true", "courseIds": f"{a.course_id},{b.course_id}"},
        amount_total=2500,
    )
    result = await fulfill_purchase(db_session, user_id, confirmation, platform_fee_rate=FEE_RATE)

    assert set(result.course_ids) == {a.course_id, b.course_id}
    purchases = {
        p.course_id: p for p in (await db_session.execute(select(Purchase))).scalars().all()
    }
    assert purchases[a.course_id].amount == 1500
    assert purchases[a.course_id].platform_fee == 450
    assert purchases[b.course_id].amount == 1000
    assert purchases[b.course_id].stripe_payment_intent_id == f"pi_123_{b.course_id}"

    remaining = (await db_session.execute(select(CartItem.course_id))).scalars().all()
    assert remaining == [c.course_id]


@pytest.mark.asyncio
async def test_cart_purchase_skips_owned_courses(db_session, create_course, enroll, count_rows) -> None:
    user_id = uuid.uuid4()
    owned = await create_course()
    new = await create_course()
    await enroll(user_id, owned.course_id)

    confirmation = _confirmation(
        user_id, {"cartCheckout": "true", "courseIds": f"{owned.course_id},{new.course_id}"}
    )
    result = await fulfill_purchase(db_session, user_id, confirmation, platform_fee_rate=FEE_RATE)

    assert result.course_ids == [new.course_id]
    assert not result.already_enrolled
    assert await count_rows(Purchase) == 1
    assert await count_rows(Enrollment, Enrollment.user_id == user_id) == 2


@pytest.mark.asyncio
async def test_unknown_course_is_not_found(db_session) -> None:
    user_id = uuid.uuid4()
    confirmation = _confirmation(user_id, {"courseId": str(uuid.uuid4())}, amount_total=100)
    with pytest.raises(CourseNotFoundError):
        await fulfill_purchase(db_session, user_id, confirmation, platform_fee_rate=FEE_RATE)


@pytest.mark.asyncio
async def test_cart_with_only_garbage_ids_is_not_found(db_session) -> None:
    user_id = uuid.uuid4()
    confirmation = _confirmation(user_id, {"cartCheckout": "true", "courseIds": " , ,x"})
    with pytest.raises(CourseNotFoundError):
        await fulfill_purchase(db_session, user_id, confirmation, platform_fee_rate=FEE_RATE)


@pytest.mark.asyncio
async def test_concurrent_duplicate_is_reported_as_already_enrolled(
    db_session, create_course, enroll, count_rows, monkeypatch
) -> None:
    course = await create_course()
    user_id = uuid.uuid4()
    await enroll(user_id, course.course_id)

    # Simulate a racing fulfillment that enrolled after the ownership check ran
    async def _nothing_owned(db, user_id, course_ids):
        return set()

    monkeypatch.setattr(checkout_service, "enrolled_course_ids", _nothing_owned)

    confirmation = _confirmation(user_id, {"courseId": str(course.course_id)}, amount_total=4999)
    result = await fulfill_purchase(db_session, user_id, confirmation, platform_fee_rate=FEE_RATE)

    assert result.success and result.already_enrolled
    assert await count_rows(Enrollment) == 1
    assert await count_rows(Purchase) == 0
