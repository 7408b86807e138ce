import uuid
from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.models import Enrollment, Purchase


@pytest.mark.asyncio
async def test_verify_fulfils_once(
    async_client: AsyncClient, payment_gateway, create_course, auth_headers, count_rows
) -> None:
    user_id = uuid.uuid4()
    course = await create_course()
    session = payment_gateway.add_paid_session(user_id, [course.course_id], amount_total=4999)

    first = await async_client.post(
        "/api/v1/checkout/verify",
        json={"session_id": session.session_id},
        headers=auth_headers(user_id),
    )
    assert first.status_code == 200
    assert first.json() == {
        "success": True,
        "already_enrolled": False,
        "course_ids": [str(course.course_id)],
    }

    second = await async_client.post(
        "/api/v1/checkout/verify",
        json={"session_id": session.session_id},
        headers=auth_headers(user_id),
    )
    assert second.status_code == 200
    assert second.json()["already_enrolled"] is True

    assert await count_rows(Enrollment) == 1
    assert await count_rows(Purchase) == 1


@pytest.mark.asyncio
async def test_verify_unpaid_session(async_client: AsyncClient, payment_gateway, create_course, auth_headers) -> None:
    user_id = uuid.uuid4()
    course = await create_course()
    session = payment_gateway.add_paid_session(user_id, [course.course_id], payment_status="unpaid")

    response = await async_client.post(
        "/api/v1/checkout/verify",
        json={"session_id": session.session_id},
        headers=auth_headers(user_id),
    )
    assert response.status_code == 402
    assert response.json()["error"]["code"] == "PAYMENT_NOT_COMPLETED"


@pytest.mark.asyncio
async def test_verify_someone_elses_session(
    async_client: AsyncClient, payment_gateway, create_course, auth_headers, count_rows
) -> None:
    course = await create_course()
    session = payment_gateway.add_paid_session(uuid.uuid4(), [course.course_id], amount_total=100)

    response = await async_client.post(
        "/api/v1/checkout/verify",
        json={"session_id": session.session_id},
        headers=auth_headers(uuid.uuid4()),
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "SESSION_MISMATCH"
    assert await count_rows(Enrollment) == 0


@pytest.mark.asyncio
async def test_verify_unknown_session_is_upstream_failure(async_client: AsyncClient, auth_headers) -> None:
    response = await async_client.post(
        "/api/v1/checkout/verify",
        json={"session_id": "cs_missing"},
        headers=auth_headers(uuid.uuid4()),
    )
    assert response.status_code == 502
    assert response.json()["error"]["kind"] == "UPSTREAM_FAILURE"


@pytest.mark.asyncio
async def test_verify_requires_session_id(async_client: AsyncClient, auth_headers) -> None:
    response = await async_client.post(
        "/api/v1/checkout/verify", json={}, headers=auth_headers(uuid.uuid4())
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_verify_rejects_malformed_session_id(async_client: AsyncClient, auth_headers) -> None:
    response = await async_client.post(
        "/api/v1/checkout/verify",
        json={"session_id": "../../customers?limit=100"},
        headers=auth_headers(uuid.uuid4()),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_verify_requires_authentication(async_client: AsyncClient) -> None:
    response = await async_client.post("/api/v1/checkout/verify", json={"session_id": "cs_x"})
    assert response.status_code == 401
    assert response.json()["error"]["kind"] == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_create_session_for_single_course(
    async_client: AsyncClient, payment_gateway, create_course, auth_headers
) -> None:
    user_id = uuid.uuid4()
    course = await create_course(price=Decimal("40.00"), discount_price=Decimal("19.99"))

    response = await async_client.post(
        "/api/v1/checkout/session",
        json={"course_id": str(course.course_id)},
        headers=auth_headers(user_id),
    )
    assert response.status_code == 201
    assert response.json()["url"].startswith("https://checkout.stripe.test/")

    created = payment_gateway.created[0]
    assert created["metadata"] == {"userId": str(user_id), "courseId": str(course.course_id)}
    assert created["line_items"][0].unit_amount == 1999


@pytest.mark.asyncio
async def test_create_session_for_cart_leaves_out_owned_courses(
    async_client: AsyncClient, payment_gateway, create_course, add_to_cart, enroll, auth_headers
) -> None:
    user_id = uuid.uuid4()
    owned = await create_course()
    wanted = await create_course(price=Decimal("12.50"))
    for course in (owned, wanted):
        await add_to_cart(user_id, course.course_id)
    await enroll(user_id, owned.course_id)

    response = await async_client.post(
        "/api/v1/checkout/session", json={}, headers=auth_headers(user_id)
    )
    assert response.status_code == 201
    metadata = payment_gateway.created[0]["metadata"]
    assert metadata["cartCheckout"] == "true"
    assert metadata["courseIds"] == str(wanted.course_id)


@pytest.mark.asyncio
async def test_create_session_with_empty_cart(async_client: AsyncClient, auth_headers) -> None:
    response = await async_client.post(
        "/api/v1/checkout/session", json={}, headers=auth_headers(uuid.uuid4())
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "CART_EMPTY"


@pytest.mark.asyncio
async def test_create_session_rejects_free_and_own_courses(
    async_client: AsyncClient, create_course, auth_headers
) -> None:
    user_id = uuid.uuid4()
    free = await create_course(is_free=True)
    mine = await create_course(instructor_id=user_id)

    response = await async_client.post(
        "/api/v1/checkout/session",
        json={"course_id": str(free.course_id)},
        headers=auth_headers(user_id),
    )
    assert response.json()["error"]["code"] == "COURSE_IS_FREE"

    response = await async_client.post(
        "/api/v1/checkout/session",
        json={"course_id": str(mine.course_id)},
        headers=auth_headers(user_id, "instructor"),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "OWN_COURSE"
