import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.exceptions import (
    AlreadyReviewedError,
    CourseNotFoundError,
    NotEnrolledError,
    NotReviewOwnerError,
    ReviewNotFoundError,
    SelfReviewError,
)
from app.models import Review
from app.models.enums import CourseStatus
from app.reviews import service as reviews_service
from app.reviews.service import (
    create_review,
    delete_review,
    recalculate_course_rating,
    update_review,
)


async def _enrolled_users(enroll, course_id, count: int) -> list[uuid.UUID]:
    users = [uuid.uuid4() for _ in range(count)]
    for user_id in users:
        await enroll(user_id, course_id)
    return users


@pytest.mark.asyncio
async def test_rating_aggregate_follows_creates_and_deletes(db_session, create_course, enroll) -> None:
    course = await create_course()
    users = await _enrolled_users(enroll, course.course_id, 5)

    reviews = []
    for user_id, rating in zip(users, [5, 5, 4, 3, 1]):
        reviews.append(
            await create_review(db_session, user_id, course.course_id, rating=rating, comment=None)
        )
    await db_session.commit()
    await db_session.refresh(course)
    assert course.rating_avg == Decimal("3.6")
    assert course.review_count == 5

    await delete_review(db_session, users[4], course.course_id, reviews[4].review_id)
    await db_session.commit()
    await db_session.refresh(course)
    # 17 / 4 = 4.25, rounded half up
    assert course.rating_avg == Decimal("4.3")
    assert course.review_count == 4


@pytest.mark.asyncio
async def test_update_recalculates(db_session, create_course, enroll) -> None:
    course = await create_course()
    (user_id,) = await _enrolled_users(enroll, course.course_id, 1)
    review = await create_review(db_session, user_id, course.course_id, rating=2, comment="meh")

    updated = await update_review(
        db_session, user_id, course.course_id, review.review_id, rating=4, comment=""
    )
    await db_session.commit()
    await db_session.refresh(course)
    assert updated.comment is None
    assert course.rating_avg == Decimal("4.0")
    assert course.review_count == 1


@pytest.mark.asyncio
async def test_unapproved_reviews_are_not_counted(db_session, create_course) -> None:
    course = await create_course()
    db_session.add_all(
        [
            Review(user_id=uuid.uuid4(), course_id=course.course_id, rating=5),
            Review(user_id=uuid.uuid4(), course_id=course.course_id, rating=1, is_approved=False),
        ]
    )
    await db_session.flush()

    avg, count = await recalculate_course_rating(db_session, course.course_id)
    assert avg == Decimal("5.0")
    assert count == 1


@pytest.mark.asyncio
async def test_no_reviews_means_zero(db_session, create_course) -> None:
    course = await create_course()
    avg, count = await recalculate_course_rating(db_session, course.course_id)
    assert avg == Decimal("0.0")
    assert count == 0


@pytest.mark.asyncio
async def test_create_review_guards(db_session, create_course, enroll) -> None:
    instructor_id = uuid.uuid4()
    course = await create_course(instructor_id=instructor_id)
    draft = await create_course(status=CourseStatus.DRAFT)
    student = uuid.uuid4()

    with pytest.raises(CourseNotFoundError):
        await create_review(db_session, student, draft.course_id, rating=5, comment=None)
    with pytest.raises(SelfReviewError):
        await create_review(db_session, instructor_id, course.course_id, rating=5, comment=None)
    with pytest.raises(NotEnrolledError):
        await create_review(db_session, student, course.course_id, rating=5, comment=None)

    await enroll(student, course.course_id)
    await create_review(db_session, student, course.course_id, rating=5, comment=None)
    with pytest.raises(AlreadyReviewedError):
        await create_review(db_session, student, course.course_id, rating=4, comment=None)


@pytest.mark.asyncio
async def test_concurrent_duplicate_review_is_a_conflict(
    db_session, create_course, enroll, count_rows, monkeypatch
) -> None:
    course = await create_course()
    course_id = course.course_id
    (student,) = await _enrolled_users(enroll, course_id, 1)
    await create_review(db_session, student, course_id, rating=5, comment=None)
    await db_session.commit()

    # A racing request inserted its review after the duplicate check ran
    async def _not_reviewed(db, user_id, course_id):
        return False

    monkeypatch.setattr(reviews_service, "has_reviewed", _not_reviewed)

    with pytest.raises(AlreadyReviewedError):
        await create_review(db_session, student, course_id, rating=1, comment=None)

    assert await count_rows(Review, Review.course_id == course_id) == 1


@pytest.mark.asyncio
async def test_only_the_author_can_modify(db_session, create_course, enroll) -> None:
    course = await create_course()
    other_course = await create_course()
    author, stranger = await _enrolled_users(enroll, course.course_id, 2)
    review = await create_review(db_session, author, course.course_id, rating=3, comment=None)

    with pytest.raises(NotReviewOwnerError):
        await update_review(db_session, stranger, course.course_id, review.review_id, rating=1, comment=None)
    with pytest.raises(NotReviewOwnerError):
        await delete_review(db_session, stranger, course.course_id, review.review_id)
    with pytest.raises(ReviewNotFoundError):
        await delete_review(db_session, author, other_course.course_id, review.review_id)
    with pytest.raises(ReviewNotFoundError):
        await delete_review(db_session, author, course.course_id, uuid.uuid4())


@pytest.mark.asyncio
async def test_list_reviews_endpoint(
    async_client: AsyncClient, db_session, create_course, create_user
) -> None:
    course = await create_course()
    author = await create_user(name="Grace Hopper")
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    db_session.add_all(
        [
            Review(user_id=author.user_id, course_id=course.course_id, rating=2, created_at=base),
            Review(user_id=uuid.uuid4(), course_id=course.course_id, rating=5,
                   created_at=base + timedelta(days=1)),
            Review(user_id=uuid.uuid4(), course_id=course.course_id, rating=4,
                   created_at=base + timedelta(days=2)),
        ]
    )
    await db_session.flush()
    await recalculate_course_rating(db_session, course.course_id)
    await db_session.commit()

    response = await async_client.get(f"/api/v1/courses/{course.course_id}/reviews?sort=highest")
    assert response.status_code == 200
    body = response.json()
    assert [r["rating"] for r in body["reviews"]] == [5, 4, 2]
    assert body["reviews"][2]["author"]["name"] == "Grace Hopper"
    assert body["meta"] == {"total": 3, "page": 1, "page_size": 10, "total_pages": 1}
    assert body["rating_distribution"] == {"1": 0, "2": 1, "3": 0, "4": 1, "5": 1}
    assert body["rating_avg"] == pytest.approx(3.7)
    assert body["review_count"] == 3

    newest = await async_client.get(f"/api/v1/courses/{course.course_id}/reviews")
    assert [r["rating"] for r in newest.json()["reviews"]] == [4, 5, 2]


@pytest.mark.asyncio
async def test_review_crud_endpoints(
    async_client: AsyncClient, create_course, enroll, auth_headers
) -> None:
    user_id = uuid.uuid4()
    course = await create_course()
    url = f"/api/v1/courses/{course.course_id}/reviews"

    response = await async_client.post(url, json={"rating": 5}, headers=auth_headers(user_id))
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "NOT_ENROLLED"

    await enroll(user_id, course.course_id)
    response = await async_client.post(
        url, json={"rating": 6}, headers=auth_headers(user_id)
    )
    assert response.status_code == 400

    response = await async_client.post(
        url, json={"rating": 5, "comment": "Great"}, headers=auth_headers(user_id)
    )
    assert response.status_code == 201
    review_id = response.json()["review_id"]

    response = await async_client.post(url, json={"rating": 4}, headers=auth_headers(user_id))
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ALREADY_REVIEWED"

    response = await async_client.put(
        f"{url}/{review_id}", json={"rating": 3}, headers=auth_headers(user_id)
    )
    assert response.status_code == 200
    assert response.json()["rating"] == 3

    response = await async_client.delete(f"{url}/{review_id}", headers=auth_headers(user_id))
    assert response.status_code == 200
    assert response.json() == {"deleted": True}
