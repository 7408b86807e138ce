import uuid

import pytest
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from app.models import Course, Enrollment
from app.unit_of_work import UnitOfWork


@pytest.mark.asyncio
async def test_commit_applies_inserts_before_statements(db_session, create_course) -> None:
    course = await create_course()
    user_id = uuid.uuid4()

    uow = UnitOfWork(db_session)
    uow.add(Enrollment(user_id=user_id, course_id=course.course_id))
    uow.execute(
        update(Course)
        .where(Course.course_id == course.course_id)
        .values(total_students=Course.total_students + 1)
    )
    assert len(uow) == 2
    await uow.commit()

    await db_session.refresh(course)
    assert course.total_students == 1
    assert len(uow) == 0


@pytest.mark.asyncio
async def test_failed_commit_rolls_back_everything(db_session, create_course, enroll) -> None:
    course = await create_course()
    course_id = course.course_id
    user_id = uuid.uuid4()
    await enroll(user_id, course_id)

    uow = UnitOfWork(db_session)
    uow.execute(update(Course).where(Course.course_id == course_id).values(total_students=42))
    uow.add(Enrollment(user_id=user_id, course_id=course_id))
    with pytest.raises(IntegrityError):
        await uow.commit()

    # rollback expired every loaded instance
    total = await db_session.scalar(
        select(Course.total_students).where(Course.course_id == course_id)
    )
    assert total == 0
