import os
import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.checkout.gateway import CheckoutSession, PaymentConfirmation
from app.database import get_db
from app.dependencies import get_payment_gateway
from app.exceptions import PaymentProviderError
from app.main import app
from app.models import CartItem, Course, Enrollment, Lecture, Section, User
from app.models.enums import CourseStatus
from app.rate_limit import limiter
from shared.auth.config import AuthSettings
from shared.constants import Role
from shared.database.postgres import Base, get_session

# In-memory SQLite by default; point at a throwaway Postgres database to run
# the suite against the production dialect.
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {}


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_kwargs(TEST_DATABASE_URL))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


def _session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and assertions; requests get their own."""
    async with _session_factory(db_engine)() as session:
        yield session


@pytest.fixture(autouse=True)
def _reset_rate_limits() -> None:
    limiter.reset()


# ── Payment gateway double ────────────────────────────────────────────────────


class FakePaymentGateway:
    """In-memory stand-in for StripeCheckoutGateway."""

    def __init__(self) -> None:
        self.sessions: dict[str, PaymentConfirmation] = {}
        self.created: list[dict] = []

    def add_paid_session(
        self,
        user_id: uuid.UUID,
        course_ids: list[uuid.UUID],
        *,
        amount_total: int = 0,
        cart: bool = False,
        payment_status: str = "paid",
        session_id: str | None = None,
    ) -> PaymentConfirmation:
        metadata = {"userId": str(user_id)}
        if cart:
            metadata["courseIds"] = ",".join(str(c) for c in course_ids)
            metadata["cartCheckout"] = "true"
        else:
            metadata["courseId"] = str(course_ids[0])
        confirmation = PaymentConfirmation(
            session_id=session_id or f"cs_test_{uuid.uuid4().hex[:12]}",
            payment_status=payment_status,
            amount_total=amount_total,
            currency="usd",
            payment_intent_id=f"pi_{uuid.uuid4().hex[:12]}",
            metadata=metadata,
        )
        self.sessions[confirmation.session_id] = confirmation
        return confirmation

    async def retrieve_session(self, session_id: str) -> PaymentConfirmation:
        if session_id not in self.sessions:
            raise PaymentProviderError()
        return self.sessions[session_id]

    async def create_session(self, *, line_items, metadata, customer_email=None) -> CheckoutSession:
        self.created.append(
            {"line_items": line_items, "metadata": metadata, "customer_email": customer_email}
        )
        session_id = f"cs_test_{len(self.created)}"
        return CheckoutSession(session_id=session_id, url=f"https://checkout.stripe.test/{session_id}")


@pytest.fixture
def payment_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest_asyncio.fixture
async def async_client(
    db_engine: AsyncEngine, db_session: AsyncSession, payment_gateway: FakePaymentGateway
) -> AsyncGenerator[AsyncClient, None]:
    request_sessions = _session_factory(db_engine)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async for session in get_session(request_sessions):
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ── Auth ──────────────────────────────────────────────────────────────────────


def make_token(user_id: uuid.UUID, roles: tuple[str, ...] = ("student",), email: str = "") -> str:
    settings = AuthSettings()
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "email": email or f"{user_id.hex[:8]}@example.com",
        "roles": list(roles),
        "iss": settings.issuer,
        "aud": settings.audience,
        "iat": now,
        "exp": now + timedelta(minutes=15),
    }
    return jwt.encode(claims, settings.secret, algorithm=settings.algorithm)


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    def _headers(user_id: uuid.UUID, *roles: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id, roles or ('student',))}"}

    return _headers


# ── Seed factories ────────────────────────────────────────────────────────────


@pytest.fixture
def create_user(db_session: AsyncSession):
    async def _create(role: Role = Role.STUDENT, name: str = "Test User") -> User:
        user_id = uuid.uuid4()
        user = User(
            user_id=user_id,
            email=f"{user_id.hex[:10]}@example.com",
            name=name,
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _create


@pytest.fixture
def create_course(db_session: AsyncSession):
    async def _create(
        *,
        instructor_id: uuid.UUID | None = None,
        title: str | None = None,
        price: Decimal = Decimal("49.99"),
        discount_price: Decimal | None = None,
        is_free: bool = False,
        status: CourseStatus = CourseStatus.PUBLISHED,
        category: str | None = "development",
    ) -> Course:
        course_id = uuid.uuid4()
        course = Course(
            course_id=course_id,
            title=title or f"Course {course_id.hex[:6]}",
            slug=f"course-{course_id.hex}",
            instructor_id=instructor_id or uuid.uuid4(),
            instructor_name="Ada Lovelace",
            category=category,
            price=Decimal("0.00") if is_free else price,
            discount_price=discount_price,
            is_free=is_free,
            status=status,
        )
        db_session.add(course)
        await db_session.commit()
        return course

    return _create


@pytest.fixture
def create_lectures(db_session: AsyncSession):
    async def _create(course: Course, count: int, *, sections: int = 1) -> list[Lecture]:
        lectures: list[Lecture] = []
        section_rows = [
            Section(course_id=course.course_id, title=f"Section {i + 1}", sort_order=i)
            for i in range(sections)
        ]
        db_session.add_all(section_rows)
        await db_session.flush()
        for i in range(count):
            lecture = Lecture(
                section_id=section_rows[i % sections].section_id,
                title=f"Lecture {i + 1}",
                sort_order=i,
                duration_secs=300,
                video_url=f"https://media.example.com/{i}.m3u8",
                is_preview=(i == 0),
            )
            lectures.append(lecture)
        db_session.add_all(lectures)
        await db_session.commit()
        return lectures

    return _create


@pytest.fixture
def enroll(db_session: AsyncSession):
    async def _enroll(user_id: uuid.UUID, course_id: uuid.UUID) -> Enrollment:
        enrollment = Enrollment(user_id=user_id, course_id=course_id)
        db_session.add(enrollment)
        await db_session.commit()
        return enrollment

    return _enroll


@pytest.fixture
def add_to_cart(db_session: AsyncSession):
    async def _add(user_id: uuid.UUID, course_id: uuid.UUID) -> CartItem:
        item = CartItem(user_id=user_id, course_id=course_id)
        db_session.add(item)
        await db_session.commit()
        return item

    return _add


@pytest.fixture
def count_rows(db_session: AsyncSession):
    async def _count(model, *where) -> int:
        return await db_session.scalar(select(func.count()).select_from(model).where(*where)) or 0

    return _count
