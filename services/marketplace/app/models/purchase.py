import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base

from .enums import PurchaseStatus, purchase_status_enum


class Purchase(Base):
    """One paid line item. Rows are appended on fulfillment and never edited here."""

    __tablename__ = "purchases"

    purchase_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("courses.course_id", ondelete="RESTRICT"),
        nullable=False,
    )
    # Minor units (cents)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    platform_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    instructor_earning: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")
    stripe_session_id: Mapped[str] = mapped_column(String(255), nullable=False)
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[PurchaseStatus] = mapped_column(
        purchase_status_enum, nullable=False, default=PurchaseStatus.PENDING
    )
    # Snapshots at purchase time
    course_name: Mapped[str] = mapped_column(String(300), nullable=False)
    course_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        Index("ix_purchases_user_id", "user_id"),
        Index("ix_purchases_course_id", "course_id"),
        Index("ix_purchases_stripe_session_id", "stripe_session_id"),
    )
