"""Initial marketplace schema: catalog, commerce, learning and reviews.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, UUID

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

# Native enums store member names
user_role = ENUM("STUDENT", "INSTRUCTOR", "ADMIN", name="user_role", create_type=False)
course_status = ENUM("DRAFT", "PUBLISHED", "ARCHIVED", name="course_status", create_type=False)
lecture_type = ENUM("VIDEO", "TEXT", "QUIZ", name="lecture_type", create_type=False)
purchase_status = ENUM(
    "PENDING", "COMPLETED", "REFUNDED", name="purchase_status", create_type=False
)
application_status = ENUM(
    "PENDING", "APPROVED", "REJECTED", name="application_status", create_type=False
)

_ENUMS = (user_role, course_status, lecture_type, purchase_status, application_status)


def _ts(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=None if nullable else sa.text("now()"),
    )


def _course_fk(ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(
        "course_id",
        UUID(as_uuid=True),
        sa.ForeignKey("courses.course_id", ondelete=ondelete),
        nullable=False,
    )


def upgrade() -> None:
    bind = op.get_bind()
    for enum in _ENUMS:
        enum.create(bind, checkfirst=True)

    # ── users ────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("user_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(150), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("role", user_role, nullable=False, server_default="STUDENT"),
        sa.Column("headline", sa.String(200), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        _ts("created_at"),
    )
    op.create_index("ix_users_role", "users", ["role"])

    # ── catalog ──────────────────────────────────────────────────────────
    op.create_table(
        "courses",
        sa.Column("course_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("slug", sa.String(300), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("instructor_id", UUID(as_uuid=True), nullable=False),
        sa.Column("instructor_name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("thumbnail_url", sa.String(500), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0.00"),
        sa.Column("discount_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_free", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("status", course_status, nullable=False, server_default="DRAFT"),
        sa.Column("rating_avg", sa.Numeric(2, 1), nullable=False, server_default="0.0"),
        sa.Column("review_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_students", sa.Integer(), nullable=False, server_default="0"),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_courses_instructor_id", "courses", ["instructor_id"])
    op.create_index("ix_courses_status", "courses", ["status"])
    op.create_index("ix_courses_category", "courses", ["category"])
    op.create_index("ix_courses_created_at", "courses", ["created_at"])

    op.create_table(
        "sections",
        sa.Column("section_id", UUID(as_uuid=True), primary_key=True),
        _course_fk(),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("sort_order", sa.SmallInteger(), nullable=False, server_default="0"),
    )
    op.create_index("ix_sections_course_id", "sections", ["course_id"])

    op.create_table(
        "lectures",
        sa.Column("lecture_id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "section_id",
            UUID(as_uuid=True),
            sa.ForeignKey("sections.section_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("lecture_type", lecture_type, nullable=False, server_default="VIDEO"),
        sa.Column("video_url", sa.String(500), nullable=True),
        sa.Column("duration_secs", sa.Integer(), nullable=True),
        sa.Column("sort_order", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("is_preview", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_lectures_section_id", "lectures", ["section_id"])

    # ── commerce ─────────────────────────────────────────────────────────
    op.create_table(
        "enrollments",
        sa.Column("enrollment_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        _course_fk(),
        sa.Column("progress", sa.SmallInteger(), nullable=False, server_default="0"),
        _ts("completed_at", nullable=True),
        _ts("last_accessed_at", nullable=True),
        _ts("created_at"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
    )
    op.create_index("ix_enrollments_user_id", "enrollments", ["user_id"])
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])

    op.create_table(
        "purchases",
        sa.Column("purchase_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        _course_fk(ondelete="RESTRICT"),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("platform_fee", sa.Integer(), nullable=False),
        sa.Column("instructor_earning", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="usd"),
        sa.Column("stripe_session_id", sa.String(255), nullable=False),
        sa.Column("stripe_payment_intent_id", sa.String(255), nullable=True),
        sa.Column("status", purchase_status, nullable=False, server_default="PENDING"),
        sa.Column("course_name", sa.String(300), nullable=False),
        sa.Column("course_price", sa.Numeric(10, 2), nullable=False),
        _ts("created_at"),
    )
    op.create_index("ix_purchases_user_id", "purchases", ["user_id"])
    op.create_index("ix_purchases_course_id", "purchases", ["course_id"])
    op.create_index("ix_purchases_stripe_session_id", "purchases", ["stripe_session_id"])

    for table, pk in (("cart_items", "cart_item_id"), ("wishlists", "wishlist_id")):
        op.create_table(
            table,
            sa.Column(pk, UUID(as_uuid=True), primary_key=True),
            sa.Column("user_id", UUID(as_uuid=True), nullable=False),
            _course_fk(),
            _ts("created_at"),
            sa.UniqueConstraint("user_id", "course_id", name=f"uq_{table}_user_course"),
        )
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])

    # ── learning ─────────────────────────────────────────────────────────
    op.create_table(
        "lecture_progress",
        sa.Column("progress_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column(
            "lecture_id",
            UUID(as_uuid=True),
            sa.ForeignKey("lectures.lecture_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("watched_duration", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_position", sa.Integer(), nullable=False, server_default="0"),
        _ts("completed_at", nullable=True),
        _ts("updated_at"),
        sa.UniqueConstraint("user_id", "lecture_id", name="uq_lecture_progress_user_lecture"),
    )
    op.create_index("ix_lecture_progress_user_id", "lecture_progress", ["user_id"])

    op.create_table(
        "certificates",
        sa.Column("certificate_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("certificate_code", sa.String(20), nullable=False, unique=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        _course_fk(),
        sa.Column("course_name", sa.String(300), nullable=False),
        sa.Column("instructor_name", sa.String(200), nullable=False),
        _ts("issued_at"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_certificates_user_course"),
    )
    op.create_index("ix_certificates_user_id", "certificates", ["user_id"])

    # ── reviews & applications ───────────────────────────────────────────
    op.create_table(
        "reviews",
        sa.Column("review_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        _course_fk(),
        sa.Column("rating", sa.SmallInteger(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("created_at"),
        _ts("updated_at"),
        sa.UniqueConstraint("user_id", "course_id", name="uq_reviews_user_course"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_course_id", "reviews", ["course_id"])
    op.create_index("ix_reviews_created_at", "reviews", ["created_at"])

    op.create_table(
        "instructor_applications",
        sa.Column("application_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("headline", sa.String(200), nullable=False),
        sa.Column("bio", sa.Text(), nullable=False),
        sa.Column("status", application_status, nullable=False, server_default="PENDING"),
        sa.Column("admin_note", sa.Text(), nullable=True),
        sa.Column("reviewed_by_id", UUID(as_uuid=True), nullable=True),
        _ts("reviewed_at", nullable=True),
        _ts("created_at"),
    )
    op.create_index(
        "ix_instructor_applications_user_id", "instructor_applications", ["user_id"]
    )
    op.create_index(
        "ix_instructor_applications_status", "instructor_applications", ["status"]
    )


def downgrade() -> None:
    for table in (
        "instructor_applications",
        "reviews",
        "certificates",
        "lecture_progress",
        "wishlists",
        "cart_items",
        "purchases",
        "enrollments",
        "lectures",
        "sections",
        "courses",
        "users",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in reversed(_ENUMS):
        enum.drop(bind, checkfirst=True)
