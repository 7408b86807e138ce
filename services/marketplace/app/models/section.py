import uuid

from sqlalchemy import ForeignKey, Index, SmallInteger, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base


class Section(Base):
    __tablename__ = "sections"

    section_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("courses.course_id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    sort_order: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)

    course = relationship("Course", back_populates="sections", lazy="select")
    lectures = relationship(
        "Lecture", back_populates="section", lazy="noload", order_by="Lecture.sort_order"
    )

    __table_args__ = (
        Index("ix_sections_course_id", "course_id"),
    )
