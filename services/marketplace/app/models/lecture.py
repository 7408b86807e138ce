import uuid

from sqlalchemy import Boolean, ForeignKey, Index, Integer, SmallInteger, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base

from .enums import LectureType, lecture_type_enum


class Lecture(Base):
    __tablename__ = "lectures"

    lecture_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    section_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("sections.section_id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    lecture_type: Mapped[LectureType] = mapped_column(
        lecture_type_enum, nullable=False, default=LectureType.VIDEO
    )
    # Playback URL on the media host; thumbnails are derived there, not here
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    duration_secs: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sort_order: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    is_preview: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    section = relationship("Section", back_populates="lectures", lazy="select")

    __table_args__ = (
        Index("ix_lectures_section_id", "section_id"),
    )
