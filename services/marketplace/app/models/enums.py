import enum

from sqlalchemy import Enum as SAEnum

from shared.constants import Role


class CourseStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class LectureType(str, enum.Enum):
    VIDEO = "VIDEO"
    TEXT = "TEXT"
    QUIZ = "QUIZ"


class PurchaseStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    REFUNDED = "REFUNDED"


class ApplicationStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ReviewSort(str, enum.Enum):
    NEWEST = "newest"
    HIGHEST = "highest"
    LOWEST = "lowest"


# SQLAlchemy Enum instances (reuse across models to avoid duplicate type creation).
# Native ENUM types on PostgreSQL, VARCHAR elsewhere.
user_role_enum = SAEnum(Role, name="user_role")
course_status_enum = SAEnum(CourseStatus, name="course_status")
lecture_type_enum = SAEnum(LectureType, name="lecture_type")
purchase_status_enum = SAEnum(PurchaseStatus, name="purchase_status")
application_status_enum = SAEnum(ApplicationStatus, name="application_status")
