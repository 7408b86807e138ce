# Import all models so Alembic can discover them via Base.metadata
from .cart_item import CartItem
from .certificate import Certificate
from .course import Course
from .enrollment import Enrollment
from .instructor_application import InstructorApplication
from .lecture import Lecture
from .lecture_progress import LectureProgress
from .purchase import Purchase
from .review import Review
from .section import Section
from .user import User
from .wishlist import Wishlist

__all__ = [
    "CartItem",
    "Certificate",
    "Course",
    "Enrollment",
    "InstructorApplication",
    "Lecture",
    "LectureProgress",
    "Purchase",
    "Review",
    "Section",
    "User",
    "Wishlist",
]
