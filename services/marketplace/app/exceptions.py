"""Domain exception classes for the marketplace service.

Raised by service-layer code and caught by controllers, which convert them
to HTTP responses via ``app.http_errors.to_http_exception``. Every error
carries a machine-readable ``code`` (what clients branch on) and a ``kind``
from the shared taxonomy.
"""

import enum


class ErrorKind(str, enum.Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"
    STATE_CONFLICT = "STATE_CONFLICT"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class MarketplaceError(Exception):
    """Base class; subclasses override ``kind``, ``code`` and ``message``."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR
    code: str = "INTERNAL_ERROR"
    message: str = "Internal error."

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# NOT_FOUND
# ---------------------------------------------------------------------------


class CourseNotFoundError(MarketplaceError):
    kind = ErrorKind.NOT_FOUND
    code = "COURSE_NOT_FOUND"
    message = "Course not found."


class LectureNotFoundError(MarketplaceError):
    kind = ErrorKind.NOT_FOUND
    code = "LECTURE_NOT_FOUND"
    message = "Lecture not found."


class ReviewNotFoundError(MarketplaceError):
    kind = ErrorKind.NOT_FOUND
    code = "REVIEW_NOT_FOUND"
    message = "Review not found."


class ApplicationNotFoundError(MarketplaceError):
    kind = ErrorKind.NOT_FOUND
    code = "APPLICATION_NOT_FOUND"
    message = "Application not found."


class UserNotFoundError(MarketplaceError):
    kind = ErrorKind.NOT_FOUND
    code = "USER_NOT_FOUND"
    message = "User not found."


class CertificateNotFoundError(MarketplaceError):
    kind = ErrorKind.NOT_FOUND
    code = "CERTIFICATE_NOT_FOUND"
    message = "Certificate not found."


class NotInCartError(MarketplaceError):
    kind = ErrorKind.NOT_FOUND
    code = "NOT_IN_CART"
    message = "Item not in cart."


# ---------------------------------------------------------------------------
# FORBIDDEN (role or ownership)
# ---------------------------------------------------------------------------


class NotEnrolledError(MarketplaceError):
    """Raised when an operation requires an enrollment that does not exist."""

    kind = ErrorKind.FORBIDDEN
    code = "NOT_ENROLLED"
    message = "You are not enrolled in this course."


class SelfReviewError(MarketplaceError):
    kind = ErrorKind.FORBIDDEN
    code = "SELF_REVIEW"
    message = "You cannot review your own course."


class NotReviewOwnerError(MarketplaceError):
    kind = ErrorKind.FORBIDDEN
    code = "NOT_REVIEW_OWNER"
    message = "You can only modify your own review."


class RoleForbiddenError(MarketplaceError):
    kind = ErrorKind.FORBIDDEN
    code = "ROLE_FORBIDDEN"
    message = "Your role does not allow this action."


class SessionOwnershipError(MarketplaceError):
    """Raised when a checkout session was created for a different user."""

    kind = ErrorKind.FORBIDDEN
    code = "SESSION_MISMATCH"
    message = "Session does not belong to this user."


# ---------------------------------------------------------------------------
# VALIDATION_ERROR
# ---------------------------------------------------------------------------


class OwnCourseError(MarketplaceError):
    """Raised when an instructor tries to buy or cart their own course."""

    kind = ErrorKind.VALIDATION_ERROR
    code = "OWN_COURSE"
    message = "You cannot purchase your own course."


class MissingCourseMetadataError(MarketplaceError):
    kind = ErrorKind.VALIDATION_ERROR
    code = "NO_COURSE_METADATA"
    message = "No course info in session metadata."


class CartEmptyError(MarketplaceError):
    kind = ErrorKind.VALIDATION_ERROR
    code = "CART_EMPTY"
    message = "Your cart has no purchasable courses."


class CourseIsFreeError(MarketplaceError):
    kind = ErrorKind.VALIDATION_ERROR
    code = "COURSE_IS_FREE"
    message = "Free courses do not go through checkout."


# ---------------------------------------------------------------------------
# CONFLICT (duplicate membership / review / application)
# ---------------------------------------------------------------------------


class AlreadyEnrolledError(MarketplaceError):
    kind = ErrorKind.CONFLICT
    code = "ALREADY_ENROLLED"
    message = "Already enrolled in this course."


class AlreadyInCartError(MarketplaceError):
    kind = ErrorKind.CONFLICT
    code = "ALREADY_IN_CART"
    message = "Course already in cart."


class AlreadyReviewedError(MarketplaceError):
    kind = ErrorKind.CONFLICT
    code = "ALREADY_REVIEWED"
    message = "You have already reviewed this course."


class ApplicationAlreadyPendingError(MarketplaceError):
    kind = ErrorKind.CONFLICT
    code = "ALREADY_PENDING"
    message = "You already have a pending application."


# ---------------------------------------------------------------------------
# STATE_CONFLICT
# ---------------------------------------------------------------------------


class ApplicationAlreadyReviewedError(MarketplaceError):
    kind = ErrorKind.STATE_CONFLICT
    code = "ALREADY_REVIEWED"
    message = "Application already reviewed."


class PaymentNotCompletedError(MarketplaceError):
    kind = ErrorKind.STATE_CONFLICT
    code = "PAYMENT_NOT_COMPLETED"
    message = "Payment not completed."


class PaymentRequiredError(MarketplaceError):
    """Raised when the free-enrollment path is used for a paid course."""

    kind = ErrorKind.STATE_CONFLICT
    code = "PAYMENT_REQUIRED"
    message = "Payment required for this course."


# ---------------------------------------------------------------------------
# UPSTREAM_FAILURE
# ---------------------------------------------------------------------------


class PaymentProviderError(MarketplaceError):
    """Raised when the payment processor cannot be reached or rejects a call."""

    kind = ErrorKind.UPSTREAM_FAILURE
    code = "PAYMENT_PROVIDER_ERROR"
    message = "Payment provider request failed."
