"""Marketplace-level FastAPI dependencies: settings, identity, role guards, payment gateway.

Routes import identity dependencies from here rather than from ``shared``
directly, so the acting user is always resolved once per request and then
passed explicitly down to controllers and services.
"""

from functools import lru_cache

from fastapi import Depends

from app.checkout.gateway import StripeCheckoutGateway
from app.config import Settings
from app.exceptions import RoleForbiddenError
from app.http_errors import to_http_exception
from shared.auth.dependencies import (
    get_current_user_optional,
    get_current_user_required,
)
from shared.constants import Role
from shared.models.user import CurrentUser

get_current_user = get_current_user_required
get_optional_user = get_current_user_optional


@lru_cache
def get_settings() -> Settings:
    return Settings()


def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Raise 403 unless the authenticated user holds the ADMIN role."""
    if not current_user.has_role(Role.ADMIN):
        raise to_http_exception(RoleForbiddenError("Administrator access required."))
    return current_user


def require_student(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Raise 403 unless the authenticated user is (still) a STUDENT."""
    if not current_user.has_role(Role.STUDENT):
        raise to_http_exception(RoleForbiddenError("Only students can apply."))
    return current_user


def get_payment_gateway(
    settings: Settings = Depends(get_settings),
) -> StripeCheckoutGateway:
    return StripeCheckoutGateway(settings)
