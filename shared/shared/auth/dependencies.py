"""Bearer-token identity for every service.

Tokens are issued by the identity provider; services only verify them. A
token that is missing, expired, signed with the wrong key or carrying the
wrong issuer/audience resolves to "no user".
"""

import logging
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from shared.auth.config import AuthSettings
from shared.constants import Role
from shared.models.user import CurrentUser

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_KNOWN_ROLES = {role.value: role for role in Role}


def get_auth_settings() -> AuthSettings:
    return AuthSettings()


def _roles_from_claim(raw: object) -> list[Role]:
    # A single role may arrive as a bare string; unknown roles grant nothing
    values = [raw] if isinstance(raw, str) else list(raw or [])
    return [_KNOWN_ROLES[v] for v in values if isinstance(v, str) and v in _KNOWN_ROLES]


def decode_access_token(token: str, settings: AuthSettings) -> CurrentUser:
    """Verify ``token`` and build the caller; raises ``JWTError`` or ``ValueError``."""
    claims = jwt.decode(
        token,
        settings.secret,
        algorithms=[settings.algorithm],
        issuer=settings.issuer,
        audience=settings.audience,
    )
    subject = claims.get("sub")
    if not subject:
        raise ValueError("token has no subject")
    return CurrentUser(
        id=UUID(subject),
        email=claims.get("email") or "",
        roles=_roles_from_claim(claims.get("roles")),
    )


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: AuthSettings = Depends(get_auth_settings),
) -> CurrentUser | None:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return decode_access_token(credentials.credentials, settings)
    except (JWTError, ValueError) as exc:
        logger.debug("Rejected bearer token: %s", exc)
        return None


async def get_current_user_required(
    user: CurrentUser | None = Depends(get_current_user_optional),
) -> CurrentUser:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
