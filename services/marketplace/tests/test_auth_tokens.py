import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import JWTError, jwt

from shared.auth.config import AuthSettings
from shared.auth.dependencies import decode_access_token
from shared.constants import Role


def _encode(settings: AuthSettings, **overrides) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(uuid.uuid4()),
        "email": "a@example.com",
        "roles": ["student"],
        "iss": settings.issuer,
        "aud": settings.audience,
        "exp": now + timedelta(minutes=5),
    }
    claims.update(overrides)
    return jwt.encode(claims, settings.secret, algorithm=settings.algorithm)


def test_decode_valid_token() -> None:
    settings = AuthSettings()
    user = decode_access_token(_encode(settings, roles=["student", "admin"]), settings)
    assert user.roles == [Role.STUDENT, Role.ADMIN]
    assert user.email == "a@example.com"


def test_single_role_string_and_unknown_roles() -> None:
    settings = AuthSettings()
    assert decode_access_token(_encode(settings, roles="instructor"), settings).roles == [
        Role.INSTRUCTOR
    ]
    assert decode_access_token(_encode(settings, roles=["superuser"]), settings).roles == []


def test_wrong_audience_is_rejected() -> None:
    settings = AuthSettings()
    with pytest.raises(JWTError):
        decode_access_token(_encode(settings, aud="someone-else"), settings)


def test_expired_token_is_rejected() -> None:
    settings = AuthSettings()
    expired = datetime.now(timezone.utc) - timedelta(minutes=1)
    with pytest.raises(JWTError):
        decode_access_token(_encode(settings, exp=expired), settings)


def test_missing_subject_is_rejected() -> None:
    settings = AuthSettings()
    with pytest.raises(ValueError):
        decode_access_token(_encode(settings, sub=""), settings)
