"""Translate domain errors into ``HTTPException`` for the error envelope."""

from fastapi import HTTPException, status

from app.exceptions import ErrorKind, MarketplaceError

_KIND_STATUS: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.STATE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UPSTREAM_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Codes whose status differs from their kind's default
_CODE_STATUS: dict[str, int] = {
    "PAYMENT_REQUIRED": status.HTTP_402_PAYMENT_REQUIRED,
    "PAYMENT_NOT_COMPLETED": status.HTTP_402_PAYMENT_REQUIRED,
}


def to_http_exception(exc: MarketplaceError) -> HTTPException:
    status_code = _CODE_STATUS.get(exc.code, _KIND_STATUS[exc.kind])
    return HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "kind": exc.kind.value, "message": exc.message},
    )
