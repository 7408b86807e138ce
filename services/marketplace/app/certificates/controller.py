"""Certificates controller."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.certificates import service
from app.certificates.schemas import CertificateListResponse, CertificateResponse
from app.exceptions import MarketplaceError
from app.http_errors import to_http_exception


async def list_mine(db: AsyncSession, user_id: UUID) -> CertificateListResponse:
    certificates = await service.list_my_certificates(db, user_id)
    return CertificateListResponse(
        items=[CertificateResponse.model_validate(c) for c in certificates],
    )


async def verify(db: AsyncSession, code: str) -> CertificateResponse:
    try:
        certificate = await service.get_certificate_by_code(db, code)
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return CertificateResponse.model_validate(certificate)
