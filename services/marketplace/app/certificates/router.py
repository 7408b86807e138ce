"""Certificates router: HTTP layer only."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.certificates import controller
from app.certificates.schemas import CertificateListResponse, CertificateResponse
from app.database import get_db
from app.dependencies import get_current_user
from shared.models.user import CurrentUser

router = APIRouter(prefix="/certificates", tags=["Certificates"])


@router.get(
    "",
    response_model=CertificateListResponse,
    summary="List my certificates",
)
async def list_my_certificates(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> CertificateListResponse:
    return await controller.list_mine(db, current_user.id)


@router.get(
    "/{code}",
    response_model=CertificateResponse,
    summary="Verify a certificate by code",
    description="Public endpoint: anyone holding a certificate code can check it was issued.",
)
async def verify_certificate(
    code: str,
    db: AsyncSession = Depends(get_db),
) -> CertificateResponse:
    return await controller.verify(db, code)
