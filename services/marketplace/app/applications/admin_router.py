"""
Instructor applications: admin-facing routes.

Routes:
  GET   /api/v1/admin/instructor-applications                   list, PENDING first
  PATCH /api/v1/admin/instructor-applications/{application_id}  approve or reject

Requires: ADMIN role.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.applications import controller as ctrl
from app.applications.schemas import (
    AdminApplicationListResponse,
    ApplicationResponse,
    ReviewApplicationRequest,
)
from app.database import get_db
from app.dependencies import require_admin
from app.models.enums import ApplicationStatus
from shared.models.user import CurrentUser

router = APIRouter(prefix="/admin/instructor-applications", tags=["admin-instructor-applications"])


@router.get(
    "",
    response_model=AdminApplicationListResponse,
    summary="[Admin] List instructor applications",
)
async def list_applications(
    status: ApplicationStatus | None = Query(None, description="Filter by status."),
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> AdminApplicationListResponse:
    return await ctrl.list_all(session, status)


@router.patch(
    "/{application_id}",
    response_model=ApplicationResponse,
    summary="[Admin] Approve or reject an instructor application",
    description=(
        "status=APPROVED promotes the applicant to INSTRUCTOR and copies the "
        "headline and bio onto their profile. Only PENDING applications can be decided."
    ),
)
async def review_application(
    application_id: uuid.UUID,
    body: ReviewApplicationRequest,
    admin: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    return await ctrl.review(session, application_id, admin.id, body)
