"""
Instructor applications: controller layer.

Catches domain errors from the service and turns them into HTTP responses.
"""
from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.applications import service
from app.applications.schemas import (
    AdminApplicationItem,
    AdminApplicationListResponse,
    ApplicantSummary,
    ApplicationResponse,
    MyApplicationResponse,
    ReviewApplicationRequest,
    SubmitApplicationRequest,
)
from app.exceptions import MarketplaceError
from app.http_errors import to_http_exception
from app.models.enums import ApplicationStatus


async def submit(
    session: AsyncSession, user_id: uuid.UUID, body: SubmitApplicationRequest
) -> ApplicationResponse:
    try:
        application = await service.submit_application(
            session, user_id, headline=body.headline, bio=body.bio,
        )
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return ApplicationResponse.model_validate(application)


async def get_mine(session: AsyncSession, user_id: uuid.UUID) -> MyApplicationResponse:
    application = await service.get_latest_application(session, user_id)
    return MyApplicationResponse(
        application=ApplicationResponse.model_validate(application) if application else None,
    )


async def list_all(
    session: AsyncSession, status: ApplicationStatus | None
) -> AdminApplicationListResponse:
    rows = await service.list_applications(session, status)
    items = []
    for application, user in rows:
        item = AdminApplicationItem.model_validate(application)
        item.applicant = ApplicantSummary.model_validate(user) if user else None
        items.append(item)
    return AdminApplicationListResponse(applications=items)


async def review(
    session: AsyncSession,
    application_id: uuid.UUID,
    admin_id: uuid.UUID,
    body: ReviewApplicationRequest,
) -> ApplicationResponse:
    try:
        application = await service.review_application(
            session,
            application_id,
            admin_id,
            decision=ApplicationStatus(body.status),
            admin_note=body.admin_note,
        )
    except MarketplaceError as exc:
        raise to_http_exception(exc) from exc
    return ApplicationResponse.model_validate(application)
