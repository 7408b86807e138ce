"""
Instructor applications: applicant-facing routes.

Routes:
  GET  /api/v1/instructor-applications   caller's latest application
  POST /api/v1/instructor-applications   submit (STUDENT role only)
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.applications import controller as ctrl
from app.applications.schemas import (
    ApplicationResponse,
    MyApplicationResponse,
    SubmitApplicationRequest,
)
from app.database import get_db
from app.dependencies import get_current_user, require_student
from app.rate_limit import limiter
from shared.models.user import CurrentUser

router = APIRouter(prefix="/instructor-applications", tags=["instructor-applications"])


@router.get(
    "",
    response_model=MyApplicationResponse,
    summary="Get my latest instructor application",
)
async def get_my_application(
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> MyApplicationResponse:
    return await ctrl.get_mine(session, current_user.id)


@router.post(
    "",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to become an instructor",
    description="Students only. Fails with ALREADY_PENDING while an earlier application awaits review.",
)
@limiter.limit("5/hour")
async def submit_application(
    request: Request,
    body: SubmitApplicationRequest,
    current_user: CurrentUser = Depends(require_student),
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    return await ctrl.submit(session, current_user.id, body)
