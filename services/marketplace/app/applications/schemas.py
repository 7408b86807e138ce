"""
Instructor applications: Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ApplicationStatus
from shared.models.base import request_model_config


class _Base(BaseModel):
    model_config = request_model_config


# ── Applicant-facing ──────────────────────────────────────────────────────────

class SubmitApplicationRequest(_Base):
    headline: str = Field(min_length=5, max_length=100, examples=["Senior data engineer"])
    bio: str = Field(min_length=50, max_length=2000)


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    application_id: uuid.UUID
    user_id: uuid.UUID
    headline: str
    bio: str
    status: ApplicationStatus
    admin_note: str | None
    reviewed_by_id: uuid.UUID | None
    reviewed_at: datetime | None
    created_at: datetime


class MyApplicationResponse(BaseModel):
    application: ApplicationResponse | None  # None when the user never applied


# ── Admin-facing ──────────────────────────────────────────────────────────────

class ApplicantSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    name: str | None
    email: str
    image_url: str | None


class AdminApplicationItem(ApplicationResponse):
    applicant: ApplicantSummary | None = None


class AdminApplicationListResponse(BaseModel):
    applications: list[AdminApplicationItem]


class ReviewApplicationRequest(_Base):
    status: Literal["APPROVED", "REJECTED"]
    admin_note: str | None = Field(None, max_length=500)
