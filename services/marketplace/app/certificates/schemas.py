from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CertificateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    certificate_id: UUID
    certificate_code: str
    user_id: UUID
    course_id: UUID
    course_name: str
    instructor_name: str
    issued_at: datetime


class CertificateListResponse(BaseModel):
    items: list[CertificateResponse]
