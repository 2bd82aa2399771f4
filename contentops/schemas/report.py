"""
Founder report schemas.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class ReportUpload(BaseModel):
    """Base64-encoded PDF for one month. Re-uploading a month replaces its file."""

    month: str = Field(..., description="Calendar month as YYYY-MM", examples=["2026-10"])
    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = "application/pdf"
    data: str = Field(..., min_length=1, description="Base64 PDF bytes")


class ReportResponse(BaseModel):
    id: uuid.UUID
    founder_id: uuid.UUID
    founder_name: str
    month: str
    url: str
    uploaded_by: uuid.UUID
    uploader_name: str
    uploader_email: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
