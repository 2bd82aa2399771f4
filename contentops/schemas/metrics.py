"""
Founder metrics schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MetricsUpload(BaseModel):
    """Monthly counters for a founder. Re-uploading a month overwrites it."""

    founder_id: uuid.UUID
    month: str = Field(..., description="Calendar month as YYYY-MM", examples=["2026-10"])
    total_posts: int = Field(0, ge=0)
    total_impressions: int = Field(0, ge=0)
    total_comment_outreach: int = Field(0, ge=0)
    notes: Optional[str] = None


class MetricsResponse(BaseModel):
    id: uuid.UUID
    founder_id: uuid.UUID
    uploaded_by: uuid.UUID
    month: str
    total_posts: int
    total_impressions: int
    total_comment_outreach: int
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
