"""
Admin-founder assignment schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class AssignmentReplace(BaseModel):
    """Replace-all request: the founder's complete admin set."""

    founder_id: uuid.UUID
    admin_ids: List[uuid.UUID] = Field(default_factory=list)


class AssignmentResponse(BaseModel):
    id: uuid.UUID
    founder_id: uuid.UUID
    admin_id: uuid.UUID
    assigned_by: uuid.UUID
    assigned_at: datetime

    class Config:
        from_attributes = True


class AssignedAdmin(BaseModel):
    admin_id: uuid.UUID
    name: str
    email: str
    assigned_at: datetime


class FounderSummary(BaseModel):
    company_name: Optional[str] = None
    industry: Optional[str] = None


class PostCounts(BaseModel):
    total: int = 0
    scheduled: int = 0
    approved: int = 0


class AssignedFounder(BaseModel):
    founder_id: uuid.UUID
    name: str
    email: str
    profile: FounderSummary
    assigned_at: datetime
    post_counts: Optional[PostCounts] = None
