"""
Post schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from contentops.kernel.models.post import PostStatus


class PostCreate(BaseModel):
    founder_id: uuid.UUID
    caption: str = Field(..., min_length=1)
    images: List[str] = Field(default_factory=list)
    scheduled_date: Optional[datetime] = None


class PostUpdate(BaseModel):
    """Partial edit. Only fields present in the request are applied."""

    caption: Optional[str] = Field(None, min_length=1)
    images: Optional[List[str]] = None
    scheduled_date: Optional[datetime] = None
    status: Optional[PostStatus] = None
    feedback: Optional[str] = None


class PostStatusUpdate(BaseModel):
    status: PostStatus
    feedback: Optional[str] = None


class PostFeedback(BaseModel):
    feedback: str = Field(..., min_length=1)


class PostImagesUpdate(BaseModel):
    images: List[str]


class PostResponse(BaseModel):
    id: uuid.UUID
    founder_id: uuid.UUID
    admin_id: uuid.UUID
    caption: str
    images: List[str]
    status: str
    feedback: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ImageUpload(BaseModel):
    """Base64-encoded image for a founder's post."""

    founder_id: uuid.UUID
    post_id: Optional[uuid.UUID] = None
    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field("image/jpeg", pattern=r"^image/[a-z0-9.+-]+$")
    data: str = Field(..., min_length=1, description="Base64 image bytes")


class ImageUploadResponse(BaseModel):
    url: str
