"""
Post image upload endpoint.
"""

import base64
import binascii

from fastapi import APIRouter, status

from contentops.api.deps import DbSession, StaffUser, Storage
from contentops.kernel.errors import InvalidFormat
from contentops.kernel.notifications import image_folder
from contentops.kernel.permissions.permission_service import (
    AuthorizationService,
    Resource,
    ResourceClass,
)
from contentops.schemas.post import ImageUpload, ImageUploadResponse

router = APIRouter()

MAX_IMAGE_BYTES = 10 * 1024 * 1024


@router.post("/images", response_model=ImageUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(data: ImageUpload, user: StaffUser, db: DbSession, storage: Storage):
    """
    Store one image for a founder and return its URL.

    The URL is attached to a post through the post create or images endpoints.
    """
    await AuthorizationService(db).authorize(
        user, Resource(ResourceClass.POST_AUTHORING, founder_id=data.founder_id)
    )
    try:
        blob = base64.b64decode(data.data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidFormat("Image data must be base64 encoded") from exc
    if len(blob) > MAX_IMAGE_BYTES:
        raise InvalidFormat("Image exceeds the 10 MB limit", {"bytes": len(blob)})

    url = await storage.store(blob, data.content_type, image_folder(data.founder_id, user.id, data.post_id))
    return ImageUploadResponse(url=url)
