"""
Post endpoints: authoring by admins, review by founders.
"""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query, status

from contentops.api.deps import CurrentUser, DbSession
from contentops.kernel.models.post import PostStatus
from contentops.kernel.posts.post_service import PostService
from contentops.schemas.common import PaginatedResponse, SuccessResponse
from contentops.schemas.post import (
    PostCreate,
    PostFeedback,
    PostImagesUpdate,
    PostResponse,
    PostStatusUpdate,
    PostUpdate,
)

router = APIRouter()


@router.get("", response_model=PaginatedResponse[PostResponse])
async def list_posts(
    user: CurrentUser,
    db: DbSession,
    founder_id: Optional[uuid.UUID] = None,
    admin_id: Optional[uuid.UUID] = None,
    status_filter: Optional[PostStatus] = Query(None, alias="status"),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    """Posts visible to the caller, ordered by scheduled date."""
    posts, total = await PostService(db).list_posts(
        user,
        founder_id=founder_id,
        admin_id=admin_id,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return PaginatedResponse.create(
        items=[PostResponse.model_validate(p) for p in posts],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(data: PostCreate, user: CurrentUser, db: DbSession):
    """Create a post for an assigned founder."""
    post = await PostService(db).create_post(
        user,
        founder_id=data.founder_id,
        caption=data.caption,
        images=data.images,
        scheduled_date=data.scheduled_date,
    )
    return PostResponse.model_validate(post)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: uuid.UUID, user: CurrentUser, db: DbSession):
    post = await PostService(db).get_post(user, post_id)
    return PostResponse.model_validate(post)


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(post_id: uuid.UUID, data: PostUpdate, user: CurrentUser, db: DbSession):
    """Edit a post. Setting a scheduled date moves it to "scheduled"."""
    changes = data.model_dump(exclude_unset=True)
    if changes.get("status") is not None:
        changes["status"] = PostStatus(changes["status"]).value
    post = await PostService(db).update_post(user, post_id, changes)
    return PostResponse.model_validate(post)


@router.delete("/{post_id}", response_model=SuccessResponse)
async def delete_post(post_id: uuid.UUID, user: CurrentUser, db: DbSession):
    await PostService(db).delete_post(user, post_id)
    return SuccessResponse(message="Post deleted")


@router.patch("/{post_id}/status", response_model=PostResponse)
async def set_post_status(post_id: uuid.UUID, data: PostStatusUpdate, user: CurrentUser, db: DbSession):
    """Approve, reject (feedback required) or mark as posted."""
    post = await PostService(db).set_status(user, post_id, data.status.value, data.feedback)
    return PostResponse.model_validate(post)


@router.post("/{post_id}/feedback", response_model=PostResponse)
async def add_feedback(post_id: uuid.UUID, data: PostFeedback, user: CurrentUser, db: DbSession):
    post = await PostService(db).add_feedback(user, post_id, data.feedback)
    return PostResponse.model_validate(post)


@router.put("/{post_id}/images", response_model=PostResponse)
async def update_images(post_id: uuid.UUID, data: PostImagesUpdate, user: CurrentUser, db: DbSession):
    """Replace the post's image URLs."""
    post = await PostService(db).update_images(user, post_id, data.images)
    return PostResponse.model_validate(post)
