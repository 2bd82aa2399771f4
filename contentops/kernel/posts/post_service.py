"""
Post workflow: authoring by admins, review by founders.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from contentops.config import get_settings
from contentops.kernel.errors import Forbidden, InvalidFormat, NotFound
from contentops.kernel.events.activity_logger import ActivityLogger
from contentops.kernel.models.activity_log import ActivityAction
from contentops.kernel.models.post import Post, PostStatus
from contentops.kernel.models.user import User, UserRole
from contentops.kernel.permissions.permission_service import (
    AuthorizationService,
    Resource,
    ResourceClass,
    founder_exists,
)
from contentops.kernel.posts.state_machine import (
    REVIEW_STATUSES,
    check_transition,
    resolve_update_status,
)
from contentops.logging_config import get_logger

logger = get_logger(__name__)

_STATUS_ACTIONS = {
    PostStatus.APPROVED: ActivityAction.POST_APPROVED,
    PostStatus.REJECTED: ActivityAction.POST_REJECTED,
    PostStatus.POSTED: ActivityAction.POST_POSTED,
}


class PostService:
    """
    Post CRUD and status transitions.

    Every call takes the acting user and is authorized here; every mutation
    appends an activity log entry in the same transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.authz = AuthorizationService(session)
        self.activity = ActivityLogger(session)
        self.max_images = get_settings().max_images_per_post

    def _check_images(self, images: Sequence[str]) -> List[str]:
        if len(images) > self.max_images:
            raise InvalidFormat(
                f"Maximum {self.max_images} images allowed per post",
                {"count": len(images)},
            )
        return list(images)

    async def _load(self, post_id: uuid.UUID) -> Post:
        result = await self.session.execute(select(Post).where(Post.id == post_id))
        post = result.scalar_one_or_none()
        if not post:
            raise NotFound("Post not found", {"post_id": str(post_id)})
        return post

    async def _authorize_edit(self, actor: User, post: Post) -> None:
        """The authoring admin, while still assigned to the post's founder, or a super-admin."""
        self.authz.authorize_post_owner(actor, post)
        await self.authz.authorize(actor, Resource(ResourceClass.POST_AUTHORING, post=post))

    async def _log(self, actor: User, action: ActivityAction, post: Post) -> None:
        await self.activity.record(
            actor_id=actor.id,
            role=actor.role,
            action=action,
            metadata={"post_id": post.id, "founder_id": post.founder_id},
        )

    async def list_posts(
        self,
        actor: User,
        founder_id: Optional[uuid.UUID] = None,
        admin_id: Optional[uuid.UUID] = None,
        status: Optional[PostStatus] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Post], int]:
        """
        Posts visible to the actor, with the unpaginated total.

        Admins see posts they authored for founders they are still assigned
        to, founders see posts for themselves, super-admins see all.
        Date bounds apply to scheduled_date.

        Raises:
            Forbidden: Filtering by a founder or admin outside the actor's scope
        """
        conditions = []

        if actor.role == UserRole.ADMIN:
            if founder_id is not None:
                await self.authz.authorize(actor, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=founder_id))
                conditions.append(Post.founder_id == founder_id)
            if admin_id is not None and admin_id != actor.id:
                raise Forbidden("You can only filter by your own admin ID")
            conditions.append(Post.admin_id == actor.id)
            assigned = await self.authz.assignments.founder_ids_for_admin(actor.id)
            conditions.append(Post.founder_id.in_(list(assigned)))
        elif actor.role == UserRole.FOUNDER:
            if founder_id is not None and founder_id != actor.id:
                raise Forbidden("You can only view your own posts")
            conditions.append(Post.founder_id == actor.id)
            if admin_id is not None:
                conditions.append(Post.admin_id == admin_id)
        else:
            if founder_id is not None:
                conditions.append(Post.founder_id == founder_id)
            if admin_id is not None:
                conditions.append(Post.admin_id == admin_id)

        if status is not None:
            conditions.append(Post.status == PostStatus(status).value)
        if start_date is not None:
            conditions.append(Post.scheduled_date >= start_date)
        if end_date is not None:
            conditions.append(Post.scheduled_date <= end_date)

        count_query = select(func.count(Post.id)).where(*conditions)
        total = (await self.session.execute(count_query)).scalar() or 0
        result = await self.session.execute(
            select(Post)
            .where(*conditions)
            .order_by(Post.scheduled_date.asc().nulls_last(), Post.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def create_post(
        self,
        actor: User,
        founder_id: uuid.UUID,
        caption: str,
        images: Optional[Sequence[str]] = None,
        scheduled_date: Optional[datetime] = None,
    ) -> Post:
        """
        Create a post for a founder.

        The post starts as "scheduled" when a date is given, else "pending".

        Raises:
            NotFound: The founder does not exist
            Forbidden: The actor may not author posts for this founder
            InvalidFormat: Too many images
        """
        if not await founder_exists(self.session, founder_id):
            raise NotFound("Founder not found", {"founder_id": str(founder_id)})
        await self.authz.authorize(actor, Resource(ResourceClass.POST_AUTHORING, founder_id=founder_id))

        post = Post(
            founder_id=founder_id,
            admin_id=actor.id,
            caption=caption,
            images=self._check_images(images or []),
            scheduled_date=scheduled_date,
            status=(PostStatus.SCHEDULED if scheduled_date else PostStatus.PENDING).value,
        )
        self.session.add(post)
        await self.session.flush()

        await self._log(actor, ActivityAction.POST_CREATED, post)
        logger.info(
            "Post created",
            extra={"post_id": str(post.id), "status": post.status},
        )
        return post

    async def get_post(self, actor: User, post_id: uuid.UUID) -> Post:
        """
        One post. Admins may read posts of founders they are currently assigned to.

        Raises:
            NotFound, Forbidden
        """
        post = await self._load(post_id)
        await self.authz.authorize(actor, Resource(ResourceClass.FOUNDER_CONTENT, post=post))
        return post

    async def update_post(
        self,
        actor: User,
        post_id: uuid.UUID,
        changes: Dict[str, Any],
    ) -> Post:
        """
        Edit caption, images, scheduled date or status.

        Admins may only edit posts they authored for a founder they are still
        assigned to, and may not approve or reject. A scheduled date forces "scheduled" unless the update sets
        "rejected".

        Args:
            actor: Editing user
            post_id: Post to edit
            changes: Subset of caption, images, scheduled_date, status, feedback

        Raises:
            NotFound, Forbidden, InvalidFormat, Conflict
        """
        post = await self._load(post_id)

        if actor.role == UserRole.FOUNDER:
            raise Forbidden("Founders cannot edit posts")
        if actor.role == UserRole.ADMIN:
            await self._authorize_edit(actor, post)
            requested = changes.get("status")
            if requested in (PostStatus.APPROVED.value, PostStatus.REJECTED.value):
                raise Forbidden("Admins cannot approve or reject posts")

        status = resolve_update_status(changes.get("status"), changes.get("scheduled_date") is not None)
        if status is not None:
            post.status = check_transition(post.status, status, changes.get("feedback") or post.feedback).value

        if "caption" in changes and changes["caption"] is not None:
            post.caption = changes["caption"]
        if "images" in changes and changes["images"] is not None:
            post.images = self._check_images(changes["images"])
        if "scheduled_date" in changes:
            post.scheduled_date = changes["scheduled_date"]
        if changes.get("feedback") is not None:
            post.feedback = changes["feedback"]

        await self.session.flush()
        await self._log(actor, ActivityAction.POST_UPDATED, post)
        return post

    async def delete_post(self, actor: User, post_id: uuid.UUID) -> None:
        """
        Delete a post. Admins may only delete posts they authored while assigned
        to its founder.

        Raises:
            NotFound, Forbidden
        """
        post = await self._load(post_id)
        if actor.role == UserRole.FOUNDER:
            raise Forbidden("Founders cannot delete posts")
        await self._authorize_edit(actor, post)

        await self._log(actor, ActivityAction.POST_DELETED, post)
        await self.session.delete(post)
        await self.session.flush()
        logger.info("Post deleted", extra={"post_id": str(post_id)})

    async def set_status(
        self,
        actor: User,
        post_id: uuid.UUID,
        status: str,
        feedback: Optional[str] = None,
    ) -> Post:
        """
        Review transition: approved, rejected or posted.

        Only the post's founder or a super-admin may review. Rejection
        requires feedback.

        Raises:
            InvalidFormat: Status outside the review set, or rejecting without feedback
            NotFound, Forbidden, Conflict
        """
        try:
            target = PostStatus(status)
        except ValueError:
            target = None
        if target not in REVIEW_STATUSES:
            raise InvalidFormat("Invalid status. Must be approved, rejected, or posted", {"status": status})
        if target == PostStatus.REJECTED and not (feedback and feedback.strip()):
            raise InvalidFormat("Feedback is required when rejecting a post")

        post = await self._load(post_id)
        await self.authz.authorize(actor, Resource(ResourceClass.POST_REVIEW, post=post))

        post.status = check_transition(post.status, target, feedback).value
        if feedback:
            post.feedback = feedback
        await self.session.flush()

        await self._log(actor, _STATUS_ACTIONS[target], post)
        logger.info(
            "Post status changed",
            extra={"post_id": str(post.id), "status": post.status},
        )
        return post

    async def add_feedback(self, actor: User, post_id: uuid.UUID, feedback: str) -> Post:
        """
        Attach reviewer feedback without changing status.

        Raises:
            InvalidFormat: Blank feedback
            NotFound, Forbidden
        """
        if not feedback or not feedback.strip():
            raise InvalidFormat("Valid feedback is required")
        post = await self._load(post_id)
        await self.authz.authorize(actor, Resource(ResourceClass.POST_REVIEW, post=post))

        post.feedback = feedback
        await self.session.flush()
        await self._log(actor, ActivityAction.POST_FEEDBACK_ADDED, post)
        return post

    async def update_images(self, actor: User, post_id: uuid.UUID, images: Sequence[str]) -> Post:
        """
        Replace a post's image URLs.

        Allowed for the post's founder, its authoring admin while assigned, and
        super-admins.

        Raises:
            InvalidFormat: More than the configured maximum
            NotFound, Forbidden
        """
        images = self._check_images(images)
        post = await self._load(post_id)
        if actor.role == UserRole.ADMIN:
            await self._authorize_edit(actor, post)
        else:
            await self.authz.authorize(actor, Resource(ResourceClass.FOUNDER_CONTENT, post=post))

        post.images = images
        await self.session.flush()
        await self._log(actor, ActivityAction.POST_IMAGES_UPDATED, post)
        return post
