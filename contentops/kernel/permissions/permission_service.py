"""
Relationship-scoped authorization.

Every decision is computed from the actor's role plus, for admins, a lookup
in the assignment graph. Nothing is cached between calls.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from contentops.kernel.assignments.assignment_store import AssignmentStore
from contentops.kernel.errors import Forbidden
from contentops.kernel.models.metrics import FounderMetrics
from contentops.kernel.models.post import Post
from contentops.kernel.models.report import FounderReport
from contentops.kernel.models.user import User, UserRole


class ResourceClass(str, Enum):
    """What kind of thing is being accessed."""
    FOUNDER_CONTENT = "founder_content"  # a founder's metrics, reports, posts, profile
    USER_MANAGEMENT = "user_management"  # users and assignments
    OWN_DASHBOARD = "own_dashboard"  # the admin dashboard
    PLATFORM_DASHBOARD = "platform_dashboard"  # the super-admin dashboard, all metrics
    POST_REVIEW = "post_review"  # approve / reject / posted, feedback
    POST_AUTHORING = "post_authoring"  # create / edit


@dataclass(frozen=True)
class Resource:
    """Resource descriptor: a class plus the founder or post it concerns."""

    resource_class: ResourceClass
    founder_id: Optional[uuid.UUID] = None
    post: Optional[Post] = None

    @property
    def target_founder_id(self) -> Optional[uuid.UUID]:
        if self.founder_id is not None:
            return self.founder_id
        return self.post.founder_id if self.post is not None else None


class AuthorizationService:
    """
    Decides allow/deny for (actor, resource).

    Decision table:

        resource class      super-admin  admin                 founder
        FOUNDER_CONTENT     allow        iff assigned          iff own id
        USER_MANAGEMENT     allow        deny                  deny
        OWN_DASHBOARD       deny         allow                 deny
        PLATFORM_DASHBOARD  allow        deny                  deny
        POST_REVIEW         allow        deny                  iff owns post's founder
        POST_AUTHORING      allow        iff assigned          deny
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.assignments = AssignmentStore(session)

    async def _decide(self, actor: User, resource: Resource) -> Optional[str]:
        """Return None to allow, or the reason for denial."""
        role = actor.role
        rc = resource.resource_class
        founder_id = resource.target_founder_id

        if rc == ResourceClass.USER_MANAGEMENT:
            return None if role == UserRole.SUPER_ADMIN else "Only super-admins can manage users and assignments"

        if rc == ResourceClass.PLATFORM_DASHBOARD:
            return None if role == UserRole.SUPER_ADMIN else "Only super-admins can access platform data"

        if rc == ResourceClass.OWN_DASHBOARD:
            return None if role == UserRole.ADMIN else "Only admins have an admin dashboard"

        if role == UserRole.SUPER_ADMIN:
            return None

        if rc == ResourceClass.FOUNDER_CONTENT:
            if founder_id is None:
                return "A founder must be specified"
            if role == UserRole.FOUNDER:
                return None if founder_id == actor.id else "You can only access your own content"
            if role == UserRole.ADMIN:
                if await self.assignments.is_assigned(actor.id, founder_id):
                    return None
                return "You are not assigned to this founder"
            return "Unknown role"

        if rc == ResourceClass.POST_REVIEW:
            if role == UserRole.FOUNDER and founder_id is not None and founder_id == actor.id:
                return None
            if role == UserRole.FOUNDER:
                return "You are not authorized to review this post"
            return "Only founders can approve or reject posts"

        if rc == ResourceClass.POST_AUTHORING:
            if role != UserRole.ADMIN:
                return "Only admins can author posts"
            if founder_id is None:
                return "A founder must be specified"
            if await self.assignments.is_assigned(actor.id, founder_id):
                return None
            return "You are not assigned to this founder"

        return "Unknown resource"

    async def can(self, actor: User, resource: Resource) -> bool:
        """True if the actor may access the resource."""
        return await self._decide(actor, resource) is None

    async def authorize(self, actor: User, resource: Resource) -> None:
        """
        Gate a request.

        Raises:
            Forbidden: With the denial reason
        """
        reason = await self._decide(actor, resource)
        if reason is not None:
            raise Forbidden(
                reason,
                {
                    "actor_id": str(actor.id),
                    "resource_class": resource.resource_class.value,
                    "founder_id": str(resource.target_founder_id) if resource.target_founder_id else None,
                },
            )

    async def visible_founder_ids(self, actor: User) -> Optional[Set[uuid.UUID]]:
        """
        Founders whose data the actor may aggregate over.

        Returns:
            None for super-admins (all founders), the assigned set for admins,
            {actor.id} for founders
        """
        if actor.role == UserRole.SUPER_ADMIN:
            return None
        if actor.role == UserRole.ADMIN:
            return await self.assignments.founder_ids_for_admin(actor.id)
        return {actor.id}

    def authorize_post_owner(self, actor: User, post: Post) -> None:
        """
        Admins may only edit or delete posts they authored.

        Raises:
            Forbidden: If an admin is not the post's author
        """
        if actor.role == UserRole.ADMIN and post.admin_id != actor.id:
            raise Forbidden(
                "You are not authorized to modify this post",
                {"post_id": str(post.id), "actor_id": str(actor.id)},
            )

    @staticmethod
    def _authorize_uploader(actor: User, uploaded_by: uuid.UUID, message: str, details: dict) -> None:
        if actor.role == UserRole.SUPER_ADMIN:
            return
        if actor.role == UserRole.ADMIN and uploaded_by == actor.id:
            return
        raise Forbidden(message, {**details, "actor_id": str(actor.id)})

    def authorize_metrics_delete(self, actor: User, record: FounderMetrics) -> None:
        """
        Super-admins may delete any metrics record; admins only those they uploaded.

        Raises:
            Forbidden: Otherwise
        """
        self._authorize_uploader(
            actor,
            record.uploaded_by,
            "You can only delete metrics you uploaded",
            {"metrics_id": str(record.id)},
        )

    def authorize_report_delete(self, actor: User, report: FounderReport) -> None:
        """Same rule as metrics: super-admins, or the admin who uploaded the report."""
        self._authorize_uploader(
            actor,
            report.uploaded_by,
            "You can only delete reports you uploaded",
            {"report_id": str(report.id)},
        )


async def founder_exists(session: AsyncSession, founder_id: uuid.UUID) -> bool:
    """True if founder_id names a user with the founder role."""
    result = await session.execute(
        select(User.id).where(User.id == founder_id, User.role == UserRole.FOUNDER.value)
    )
    return result.scalar_one_or_none() is not None
