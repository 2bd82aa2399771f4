"""
Assignment graph store.

Persists the many-to-many relation between admins and founders. This is the
only component that writes Assignment rows.
"""

import uuid
from typing import Any, Dict, Iterable, List, Set

from sqlalchemy import and_, case, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from contentops.database import acquire_write_lock
from contentops.kernel.errors import Internal, InvalidRole, NotFound
from contentops.kernel.models.assignment import Assignment
from contentops.kernel.models.base import utcnow
from contentops.kernel.models.post import Post, PostStatus
from contentops.kernel.models.user import User, UserRole
from contentops.logging_config import get_logger

logger = get_logger(__name__)


class AssignmentStore:
    """
    Admin <-> founder edges.

    Edges for a founder are created in bulk by replace_assignments; the
    only single-edge mutation is delete_assignment. Reads join the User and
    FounderProfile tables at query time.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _require_user(self, user_id: uuid.UUID, role: UserRole, label: str, lock: bool = False) -> User:
        query = select(User).where(User.id == user_id)
        if lock:
            query = query.with_for_update()
        result = await self.session.execute(query)
        user = result.scalar_one_or_none()
        if not user:
            raise NotFound(f"{label} not found", {f"{label.lower()}_id": str(user_id)})
        if user.role != role.value:
            raise InvalidRole(
                f"User with ID {user_id} is not a {role.value}",
                {"user_id": str(user_id), "role": user.role},
            )
        return user

    async def replace_assignments(
        self,
        founder_id: uuid.UUID,
        admin_ids: Iterable[uuid.UUID],
        assigned_by: uuid.UUID,
    ) -> List[Assignment]:
        """
        Replace the founder's full admin set.

        Validation runs before any write: the founder must exist and be a
        founder, and every admin id must exist and be an admin. The first
        violation aborts the call with nothing changed. Duplicate admin ids
        collapse to one edge.

        The founder row is locked for the rest of the transaction (SELECT ...
        FOR UPDATE, or the database write lock on SQLite when this call opens
        the transaction), so concurrent replacements for one founder
        serialize and the last committed set wins.

        Args:
            founder_id: Founder whose edges are replaced
            admin_ids: New admin set (may be empty, which unassigns everyone)
            assigned_by: Super-admin performing the change

        Returns:
            The newly inserted edges

        Raises:
            NotFound: Founder or an admin does not exist
            InvalidRole: Founder or an admin has the wrong role
            Internal: The store failed; the transaction was rolled back
        """
        await acquire_write_lock(self.session)
        await self._require_user(founder_id, UserRole.FOUNDER, "Founder", lock=True)

        wanted = list(dict.fromkeys(admin_ids))
        if wanted:
            result = await self.session.execute(select(User).where(User.id.in_(wanted)))
            found = {user.id: user for user in result.scalars().all()}
            for admin_id in wanted:
                admin = found.get(admin_id)
                if admin is None:
                    raise NotFound(f"Admin with ID {admin_id} not found", {"admin_id": str(admin_id)})
                if admin.role != UserRole.ADMIN.value:
                    raise InvalidRole(
                        f"User with ID {admin_id} is not an admin",
                        {"admin_id": str(admin_id), "role": admin.role},
                    )

        now = utcnow()
        edges = [
            Assignment(
                founder_id=founder_id,
                admin_id=admin_id,
                assigned_by=assigned_by,
                assigned_at=now,
            )
            for admin_id in wanted
        ]

        try:
            await self.session.execute(
                delete(Assignment).where(Assignment.founder_id == founder_id)
            )
            self.session.add_all(edges)
            await self.session.flush()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(
                "Assignment replacement failed",
                extra={"founder_id": str(founder_id), "error": str(exc)},
            )
            raise Internal("Failed to replace assignments") from exc

        logger.info(
            "Assignments replaced",
            extra={"founder_id": str(founder_id), "admin_count": len(edges)},
        )
        return edges

    async def list_admins_for_founder(self, founder_id: uuid.UUID) -> List[Dict[str, Any]]:
        """
        Admins currently assigned to a founder.

        Raises:
            NotFound: If the founder does not exist
            InvalidRole: If the user is not a founder
        """
        await self._require_user(founder_id, UserRole.FOUNDER, "Founder")

        query = (
            select(Assignment.admin_id, Assignment.assigned_at, User.name, User.email)
            .join(User, Assignment.admin_id == User.id)
            .where(Assignment.founder_id == founder_id)
            .order_by(Assignment.assigned_at, User.name)
        )
        result = await self.session.execute(query)
        return [
            {
                "admin_id": row.admin_id,
                "name": row.name,
                "email": row.email,
                "assigned_at": row.assigned_at,
            }
            for row in result.all()
        ]

    async def list_founders_for_admin(
        self,
        admin_id: uuid.UUID,
        include_counts: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Founders an admin manages, with their profile.

        With include_counts, each entry also carries post counts computed at
        read time: total, scheduled and approved.

        Raises:
            NotFound: If the admin does not exist
            InvalidRole: If the user is not an admin
        """
        await self._require_user(admin_id, UserRole.ADMIN, "Admin")

        query = (
            select(Assignment, User)
            .join(User, Assignment.founder_id == User.id)
            .where(Assignment.admin_id == admin_id)
            .order_by(User.name)
        )

        counts = None
        if include_counts:
            counts = (
                select(
                    Post.founder_id.label("founder_id"),
                    func.count(Post.id).label("total"),
                    func.sum(case((Post.status == PostStatus.SCHEDULED.value, 1), else_=0)).label("scheduled"),
                    func.sum(case((Post.status == PostStatus.APPROVED.value, 1), else_=0)).label("approved"),
                )
                .group_by(Post.founder_id)
                .subquery()
            )
            query = query.add_columns(
                func.coalesce(counts.c.total, 0),
                func.coalesce(counts.c.scheduled, 0),
                func.coalesce(counts.c.approved, 0),
            ).outerjoin(counts, counts.c.founder_id == Assignment.founder_id)

        result = await self.session.execute(query)

        founders = []
        for row in result.all():
            edge, user = row[0], row[1]
            profile = user.founder_profile
            entry: Dict[str, Any] = {
                "founder_id": user.id,
                "name": user.name,
                "email": user.email,
                "profile": {
                    "company_name": profile.company_name if profile else None,
                    "industry": profile.industry if profile else None,
                },
                "assigned_at": edge.assigned_at,
            }
            if counts is not None:
                entry["post_counts"] = {
                    "total": int(row[2]),
                    "scheduled": int(row[3]),
                    "approved": int(row[4]),
                }
            founders.append(entry)
        return founders

    async def founder_ids_for_admin(self, admin_id: uuid.UUID) -> Set[uuid.UUID]:
        """Ids of the founders assigned to an admin (empty for unknown ids)."""
        result = await self.session.execute(
            select(Assignment.founder_id).where(Assignment.admin_id == admin_id)
        )
        return set(result.scalars().all())

    async def is_assigned(self, admin_id: uuid.UUID, founder_id: uuid.UUID) -> bool:
        """Single lookup on the unique (founder_id, admin_id) key."""
        result = await self.session.execute(
            select(Assignment.id).where(
                and_(
                    Assignment.founder_id == founder_id,
                    Assignment.admin_id == admin_id,
                )
            )
        )
        return result.scalar_one_or_none() is not None

    async def delete_assignment(self, admin_id: uuid.UUID, founder_id: uuid.UUID) -> None:
        """
        Remove exactly one edge.

        Raises:
            NotFound: If the admin, the founder or the edge does not exist
        """
        for user_id, label in ((admin_id, "Admin"), (founder_id, "Founder")):
            exists = await self.session.execute(select(User.id).where(User.id == user_id))
            if exists.scalar_one_or_none() is None:
                raise NotFound(f"{label} not found", {f"{label.lower()}_id": str(user_id)})

        result = await self.session.execute(
            delete(Assignment).where(
                and_(
                    Assignment.founder_id == founder_id,
                    Assignment.admin_id == admin_id,
                )
            )
        )
        if result.rowcount == 0:
            raise NotFound(
                "Assignment not found",
                {"admin_id": str(admin_id), "founder_id": str(founder_id)},
            )
        logger.info(
            "Assignment deleted",
            extra={"admin_id": str(admin_id), "founder_id": str(founder_id)},
        )
