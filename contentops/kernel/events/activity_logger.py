"""
Activity logger: append-only record of who did what.

Mutating services call record() inside their unit of work, so the activity row
commits or rolls back together with the change it describes.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from contentops.kernel.models.activity_log import ActivityAction, ActivityLog
from contentops.kernel.models.user import User
from contentops.logging_config import get_logger

logger = get_logger(__name__)


class ActivityLogger:
    """
    Service over the immutable activity log.

    Usage:
        activity = ActivityLogger(session)
        await activity.record(
            actor_id=current_user.id,
            role=current_user.role,
            action=ActivityAction.POST_CREATED,
            metadata={"post_id": post.id, "founder_id": post.founder_id},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        actor_id: uuid.UUID,
        role: str,
        action: Union[ActivityAction, str],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ActivityLog:
        """
        Append an activity entry.

        Args:
            actor_id: User who performed the action
            role: Actor's role at the time of the action
            action: Action label
            metadata: Free-form context; UUIDs and datetimes are stringified

        Returns:
            The pending ActivityLog row (flushed with the caller's unit of work)
        """
        entry = ActivityLog(
            user_id=actor_id,
            role=_value(role),
            action=_value(action),
            meta=self._serialize(metadata or {}),
        )
        self.session.add(entry)
        logger.debug(
            "Activity recorded",
            extra={"action": entry.action, "user_id": str(actor_id)},
        )
        return entry

    async def recent(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Newest entries across all users, joined with the actor's name."""
        query = (
            select(ActivityLog, User.name, User.email)
            .join(User, ActivityLog.user_id == User.id)
            .order_by(desc(ActivityLog.timestamp))
            .limit(limit)
        )
        result = await self.session.execute(query)
        return [
            {
                "id": entry.id,
                "user_id": entry.user_id,
                "user_name": name,
                "user_email": email,
                "role": entry.role,
                "action": entry.action,
                "metadata": entry.meta,
                "timestamp": entry.timestamp,
            }
            for entry, name, email in result.all()
        ]

    async def for_user(self, user_id: uuid.UUID, limit: int = 50) -> List[ActivityLog]:
        """Entries recorded by one user, newest first."""
        query = (
            select(ActivityLog)
            .where(ActivityLog.user_id == user_id)
            .order_by(desc(ActivityLog.timestamp))
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def by_action(
        self,
        action: Union[ActivityAction, str],
        limit: int = 50,
    ) -> List[ActivityLog]:
        """Entries with one action label, newest first."""
        query = (
            select(ActivityLog)
            .where(ActivityLog.action == _value(action))
            .order_by(desc(ActivityLog.timestamp))
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    def _serialize(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Convert metadata values to JSON-serializable types."""
        return {key: self._serialize_value(value) for key, value in payload.items()}

    def _serialize_value(self, value: Any) -> Any:
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, dict):
            return self._serialize(value)
        if isinstance(value, (list, tuple, set)):
            return [self._serialize_value(v) for v in value]
        return value


def _value(label: Union[Enum, str]) -> str:
    return label.value if isinstance(label, Enum) else label
