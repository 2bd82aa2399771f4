"""
Metrics repository: one record per (founder, calendar month).
"""

import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy import and_, desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contentops.kernel.errors import Conflict, InvalidFormat, InvalidRole, NotFound
from contentops.kernel.metrics.months import validate_month
from contentops.kernel.models.metrics import FounderMetrics
from contentops.kernel.models.user import User, UserRole
from contentops.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class MetricsCounters:
    """Absolute counters for a month. Re-uploads overwrite, never add."""

    total_posts: int = 0
    total_impressions: int = 0
    total_comment_outreach: int = 0
    notes: Optional[str] = None

    def validate(self) -> None:
        for name in ("total_posts", "total_impressions", "total_comment_outreach"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise InvalidFormat(f"{name} must be a non-negative integer", {name: value})


class MetricsRepository:
    """
    Persistence for FounderMetrics.

    The founder foreign key is checked at write time: a record can only be
    created for an existing user with the founder role.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _require_founder(self, founder_id: uuid.UUID) -> User:
        result = await self.session.execute(select(User).where(User.id == founder_id))
        founder = result.scalar_one_or_none()
        if not founder:
            raise NotFound("Founder not found", {"founder_id": str(founder_id)})
        if founder.role != UserRole.FOUNDER.value:
            raise InvalidRole(
                f"User with ID {founder_id} is not a founder",
                {"founder_id": str(founder_id), "role": founder.role},
            )
        return founder

    async def upsert_monthly(
        self,
        founder_id: uuid.UUID,
        month: str,
        counters: MetricsCounters,
        uploaded_by: uuid.UUID,
    ) -> FounderMetrics:
        """
        Create or overwrite the founder's record for a month.

        An existing record keeps its id and created_at; counters, notes and
        uploader are replaced. If a concurrent request inserts the same
        (founder, month) first, the unique violation is retried as an
        update, so the last writer wins.

        Args:
            founder_id: Founder the metrics belong to
            month: "YYYY-MM"
            counters: New absolute values
            uploaded_by: Admin or super-admin uploading the record

        Returns:
            The stored record

        Raises:
            InvalidFormat: Malformed month or negative counters
            NotFound: Founder does not exist
            InvalidRole: User is not a founder
        """
        validate_month(month)
        counters.validate()
        await self._require_founder(founder_id)

        existing = await self.get_by_founder_month(founder_id, month)
        if existing is not None:
            self._apply(existing, counters, uploaded_by)
            await self.session.flush()
            logger.info(
                "Metrics overwritten",
                extra={"founder_id": str(founder_id), "month": month},
            )
            return existing

        record = FounderMetrics(founder_id=founder_id, month=month, uploaded_by=uploaded_by)
        self._apply(record, counters, uploaded_by)
        try:
            async with self.session.begin_nested():
                self.session.add(record)
        except IntegrityError:
            # Lost the insert race; update the winner's row instead
            winner = await self.get_by_founder_month(founder_id, month)
            if winner is None:
                raise
            self._apply(winner, counters, uploaded_by)
            await self.session.flush()
            return winner

        logger.info(
            "Metrics uploaded",
            extra={"founder_id": str(founder_id), "month": month},
        )
        return record

    @staticmethod
    def _apply(record: FounderMetrics, counters: MetricsCounters, uploaded_by: uuid.UUID) -> None:
        record.total_posts = counters.total_posts
        record.total_impressions = counters.total_impressions
        record.total_comment_outreach = counters.total_comment_outreach
        record.notes = counters.notes
        record.uploaded_by = uploaded_by

    async def insert(
        self,
        founder_id: uuid.UUID,
        month: str,
        counters: MetricsCounters,
        uploaded_by: uuid.UUID,
    ) -> FounderMetrics:
        """
        Insert a new record without the overwrite path.

        Raises:
            Conflict: If a record for (founder, month) already exists
        """
        validate_month(month)
        counters.validate()
        await self._require_founder(founder_id)

        record = FounderMetrics(founder_id=founder_id, month=month, uploaded_by=uploaded_by)
        self._apply(record, counters, uploaded_by)
        try:
            async with self.session.begin_nested():
                self.session.add(record)
        except IntegrityError as exc:
            raise Conflict(
                "Metrics for this founder and month already exist",
                {"founder_id": str(founder_id), "month": month},
            ) from exc
        return record

    async def get_by_founder(self, founder_id: uuid.UUID) -> List[FounderMetrics]:
        """All records for a founder, newest month first."""
        result = await self.session.execute(
            select(FounderMetrics)
            .where(FounderMetrics.founder_id == founder_id)
            .order_by(desc(FounderMetrics.month))
        )
        return list(result.scalars().all())

    async def get_by_founder_month(self, founder_id: uuid.UUID, month: str) -> Optional[FounderMetrics]:
        """
        The founder's record for one month, or None.

        Raises:
            InvalidFormat: Malformed month
        """
        validate_month(month)
        result = await self.session.execute(
            select(FounderMetrics).where(
                and_(
                    FounderMetrics.founder_id == founder_id,
                    FounderMetrics.month == month,
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_for_founders(self, founder_ids: Iterable[uuid.UUID]) -> List[FounderMetrics]:
        """Records for a set of founders, newest month first."""
        ids = list(founder_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(FounderMetrics)
            .where(FounderMetrics.founder_id.in_(ids))
            .order_by(desc(FounderMetrics.month), FounderMetrics.founder_id)
        )
        return list(result.scalars().all())

    async def get_all(self) -> List[FounderMetrics]:
        """Every record, newest month first."""
        result = await self.session.execute(
            select(FounderMetrics).order_by(desc(FounderMetrics.month), desc(FounderMetrics.created_at))
        )
        return list(result.scalars().all())

    async def get_by_id(self, metrics_id: uuid.UUID) -> Optional[FounderMetrics]:
        result = await self.session.execute(
            select(FounderMetrics).where(FounderMetrics.id == metrics_id)
        )
        return result.scalar_one_or_none()

    async def delete_by_id(self, metrics_id: uuid.UUID) -> FounderMetrics:
        """
        Delete one record.

        Returns:
            The deleted record (detached), for activity logging

        Raises:
            NotFound: If no record has this id
        """
        record = await self.get_by_id(metrics_id)
        if record is None:
            raise NotFound("Metrics not found", {"metrics_id": str(metrics_id)})
        await self.session.delete(record)
        await self.session.flush()
        logger.info(
            "Metrics deleted",
            extra={"metrics_id": str(metrics_id), "founder_id": str(record.founder_id)},
        )
        return record
