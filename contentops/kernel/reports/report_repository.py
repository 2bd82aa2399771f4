"""
Report repository: one PDF per (founder, calendar month).
"""

import uuid
from typing import Iterable, List, Optional

from sqlalchemy import and_, desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contentops.kernel.errors import InvalidFormat, InvalidRole, NotFound
from contentops.kernel.metrics.months import validate_month
from contentops.kernel.models.report import FounderReport
from contentops.kernel.models.user import User, UserRole
from contentops.kernel.notifications.storage import ObjectStorage, report_folder
from contentops.logging_config import get_logger

logger = get_logger(__name__)

REPORT_CONTENT_TYPE = "application/pdf"
MAX_REPORT_BYTES = 10 * 1024 * 1024


class ReportRepository:
    """
    Persistence for FounderReport plus the stored files behind it.

    Files are written before the record changes and removed after it; a
    file that cannot be removed is logged and left behind.
    """

    def __init__(self, session: AsyncSession, storage: ObjectStorage):
        self.session = session
        self.storage = storage

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

    async def _discard(self, url: str) -> None:
        try:
            await self.storage.delete(url)
        except Exception:
            logger.exception("Could not delete stored report file", extra={"url": url})

    async def upload(
        self,
        founder_id: uuid.UUID,
        month: str,
        data: bytes,
        content_type: str,
        uploaded_by: uuid.UUID,
    ) -> FounderReport:
        """
        Store a founder's report for a month, replacing any earlier file.

        Args:
            founder_id: Founder the report is for
            month: "YYYY-MM"
            data: PDF bytes
            content_type: Must be application/pdf
            uploaded_by: Admin or super-admin uploading the report

        Returns:
            The stored record

        Raises:
            InvalidFormat: Malformed month, non-PDF content or a file over 10 MB
            NotFound: Founder does not exist
            InvalidRole: User is not a founder
        """
        validate_month(month)
        if content_type != REPORT_CONTENT_TYPE:
            raise InvalidFormat("Only PDF reports are accepted", {"content_type": content_type})
        if len(data) > MAX_REPORT_BYTES:
            raise InvalidFormat("Report exceeds the 10 MB limit", {"bytes": len(data)})
        await self._require_founder(founder_id)

        url = await self.storage.store(data, content_type, report_folder(founder_id))

        existing = await self.get_by_founder_month(founder_id, month)
        if existing is None:
            record = FounderReport(founder_id=founder_id, month=month, url=url, uploaded_by=uploaded_by)
            try:
                async with self.session.begin_nested():
                    self.session.add(record)
            except IntegrityError:
                # Lost the insert race; replace the winner's file instead
                existing = await self.get_by_founder_month(founder_id, month)
                if existing is None:
                    raise
            else:
                await self.session.refresh(record, ["founder", "uploader"])
                logger.info("Report uploaded", extra={"founder_id": str(founder_id), "month": month})
                return record

        previous_url = existing.url
        existing.url = url
        existing.uploaded_by = uploaded_by
        await self.session.flush()
        await self.session.refresh(existing, ["uploader"])
        if previous_url != url:
            await self._discard(previous_url)
        logger.info("Report replaced", extra={"founder_id": str(founder_id), "month": month})
        return existing

    async def get_by_founder(self, founder_id: uuid.UUID) -> List[FounderReport]:
        """All reports for a founder, newest month first."""
        result = await self.session.execute(
            select(FounderReport)
            .where(FounderReport.founder_id == founder_id)
            .order_by(desc(FounderReport.month))
        )
        return list(result.scalars().all())

    async def get_by_founder_month(self, founder_id: uuid.UUID, month: str) -> Optional[FounderReport]:
        """
        The founder's report for one month, or None.

        Raises:
            InvalidFormat: Malformed month
        """
        validate_month(month)
        result = await self.session.execute(
            select(FounderReport).where(
                and_(
                    FounderReport.founder_id == founder_id,
                    FounderReport.month == month,
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_for_founders(self, founder_ids: Iterable[uuid.UUID]) -> List[FounderReport]:
        ids = list(founder_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(FounderReport)
            .where(FounderReport.founder_id.in_(ids))
            .order_by(desc(FounderReport.month), desc(FounderReport.created_at))
        )
        return list(result.scalars().all())

    async def get_all(self) -> List[FounderReport]:
        result = await self.session.execute(
            select(FounderReport).order_by(desc(FounderReport.month), desc(FounderReport.created_at))
        )
        return list(result.scalars().all())

    async def get_by_id(self, report_id: uuid.UUID) -> Optional[FounderReport]:
        result = await self.session.execute(
            select(FounderReport).where(FounderReport.id == report_id)
        )
        return result.scalar_one_or_none()

    async def delete_by_id(self, report_id: uuid.UUID) -> FounderReport:
        """
        Delete one report and then its stored file.

        Returns:
            The deleted record (detached), for activity logging

        Raises:
            NotFound: If no report has this id
        """
        record = await self.get_by_id(report_id)
        if record is None:
            raise NotFound("Report not found", {"report_id": str(report_id)})
        await self.session.delete(record)
        await self.session.flush()
        await self._discard(record.url)
        logger.info(
            "Report deleted",
            extra={"report_id": str(report_id), "founder_id": str(record.founder_id)},
        )
        return record
