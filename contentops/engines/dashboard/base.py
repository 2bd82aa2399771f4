"""
Shared composition for dashboards.

A dashboard has three sections (stats, activities, graphs). Each section runs
in its own unit of work from the session factory, so compose() can fetch them
concurrently. All sections are computed against one `now`.
"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from contentops.config import Settings, get_settings
from contentops.database import SessionFactory, async_session_maker, unit_of_work
from contentops.engines.analytics.periods import month_key, utc_now
from contentops.logging_config import get_logger

logger = get_logger(__name__)

SectionBuilder = Callable[[AsyncSession, datetime], Awaitable[Dict[str, Any]]]


class DashboardComposer:
    """Base class; subclasses implement _stats, _activities and _graphs."""

    name = "dashboard"

    def __init__(
        self,
        session_factory: SessionFactory = async_session_maker,
        settings: Optional[Settings] = None,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()

    async def _run(self, builder: SectionBuilder, now: datetime) -> Dict[str, Any]:
        async with unit_of_work(self.session_factory) as session:
            section = await builder(session, now)
        section["month"] = month_key(now)
        return section

    async def _stats(self, session: AsyncSession, now: datetime) -> Dict[str, Any]:
        raise NotImplementedError

    async def _activities(self, session: AsyncSession, now: datetime) -> Dict[str, Any]:
        raise NotImplementedError

    async def _graphs(self, session: AsyncSession, now: datetime) -> Dict[str, Any]:
        raise NotImplementedError

    async def stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return await self._run(self._stats, now or utc_now())

    async def activities(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return await self._run(self._activities, now or utc_now())

    async def graphs(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return await self._run(self._graphs, now or utc_now())

    async def compose(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        All three sections, fetched concurrently.

        If any section fails the whole call fails; there is no partial dashboard.

        Returns:
            {"month", "generated_at", "stats", "activities", "graphs"}
        """
        now = now or utc_now()
        stats, activities, graphs = await asyncio.gather(
            self.stats(now),
            self.activities(now),
            self.graphs(now),
        )
        logger.info(
            "Dashboard composed",
            extra={"dashboard": self.name, "month": month_key(now)},
        )
        return {
            "month": month_key(now),
            "generated_at": now,
            "stats": stats,
            "activities": activities,
            "graphs": graphs,
        }
