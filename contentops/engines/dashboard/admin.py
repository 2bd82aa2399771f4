"""
Admin dashboard: the calling admin's assigned founders only.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession

from contentops.config import Settings
from contentops.database import SessionFactory, async_session_maker
from contentops.engines.analytics.engine import AnalyticsEngine
from contentops.engines.analytics.periods import month_key, percentage
from contentops.engines.dashboard.base import DashboardComposer
from contentops.kernel.assignments.assignment_store import AssignmentStore

TIMELINE_LIMIT = 50


class AdminDashboard(DashboardComposer):
    """
    Per-admin view. The scope is re-read from the assignment graph in every
    section, so each section reflects the edges at the time it ran.
    """

    name = "admin"

    def __init__(
        self,
        admin_id: uuid.UUID,
        session_factory: SessionFactory = async_session_maker,
        settings: Optional[Settings] = None,
    ):
        super().__init__(session_factory, settings)
        self.admin_id = admin_id

    async def _scope(self, session: AsyncSession) -> Set[uuid.UUID]:
        return await AssignmentStore(session).founder_ids_for_admin(self.admin_id)

    async def _stats(self, session: AsyncSession, now: datetime) -> Dict[str, Any]:
        engine = AnalyticsEngine(session, self.settings)
        scope = await self._scope(session)
        current = month_key(now)

        assigned = len(scope)
        all_founders = await engine.count_founders(None, active_only=True)
        completion = await engine.completion(scope, current)
        attention = await engine.founders_needing_attention(scope, now)

        return {
            "assigned_founders_count": {
                "count": assigned,
                "total_active_founders": all_founders,
                "percentage": percentage(assigned, all_founders),
            },
            "metrics_completion_rate": {
                "percentage": completion["percentage"],
                "completed_count": completion["completed_count"],
                "total_assigned": completion["total"],
            },
            "average_founder_performance": await engine.average_performance(scope, current),
            "metrics_needing_attention": {
                "count": len(attention),
                "percentage": percentage(len(attention), assigned),
            },
        }

    async def _activities(self, session: AsyncSession, now: datetime) -> Dict[str, Any]:
        engine = AnalyticsEngine(session, self.settings)
        scope = await self._scope(session)
        return {
            "latest_metrics_uploads": await engine.latest_uploads(scope, uploaded_by=self.admin_id),
            "performance_highlights": await engine.performance_highlights(scope, now),
            "upcoming_deadlines": await engine.upcoming_deadlines(scope, now),
        }

    async def _graphs(self, session: AsyncSession, now: datetime) -> Dict[str, Any]:
        engine = AnalyticsEngine(session, self.settings)
        scope = await self._scope(session)
        uploads = await engine.latest_uploads(None, uploaded_by=self.admin_id, limit=TIMELINE_LIMIT)
        return {
            "metrics_update_frequency": await engine.update_frequency(scope, self.admin_id, now=now),
            "founder_performance_comparison": await engine.founder_comparison(scope, month_key(now)),
            "metrics_trends": await engine.metrics_trends(scope, now=now),
            "admin_activity_timeline": [
                {
                    "id": upload["id"],
                    "type": "metrics_upload",
                    "founder_name": upload["founder_name"],
                    "company_name": upload["company_name"],
                    "month": upload["month"],
                    "timestamp": upload["timestamp"],
                }
                for upload in uploads
            ],
        }
