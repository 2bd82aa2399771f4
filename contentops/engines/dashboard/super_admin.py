"""
Super-admin dashboard: platform-wide stats, activities and graphs.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from contentops.engines.analytics.engine import AnalyticsEngine
from contentops.engines.analytics.formatting import format_number
from contentops.engines.analytics.periods import (
    month_key,
    month_start,
    percentage,
    previous_month,
)
from contentops.engines.dashboard.base import DashboardComposer
from contentops.kernel.events.activity_logger import ActivityLogger


class SuperAdminDashboard(DashboardComposer):
    """
    Platform view over all founders (scope None).

    Usage:
        dashboard = SuperAdminDashboard(session_factory)
        payload = await dashboard.compose()
    """

    name = "super_admin"

    async def _stats(self, session: AsyncSession, now: datetime) -> Dict[str, Any]:
        engine = AnalyticsEngine(session, self.settings)
        current = month_key(now)
        prev = previous_month(current)

        founders = await engine.count_founders(None, active_only=True)
        founders_before = await engine.count_founders_created_before(month_start(prev))
        this_month = await engine.month_totals(None, current)
        last_month = await engine.month_totals(None, prev)
        total_admins = await engine.count_admins()
        completion = await engine.completion(None, current)

        return {
            "total_active_founders": {
                "count": founders,
                "trend": founders - founders_before,
            },
            "total_posts_published": {
                "count": this_month["total_posts"],
                "trend": this_month["total_posts"] - last_month["total_posts"],
            },
            "overall_engagement": {
                "impressions": format_number(this_month["total_impressions"]),
                "comment_outreach": format_number(this_month["total_comment_outreach"]),
            },
            "admin_performance": {
                "active_admins": this_month["active_uploaders"],
                "total_admins": total_admins,
                "percentage_active": percentage(this_month["active_uploaders"], total_admins),
            },
            "metrics_completion": {
                "percentage": completion["percentage"],
                "completed_count": completion["completed_count"],
                "total": completion["total"],
            },
        }

    async def _activities(self, session: AsyncSession, now: datetime) -> Dict[str, Any]:
        engine = AnalyticsEngine(session, self.settings)
        return {
            "latest_metrics_uploads": await engine.latest_uploads(None),
            "top_performing_founders": await engine.top_performers(None, month_key(now)),
            "admins_requiring_attention": await engine.admins_needing_attention(now),
            "upcoming_milestones": await engine.upcoming_milestones(None),
            "recent_activity": await ActivityLogger(session).recent(self.settings.recent_uploads_limit),
        }

    async def _graphs(self, session: AsyncSession, now: datetime) -> Dict[str, Any]:
        engine = AnalyticsEngine(session, self.settings)
        return {
            "platform_growth_trends": await engine.rolling_series(None, now=now),
            "admin_activity": await engine.admin_upload_activity(now=now),
            "industry_distribution": await engine.industry_distribution(),
            "metrics_completion_rate": await engine.completion_series(None, now=now),
        }
