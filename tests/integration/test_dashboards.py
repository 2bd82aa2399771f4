"""Integration tests for dashboard composition."""

from datetime import datetime, timezone

import pytest

from contentops.engines.dashboard import AdminDashboard, SuperAdminDashboard
from contentops.kernel.models import UserRole

from factories import NOW, add_metrics, assign, make_user

CURRENT = "2026-10"
PREVIOUS = "2026-09"


class TestSuperAdminDashboard:

    @pytest.mark.asyncio
    async def test_compose_sections_share_month(self, session_factory, db_session, admin, founder):
        await add_metrics(db_session, founder, admin, CURRENT, posts=5, impressions=2500, outreach=12)

        payload = await SuperAdminDashboard(session_factory).compose(NOW)

        assert payload["month"] == CURRENT
        assert payload["generated_at"] == NOW
        for section in ("stats", "activities", "graphs"):
            assert payload[section]["month"] == CURRENT

    @pytest.mark.asyncio
    async def test_compose_fails_when_one_section_fails(self, session_factory, db_engine, monkeypatch):
        async def empty_section(self, session, now):
            return {}

        async def broken_graphs(self, session, now):
            raise RuntimeError("graphs unavailable")

        monkeypatch.setattr(SuperAdminDashboard, "_stats", empty_section)
        monkeypatch.setattr(SuperAdminDashboard, "_activities", empty_section)
        monkeypatch.setattr(SuperAdminDashboard, "_graphs", broken_graphs)
        assert (await SuperAdminDashboard(session_factory).stats(NOW))["month"] == CURRENT
        with pytest.raises(RuntimeError, match="graphs unavailable"):
            await SuperAdminDashboard(session_factory).compose(NOW)

    @pytest.mark.asyncio
    async def test_stats(self, session_factory, db_session, admin, other_admin):
        old = await make_user(
            db_session, UserRole.FOUNDER, "Old Founder", created_at=datetime(2026, 1, 5, tzinfo=timezone.utc)
        )
        await make_user(db_session, UserRole.FOUNDER, "New Founder", created_at=NOW)
        await add_metrics(db_session, old, admin, PREVIOUS, posts=3)
        await add_metrics(db_session, old, admin, CURRENT, posts=7, impressions=1500, outreach=40)

        stats = await SuperAdminDashboard(session_factory).stats(NOW)

        assert stats["total_active_founders"] == {"count": 2, "trend": 1}
        assert stats["total_posts_published"] == {"count": 7, "trend": 4}
        assert stats["overall_engagement"] == {"impressions": "1.5K", "comment_outreach": "40"}
        assert stats["admin_performance"] == {"active_admins": 1, "total_admins": 2, "percentage_active": 50}
        assert stats["metrics_completion"] == {"percentage": 50, "completed_count": 1, "total": 2}

    @pytest.mark.asyncio
    async def test_empty_platform(self, session_factory, db_engine):
        payload = await SuperAdminDashboard(session_factory).compose(NOW)

        assert payload["stats"]["metrics_completion"]["percentage"] == 0
        assert payload["activities"]["latest_metrics_uploads"] == []
        assert len(payload["graphs"]["platform_growth_trends"]) == 12
        assert payload["graphs"]["industry_distribution"] == []


class TestAdminDashboard:

    @pytest.mark.asyncio
    async def test_scoped_to_assigned_founders(
        self, session_factory, db_session, super_admin, admin, other_admin, founder, other_founder
    ):
        await assign(db_session, admin, founder, super_admin)
        await assign(db_session, other_admin, other_founder, super_admin)
        await add_metrics(db_session, founder, admin, CURRENT, impressions=1000, outreach=10)
        await add_metrics(db_session, other_founder, other_admin, CURRENT, impressions=9000, outreach=90)

        payload = await AdminDashboard(admin.id, session_factory).compose(NOW)
        stats = payload["stats"]

        assert stats["assigned_founders_count"] == {"count": 1, "total_active_founders": 2, "percentage": 50}
        assert stats["metrics_completion_rate"] == {"percentage": 100, "completed_count": 1, "total_assigned": 1}
        assert stats["average_founder_performance"]["impressions"] == 1000
        assert stats["metrics_needing_attention"] == {"count": 0, "percentage": 0}

        comparison = payload["graphs"]["founder_performance_comparison"]
        assert [c["founder_id"] for c in comparison] == [founder.id]
        timeline = payload["graphs"]["admin_activity_timeline"]
        assert [t["type"] for t in timeline] == ["metrics_upload"]
        assert payload["activities"]["upcoming_deadlines"] == []

    @pytest.mark.asyncio
    async def test_admin_without_founders(self, session_factory, db_session, admin, founder):
        await add_metrics(db_session, founder, admin, CURRENT, impressions=1000)

        payload = await AdminDashboard(admin.id, session_factory).compose(NOW)

        assert payload["stats"]["assigned_founders_count"]["count"] == 0
        assert payload["stats"]["metrics_completion_rate"]["percentage"] == 0
        assert payload["graphs"]["founder_performance_comparison"] == []
        assert payload["activities"]["latest_metrics_uploads"] == []
        assert {s["month"] for s in (payload["stats"], payload["activities"], payload["graphs"])} == {CURRENT}
