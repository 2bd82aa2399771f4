"""
Analytics aggregation engine.

Read-time computations over FounderMetrics. Every scoped query takes the
visible founder set from AuthorizationService.visible_founder_ids: None
means all founders, an empty set means nothing is visible. Missing data
yields zeros and empty lists, never an error.
"""

import uuid
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import Select, and_, desc, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from contentops.config import Settings, get_settings
from contentops.engines.analytics.formatting import format_number
from contentops.engines.analytics.periods import (
    average,
    completion_rate,
    days_ago,
    days_left_in_month,
    growth_percent,
    mean_of,
    month_key,
    nearest_milestone,
    previous_month,
    trailing_months,
    utc_now,
    validate_month,
)
from contentops.kernel.models.assignment import Assignment
from contentops.kernel.models.metrics import FounderMetrics
from contentops.kernel.models.user import FounderProfile, User, UserRole

Scope = Optional[Set[uuid.UUID]]

UNKNOWN = "Unknown"


def _scoped(query: Select, column, scope: Scope) -> Select:
    """Restrict a query to the visible founders (no-op for super-admin scope)."""
    if scope is None:
        return query
    return query.where(column.in_(list(scope)))


class AnalyticsEngine:
    """
    Trend, growth, completion, attention and milestone metrics.

    Usage:
        scope = await AuthorizationService(session).visible_founder_ids(actor)
        engine = AnalyticsEngine(session)
        series = await engine.rolling_series(scope, months=12, now=now)
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Founders in scope
    # ------------------------------------------------------------------

    async def founders_in_scope(self, scope: Scope) -> List[Dict[str, Any]]:
        """Founder id, name, company and industry for every visible founder, by name."""
        query = (
            select(User.id, User.name, User.email, FounderProfile.company_name, FounderProfile.industry)
            .outerjoin(FounderProfile, FounderProfile.user_id == User.id)
            .where(User.role == UserRole.FOUNDER.value)
            .order_by(User.name)
        )
        query = _scoped(query, User.id, scope)
        result = await self.session.execute(query)
        return [
            {
                "founder_id": row.id,
                "founder_name": row.name,
                "email": row.email,
                "company_name": row.company_name or UNKNOWN,
                "industry": row.industry or UNKNOWN,
            }
            for row in result.all()
        ]

    async def count_founders(self, scope: Scope, active_only: bool = False) -> int:
        query = select(func.count(User.id)).where(User.role == UserRole.FOUNDER.value)
        if active_only:
            query = query.where(User.is_active.is_(True))
        query = _scoped(query, User.id, scope)
        return (await self.session.execute(query)).scalar() or 0

    async def count_founders_created_before(self, before: datetime) -> int:
        query = select(func.count(User.id)).where(
            and_(
                User.role == UserRole.FOUNDER.value,
                User.is_active.is_(True),
                User.created_at < before,
            )
        )
        return (await self.session.execute(query)).scalar() or 0

    async def count_admins(self) -> int:
        query = select(func.count(User.id)).where(User.role == UserRole.ADMIN.value)
        return (await self.session.execute(query)).scalar() or 0

    # ------------------------------------------------------------------
    # Month totals and series
    # ------------------------------------------------------------------

    async def month_totals(self, scope: Scope, month: str) -> Dict[str, Any]:
        """
        Sums for one month.

        Returns:
            total_posts, total_impressions, total_comment_outreach,
            metrics_count, founders_reported, active_uploaders
        """
        validate_month(month)
        query = select(
            func.coalesce(func.sum(FounderMetrics.total_posts), 0),
            func.coalesce(func.sum(FounderMetrics.total_impressions), 0),
            func.coalesce(func.sum(FounderMetrics.total_comment_outreach), 0),
            func.count(FounderMetrics.id),
            func.count(distinct(FounderMetrics.founder_id)),
            func.count(distinct(FounderMetrics.uploaded_by)),
        ).where(FounderMetrics.month == month)
        query = _scoped(query, FounderMetrics.founder_id, scope)
        posts, impressions, outreach, count, founders, uploaders = (await self.session.execute(query)).one()
        return {
            "month": month,
            "total_posts": int(posts),
            "total_impressions": int(impressions),
            "total_comment_outreach": int(outreach),
            "metrics_count": int(count),
            "founders_reported": int(founders),
            "active_uploaders": int(uploaders),
        }

    async def rolling_series(
        self,
        scope: Scope,
        months: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        One point per trailing month, oldest first, ending at the current month.

        Months without records appear with zero totals.
        """
        keys = trailing_months(months or self.settings.trend_window_months, now or utc_now())
        query = (
            select(
                FounderMetrics.month,
                func.sum(FounderMetrics.total_posts),
                func.sum(FounderMetrics.total_impressions),
                func.sum(FounderMetrics.total_comment_outreach),
                func.count(FounderMetrics.id),
            )
            .where(FounderMetrics.month.in_(keys))
            .group_by(FounderMetrics.month)
        )
        query = _scoped(query, FounderMetrics.founder_id, scope)
        rows = {row[0]: row for row in (await self.session.execute(query)).all()}

        series = []
        for key in keys:
            row = rows.get(key)
            series.append({
                "month": key,
                "total_posts": int(row[1] or 0) if row else 0,
                "total_impressions": int(row[2] or 0) if row else 0,
                "total_comment_outreach": int(row[3] or 0) if row else 0,
                "metrics_count": int(row[4]) if row else 0,
            })
        return series

    async def metrics_trends(
        self,
        scope: Scope,
        months: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Rolling series with per-record averages."""
        trends = []
        for point in await self.rolling_series(scope, months, now):
            count = point["metrics_count"]
            trends.append({
                "month": point["month"],
                "total_impressions": point["total_impressions"],
                "total_engagement": point["total_comment_outreach"],
                "total_posts": point["total_posts"],
                "metrics_count": count,
                "avg_impressions": mean_of(point["total_impressions"], count),
                "avg_engagement": mean_of(point["total_comment_outreach"], count),
                "avg_posts": mean_of(point["total_posts"], count),
            })
        return trends

    # ------------------------------------------------------------------
    # Growth
    # ------------------------------------------------------------------

    async def founder_growth(self, founder_id: uuid.UUID, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Current vs previous month growth for one founder.

        Growth is 0 when the previous month is missing or zero.
        """
        current = month_key(now or utc_now())
        prev = previous_month(current)
        result = await self.session.execute(
            select(FounderMetrics).where(
                and_(
                    FounderMetrics.founder_id == founder_id,
                    FounderMetrics.month.in_([current, prev]),
                )
            )
        )
        by_month = {record.month: record for record in result.scalars().all()}
        cur, old = by_month.get(current), by_month.get(prev)
        return {
            "founder_id": founder_id,
            "month": current,
            "previous_month": prev,
            "has_current": cur is not None,
            "has_previous": old is not None,
            "impressions_growth": growth_percent(
                cur.total_impressions if cur else 0, old.total_impressions if old else 0
            ),
            "engagement_growth": growth_percent(
                cur.total_comment_outreach if cur else 0, old.total_comment_outreach if old else 0
            ),
        }

    async def performance_highlights(
        self,
        scope: Scope,
        now: Optional[datetime] = None,
        limit: int = 5,
    ) -> List[Dict[str, Any]]:
        """
        Founders with strong month-over-month growth.

        A founder qualifies only with records for both the current and the
        previous month, and max(impressions growth, engagement growth) above
        the configured threshold. Sorted by that max, highest first.
        """
        current = month_key(now or utc_now())
        prev = previous_month(current)
        query = (
            select(FounderMetrics, User.name, FounderProfile.company_name)
            .join(User, FounderMetrics.founder_id == User.id)
            .outerjoin(FounderProfile, FounderProfile.user_id == User.id)
            .where(FounderMetrics.month.in_([current, prev]))
        )
        query = _scoped(query, FounderMetrics.founder_id, scope)

        pairs: Dict[uuid.UUID, Dict[str, Any]] = defaultdict(dict)
        for record, name, company in (await self.session.execute(query)).all():
            entry = pairs[record.founder_id]
            entry[record.month] = record
            entry["founder_name"] = name
            entry["company_name"] = company or UNKNOWN

        threshold = self.settings.highlight_growth_threshold
        highlights = []
        for founder_id, entry in pairs.items():
            cur, old = entry.get(current), entry.get(prev)
            if cur is None or old is None:
                continue
            impressions_growth = growth_percent(cur.total_impressions, old.total_impressions)
            engagement_growth = growth_percent(cur.total_comment_outreach, old.total_comment_outreach)
            if max(impressions_growth, engagement_growth) <= threshold:
                continue
            highlights.append({
                "id": cur.id,
                "founder_id": founder_id,
                "founder_name": entry["founder_name"],
                "company_name": entry["company_name"],
                "impressions_growth": impressions_growth,
                "engagement_growth": engagement_growth,
                "month": current,
            })

        highlights.sort(
            key=lambda h: (-max(h["impressions_growth"], h["engagement_growth"]), h["founder_name"])
        )
        return highlights[:limit]

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    async def _founders_with_record(self, scope: Scope, month: str) -> int:
        query = select(func.count(distinct(FounderMetrics.founder_id))).where(FounderMetrics.month == month)
        query = _scoped(query, FounderMetrics.founder_id, scope)
        return (await self.session.execute(query)).scalar() or 0

    async def completion(self, scope: Scope, month: str) -> Dict[str, Any]:
        """
        Share of visible founders with a record for the month.

        An empty scope has 0% completion.
        """
        validate_month(month)
        total = await self.count_founders(scope)
        completed = await self._founders_with_record(scope, month) if total else 0
        return {
            "month": month,
            "percentage": completion_rate(completed, total),
            "completed_count": completed,
            "total": total,
        }

    async def completion_series(
        self,
        scope: Scope,
        months: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Completion rate per trailing month, oldest first."""
        keys = trailing_months(months or self.settings.trend_window_months, now or utc_now())
        total = await self.count_founders(scope)

        query = (
            select(FounderMetrics.month, func.count(distinct(FounderMetrics.founder_id)))
            .where(FounderMetrics.month.in_(keys))
            .group_by(FounderMetrics.month)
        )
        query = _scoped(query, FounderMetrics.founder_id, scope)
        counts = dict((await self.session.execute(query)).all())
        return [
            {"month": key, "completion_rate": completion_rate(counts.get(key, 0), total)}
            for key in keys
        ]

    # ------------------------------------------------------------------
    # Attention
    # ------------------------------------------------------------------

    async def founders_needing_attention(
        self,
        scope: Scope,
        now: Optional[datetime] = None,
        days: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Visible founders with no metrics record created in the trailing window."""
        cutoff = days_ago(now or utc_now(), days or self.settings.attention_window_days)
        recent = select(FounderMetrics.founder_id).where(FounderMetrics.created_at >= cutoff)
        recent = _scoped(recent, FounderMetrics.founder_id, scope)
        recent_ids = set((await self.session.execute(recent)).scalars().all())
        return [f for f in await self.founders_in_scope(scope) if f["founder_id"] not in recent_ids]

    async def admins_needing_attention(
        self,
        now: Optional[datetime] = None,
        days: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Admins who uploaded nothing in the trailing window.

        Each entry carries the admin's assigned founder count and last upload
        time (None if never); sorted by assigned founder count, highest first.
        """
        cutoff = days_ago(now or utc_now(), days or self.settings.attention_window_days)

        active = await self.session.execute(
            select(distinct(FounderMetrics.uploaded_by)).where(FounderMetrics.created_at >= cutoff)
        )
        active_ids = set(active.scalars().all())

        assigned_counts = (
            select(Assignment.admin_id.label("admin_id"), func.count(Assignment.id).label("assigned"))
            .group_by(Assignment.admin_id)
            .subquery()
        )
        last_uploads = (
            select(
                FounderMetrics.uploaded_by.label("admin_id"),
                func.max(FounderMetrics.created_at).label("last_upload"),
            )
            .group_by(FounderMetrics.uploaded_by)
            .subquery()
        )
        query = (
            select(
                User.id,
                User.name,
                User.email,
                func.coalesce(assigned_counts.c.assigned, 0),
                last_uploads.c.last_upload,
            )
            .outerjoin(assigned_counts, assigned_counts.c.admin_id == User.id)
            .outerjoin(last_uploads, last_uploads.c.admin_id == User.id)
            .where(User.role == UserRole.ADMIN.value)
        )
        admins = [
            {
                "id": row[0],
                "name": row[1],
                "email": row[2],
                "assigned_founders_count": int(row[3]),
                "last_upload_date": row[4],
            }
            for row in (await self.session.execute(query)).all()
            if row[0] not in active_ids
        ]
        admins.sort(key=lambda a: (-a["assigned_founders_count"], a["name"]))
        return admins

    # ------------------------------------------------------------------
    # Milestones and rankings
    # ------------------------------------------------------------------

    async def upcoming_milestones(self, scope: Scope) -> List[Dict[str, Any]]:
        """
        Founders within the milestone window of 100, 500 or 1000 lifetime posts.

        Only the smallest upcoming milestone is reported per founder; closest first.
        """
        query = (
            select(
                FounderMetrics.founder_id,
                User.name,
                FounderProfile.company_name,
                func.sum(FounderMetrics.total_posts),
            )
            .join(User, FounderMetrics.founder_id == User.id)
            .outerjoin(FounderProfile, FounderProfile.user_id == User.id)
            .group_by(FounderMetrics.founder_id, User.name, FounderProfile.company_name)
        )
        query = _scoped(query, FounderMetrics.founder_id, scope)

        window = self.settings.milestone_window
        upcoming = []
        for founder_id, name, company, total in (await self.session.execute(query)).all():
            posts = int(total or 0)
            hit = nearest_milestone(posts, window=window)
            if hit is None:
                continue
            milestone, away = hit
            upcoming.append({
                "founder_id": founder_id,
                "founder_name": name,
                "company_name": company or UNKNOWN,
                "current_posts": posts,
                "milestone": milestone,
                "posts_away": away,
            })
        upcoming.sort(key=lambda m: (m["posts_away"], m["founder_name"]))
        return upcoming

    async def top_performers(self, scope: Scope, month: str, limit: int = 5) -> List[Dict[str, Any]]:
        """Records with the highest impressions in a month."""
        validate_month(month)
        query = (
            select(FounderMetrics, User.name, FounderProfile.company_name, FounderProfile.industry)
            .join(User, FounderMetrics.founder_id == User.id)
            .outerjoin(FounderProfile, FounderProfile.user_id == User.id)
            .where(FounderMetrics.month == month)
            .order_by(desc(FounderMetrics.total_impressions), User.name)
            .limit(limit)
        )
        query = _scoped(query, FounderMetrics.founder_id, scope)
        return [
            {
                "founder_id": record.founder_id,
                "founder_name": name,
                "company_name": company or UNKNOWN,
                "industry": industry or UNKNOWN,
                "impressions": record.total_impressions,
                "formatted_impressions": format_number(record.total_impressions),
                "posts": record.total_posts,
            }
            for record, name, company, industry in (await self.session.execute(query)).all()
        ]

    async def latest_uploads(
        self,
        scope: Scope = None,
        uploaded_by: Optional[uuid.UUID] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Newest metrics records with uploader, founder name and company."""
        founder = aliased(User)
        uploader = aliased(User)
        query = (
            select(FounderMetrics, founder.name, FounderProfile.company_name, uploader.name)
            .join(founder, FounderMetrics.founder_id == founder.id)
            .outerjoin(FounderProfile, FounderProfile.user_id == founder.id)
            .outerjoin(uploader, FounderMetrics.uploaded_by == uploader.id)
            .order_by(desc(FounderMetrics.created_at))
            .limit(limit or self.settings.recent_uploads_limit)
        )
        query = _scoped(query, FounderMetrics.founder_id, scope)
        if uploaded_by is not None:
            query = query.where(FounderMetrics.uploaded_by == uploaded_by)
        return [
            {
                "id": record.id,
                "founder_id": record.founder_id,
                "admin_name": admin_name or UNKNOWN,
                "founder_name": founder_name or UNKNOWN,
                "company_name": company or UNKNOWN,
                "month": record.month,
                "impressions": record.total_impressions,
                "formatted_impressions": format_number(record.total_impressions),
                "timestamp": record.created_at,
            }
            for record, founder_name, company, admin_name in (await self.session.execute(query)).all()
        ]

    # ------------------------------------------------------------------
    # Distributions and comparisons
    # ------------------------------------------------------------------

    async def industry_distribution(self) -> List[Dict[str, Any]]:
        """Founders grouped by industry, largest group first."""
        industry = func.coalesce(func.nullif(FounderProfile.industry, ""), UNKNOWN)
        query = (
            select(industry.label("industry"), func.count(User.id).label("count"))
            .select_from(User)
            .outerjoin(FounderProfile, FounderProfile.user_id == User.id)
            .where(User.role == UserRole.FOUNDER.value)
            .group_by(industry)
        )
        rows = [{"industry": row.industry, "count": int(row.count)} for row in (await self.session.execute(query)).all()]
        rows.sort(key=lambda r: (-r["count"], r["industry"]))
        return rows

    async def admin_upload_activity(
        self,
        months: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Uploads per admin per trailing month."""
        keys = trailing_months(months or self.settings.trend_window_months, now or utc_now())
        admins = await self.session.execute(
            select(User.id, User.name).where(User.role == UserRole.ADMIN.value).order_by(User.name)
        )
        counts_query = (
            select(FounderMetrics.uploaded_by, FounderMetrics.month, func.count(FounderMetrics.id))
            .where(FounderMetrics.month.in_(keys))
            .group_by(FounderMetrics.uploaded_by, FounderMetrics.month)
        )
        counts = {
            (admin_id, month): int(n)
            for admin_id, month, n in (await self.session.execute(counts_query)).all()
        }
        return [
            {
                "admin_id": admin_id,
                "admin_name": name,
                "monthly_activity": [
                    {"month": key, "uploads_count": counts.get((admin_id, key), 0)} for key in keys
                ],
            }
            for admin_id, name in admins.all()
        ]

    async def founder_comparison(self, scope: Scope, month: str) -> List[Dict[str, Any]]:
        """Each visible founder's counters for a month (zeros if missing), by impressions."""
        validate_month(month)
        founders = await self.founders_in_scope(scope)
        query = select(FounderMetrics).where(FounderMetrics.month == month)
        query = _scoped(query, FounderMetrics.founder_id, scope)
        records = {r.founder_id: r for r in (await self.session.execute(query)).scalars().all()}

        comparison = []
        for founder in founders:
            record = records.get(founder["founder_id"])
            comparison.append({
                "founder_id": founder["founder_id"],
                "founder_name": founder["founder_name"],
                "company_name": founder["company_name"],
                "impressions": record.total_impressions if record else 0,
                "engagement": record.total_comment_outreach if record else 0,
                "posts": record.total_posts if record else 0,
            })
        comparison.sort(key=lambda c: (-c["impressions"], c["founder_name"]))
        return comparison

    async def update_frequency(
        self,
        scope: Scope,
        admin_id: uuid.UUID,
        months: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Per visible founder, how many records the admin uploaded in each trailing month."""
        keys = trailing_months(months or self.settings.trend_window_months, now or utc_now())
        founders = await self.founders_in_scope(scope)
        query = (
            select(FounderMetrics.founder_id, FounderMetrics.month, func.count(FounderMetrics.id))
            .where(
                and_(
                    FounderMetrics.uploaded_by == admin_id,
                    FounderMetrics.month.in_(keys),
                )
            )
            .group_by(FounderMetrics.founder_id, FounderMetrics.month)
        )
        query = _scoped(query, FounderMetrics.founder_id, scope)
        counts = {
            (founder_id, month): int(n)
            for founder_id, month, n in (await self.session.execute(query)).all()
        }
        return [
            {
                "founder_id": f["founder_id"],
                "founder_name": f["founder_name"],
                "company_name": f["company_name"],
                "monthly_updates": [
                    {"month": key, "updates_count": counts.get((f["founder_id"], key), 0)} for key in keys
                ],
            }
            for f in founders
        ]

    async def upcoming_deadlines(self, scope: Scope, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Visible founders still missing a record for the current month."""
        now = now or utc_now()
        current = month_key(now)
        query = select(distinct(FounderMetrics.founder_id)).where(FounderMetrics.month == current)
        query = _scoped(query, FounderMetrics.founder_id, scope)
        reported = set((await self.session.execute(query)).scalars().all())
        days_left = days_left_in_month(now)
        return [
            {
                "founder_id": f["founder_id"],
                "founder_name": f["founder_name"],
                "company_name": f["company_name"],
                "month": current,
                "days_left": days_left,
            }
            for f in await self.founders_in_scope(scope)
            if f["founder_id"] not in reported
        ]

    async def average_performance(self, scope: Scope, month: str) -> Dict[str, Any]:
        """Mean impressions and engagement over the month's records."""
        validate_month(month)
        query = select(FounderMetrics.total_impressions, FounderMetrics.total_comment_outreach).where(
            FounderMetrics.month == month
        )
        query = _scoped(query, FounderMetrics.founder_id, scope)
        rows = (await self.session.execute(query)).all()
        impressions = average([r[0] for r in rows])
        engagement = average([r[1] for r in rows])
        return {
            "impressions": impressions,
            "engagement": engagement,
            "formatted_impressions": format_number(impressions),
            "formatted_engagement": format_number(engagement),
        }


