"""
Calendar and percentage helpers for analytics.

Month keys are "YYYY-MM" strings. All functions are pure; callers pass `now`
so a whole dashboard is computed against one instant.
"""

import calendar
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence, Tuple, Union

from contentops.kernel.metrics.months import validate_month

MILESTONES: Tuple[int, ...] = (100, 500, 1000)
MILESTONE_WINDOW = 10

Number = Union[int, float, Decimal]


def round_half_up(value: Number, digits: int = 0) -> Number:
    """Round with ties away from zero (Python's round() uses banker's rounding)."""
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if digits == 0 else float(rounded)


def _parse(month: str) -> Tuple[int, int]:
    validate_month(month)
    year, mon = month.split("-")
    return int(year), int(mon)


def month_key(dt: datetime) -> str:
    """The YYYY-MM key of a datetime."""
    return f"{dt.year:04d}-{dt.month:02d}"


def previous_month(key: str) -> str:
    """The month before key."""
    year, mon = _parse(key)
    if mon == 1:
        return f"{year - 1:04d}-12"
    return f"{year:04d}-{mon - 1:02d}"


def trailing_months(n: int, now: Optional[datetime] = None) -> List[str]:
    """The last n month keys, oldest first, ending with the month of now."""
    key = month_key(now or utc_now())
    months = [key]
    for _ in range(n - 1):
        key = previous_month(key)
        months.append(key)
    months.reverse()
    return months


def month_start(key: str) -> datetime:
    """First instant of a month in UTC."""
    year, mon = _parse(key)
    return datetime(year, mon, 1, tzinfo=timezone.utc)


def month_end(key: str) -> datetime:
    """First instant of the following month in UTC (exclusive bound)."""
    year, mon = _parse(key)
    if mon == 12:
        return datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    return datetime(year, mon + 1, 1, tzinfo=timezone.utc)


def days_left_in_month(now: Optional[datetime] = None) -> int:
    """Days remaining after today in the month of now (0 on the last day)."""
    now = now or utc_now()
    last_day = calendar.monthrange(now.year, now.month)[1]
    return last_day - now.day


def days_ago(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def growth_percent(current: Number, previous: Number) -> int:
    """
    Month-over-month growth, rounded to a whole percent.

    growth_percent(120, 100) == 20; a zero or missing previous value yields 0.
    """
    if not previous or previous <= 0:
        return 0
    return round_half_up((Decimal(str(current)) - Decimal(str(previous))) / Decimal(str(previous)) * 100)


def percentage(part: Number, total: Number) -> int:
    """part / total as a whole percent; 0 when total is 0."""
    if not total:
        return 0
    return round_half_up(Decimal(str(part)) / Decimal(str(total)) * 100)


def completion_rate(with_record: int, total: int) -> int:
    """Share of founders with a metrics record; 0 for an empty scope."""
    return percentage(with_record, total)


def average(values: Sequence[Number]) -> int:
    """Mean rounded half-up; 0 for no values."""
    if not values:
        return 0
    return round_half_up(Decimal(str(sum(values))) / len(values))


def mean_of(total: Number, count: int) -> int:
    """total / count rounded half-up; 0 when count is 0."""
    if not count:
        return 0
    return round_half_up(Decimal(str(total)) / count)


def nearest_milestone(
    lifetime_posts: int,
    milestones: Sequence[int] = MILESTONES,
    window: int = MILESTONE_WINDOW,
) -> Optional[Tuple[int, int]]:
    """
    The smallest milestone the founder is about to reach.

    A milestone counts only when milestone - window < posts < milestone,
    so a founder is at most window - 1 posts away.

    Returns:
        (milestone, posts_away) or None
    """
    for milestone in sorted(milestones):
        if milestone - window < lifetime_posts < milestone:
            return milestone, milestone - lifetime_posts
    return None
