"""
Analytics Aggregation Engine - scoped trend, growth, completion and milestone metrics.
"""

from contentops.engines.analytics.engine import AnalyticsEngine, Scope
from contentops.engines.analytics.formatting import format_number
from contentops.engines.analytics.periods import (
    completion_rate,
    days_left_in_month,
    growth_percent,
    month_key,
    nearest_milestone,
    previous_month,
    round_half_up,
    trailing_months,
    validate_month,
)

__all__ = [
    "AnalyticsEngine",
    "Scope",
    "completion_rate",
    "days_left_in_month",
    "format_number",
    "growth_percent",
    "month_key",
    "nearest_milestone",
    "previous_month",
    "round_half_up",
    "trailing_months",
    "validate_month",
]
