"""
Dashboard envelopes.

Section contents are produced by the dashboard composers and passed through
as plain dictionaries.
"""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel


class DashboardEnvelope(BaseModel):
    """All three sections computed against one instant."""

    month: str
    generated_at: datetime
    stats: Dict[str, Any]
    activities: Dict[str, Any]
    graphs: Dict[str, Any]
