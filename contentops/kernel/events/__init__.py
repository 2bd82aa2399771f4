"""
Activity logging.

Append-only record of every mutation, read by recent-activity views.
"""

from contentops.kernel.events.activity_logger import ActivityLogger
from contentops.kernel.models.activity_log import ActivityAction

__all__ = [
    "ActivityLogger",
    "ActivityAction",
]
