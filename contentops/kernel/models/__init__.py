"""
Kernel Data Models

Core SQLAlchemy models: identity, the assignment graph, monthly metrics and reports,
posts and the activity log.
"""

from contentops.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow
from contentops.kernel.models.user import User, UserRole, FounderProfile, AdminProfile
from contentops.kernel.models.assignment import Assignment
from contentops.kernel.models.metrics import FounderMetrics
from contentops.kernel.models.report import FounderReport
from contentops.kernel.models.post import Post, PostStatus
from contentops.kernel.models.activity_log import ActivityLog, ActivityAction

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    # User
    "User",
    "UserRole",
    "FounderProfile",
    "AdminProfile",
    # Assignment graph
    "Assignment",
    # Metrics
    "FounderMetrics",
    # Reports
    "FounderReport",
    # Posts
    "Post",
    "PostStatus",
    # Activity
    "ActivityLog",
    "ActivityAction",
]
