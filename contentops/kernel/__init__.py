"""
Kernel Layer

Foundational components the analytics engines build on:
- Identity Core (user accounts, role-tagged profiles)
- Assignment Graph Store (admin <-> founder edges, replaced atomically)
- Permission Core (relationship-scoped authorization decisions)
- Metrics Repository (one record per founder and month)
- Activity Log (append-only)

Invariants:
- Only AssignmentStore mutates assignment edges
- Authorization is re-evaluated on every request; nothing is cached
- Activity log rows are never updated or deleted
"""

from contentops.kernel.models import (
    User,
    UserRole,
    FounderProfile,
    AdminProfile,
    Assignment,
    FounderMetrics,
    Post,
    PostStatus,
    ActivityLog,
    ActivityAction,
)

__all__ = [
    # User & Identity
    "User",
    "UserRole",
    "FounderProfile",
    "AdminProfile",
    # Assignment graph
    "Assignment",
    # Metrics
    "FounderMetrics",
    # Posts
    "Post",
    "PostStatus",
    # Activity
    "ActivityLog",
    "ActivityAction",
]
