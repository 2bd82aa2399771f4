"""
Dashboard Composers - super-admin and admin views.
"""

from contentops.engines.dashboard.admin import AdminDashboard
from contentops.engines.dashboard.base import DashboardComposer
from contentops.engines.dashboard.super_admin import SuperAdminDashboard

__all__ = [
    "AdminDashboard",
    "DashboardComposer",
    "SuperAdminDashboard",
]
