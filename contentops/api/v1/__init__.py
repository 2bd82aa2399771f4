"""
API v1 routes.
"""

from fastapi import APIRouter

from contentops.api.v1 import admin_dashboard, assignments, auth, dashboard, metrics, posts, reports, uploads

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])
router.include_router(metrics.router, prefix="/metrics", tags=["Metrics"])
router.include_router(reports.router, prefix="/reports", tags=["Reports"])
router.include_router(posts.router, prefix="/posts", tags=["Posts"])
router.include_router(uploads.router, prefix="/uploads", tags=["Uploads"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
router.include_router(admin_dashboard.router, prefix="/admin-dashboard", tags=["Admin Dashboard"])
