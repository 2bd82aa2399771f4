"""
Super-admin dashboard endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter

from contentops.api.deps import PlatformViewer, SessionFactoryDep
from contentops.engines.dashboard import SuperAdminDashboard
from contentops.schemas.dashboard import DashboardEnvelope

router = APIRouter()


@router.get("/stats")
async def get_stats(user: PlatformViewer, session_factory: SessionFactoryDep) -> Dict[str, Any]:
    return await SuperAdminDashboard(session_factory).stats()


@router.get("/activities")
async def get_activities(user: PlatformViewer, session_factory: SessionFactoryDep) -> Dict[str, Any]:
    return await SuperAdminDashboard(session_factory).activities()


@router.get("/graphs")
async def get_graphs(user: PlatformViewer, session_factory: SessionFactoryDep) -> Dict[str, Any]:
    return await SuperAdminDashboard(session_factory).graphs()


@router.get("/all", response_model=DashboardEnvelope)
async def get_all(user: PlatformViewer, session_factory: SessionFactoryDep):
    """Stats, activities and graphs in one response, computed concurrently."""
    return await SuperAdminDashboard(session_factory).compose()
