"""
Admin dashboard endpoints, scoped to the caller's assigned founders.
"""

from typing import Any, Dict

from fastapi import APIRouter

from contentops.api.deps import DashboardAdmin, SessionFactoryDep
from contentops.engines.dashboard import AdminDashboard
from contentops.schemas.dashboard import DashboardEnvelope

router = APIRouter()


@router.get("/stats")
async def get_stats(user: DashboardAdmin, session_factory: SessionFactoryDep) -> Dict[str, Any]:
    return await AdminDashboard(user.id, session_factory).stats()


@router.get("/activities")
async def get_activities(user: DashboardAdmin, session_factory: SessionFactoryDep) -> Dict[str, Any]:
    return await AdminDashboard(user.id, session_factory).activities()


@router.get("/graphs")
async def get_graphs(user: DashboardAdmin, session_factory: SessionFactoryDep) -> Dict[str, Any]:
    return await AdminDashboard(user.id, session_factory).graphs()


@router.get("/all", response_model=DashboardEnvelope)
async def get_all(user: DashboardAdmin, session_factory: SessionFactoryDep):
    """Stats, activities and graphs in one response, computed concurrently."""
    return await AdminDashboard(user.id, session_factory).compose()
