"""
Founder metrics endpoints.
"""

import uuid
from typing import List

from fastapi import APIRouter, status

from contentops.api.deps import CurrentUser, DbSession, PlatformViewer, StaffUser
from contentops.kernel.errors import NotFound
from contentops.kernel.events.activity_logger import ActivityLogger
from contentops.kernel.metrics.metrics_repository import MetricsCounters, MetricsRepository
from contentops.kernel.models.activity_log import ActivityAction
from contentops.kernel.permissions.permission_service import (
    AuthorizationService,
    Resource,
    ResourceClass,
)
from contentops.schemas.common import SuccessResponse
from contentops.schemas.metrics import MetricsResponse, MetricsUpload

router = APIRouter()


@router.post("", response_model=MetricsResponse, status_code=status.HTTP_201_CREATED)
async def upload_metrics(data: MetricsUpload, user: StaffUser, db: DbSession):
    """
    Upload a founder's counters for a month.

    Re-uploading the same month overwrites the existing record in place.
    Admins may only upload for founders assigned to them.
    """
    await AuthorizationService(db).authorize(
        user, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=data.founder_id)
    )
    record = await MetricsRepository(db).upsert_monthly(
        founder_id=data.founder_id,
        month=data.month,
        counters=MetricsCounters(
            total_posts=data.total_posts,
            total_impressions=data.total_impressions,
            total_comment_outreach=data.total_comment_outreach,
            notes=data.notes,
        ),
        uploaded_by=user.id,
    )
    await ActivityLogger(db).record(
        actor_id=user.id,
        role=user.role,
        action=ActivityAction.METRICS_UPLOADED,
        metadata={"metrics_id": record.id, "founder_id": record.founder_id, "month": record.month},
    )
    return MetricsResponse.model_validate(record)


@router.get("", response_model=List[MetricsResponse])
async def list_all_metrics(user: PlatformViewer, db: DbSession):
    """Every metrics record (super-admin only)."""
    records = await MetricsRepository(db).get_all()
    return [MetricsResponse.model_validate(r) for r in records]


@router.get("/admin", response_model=List[MetricsResponse])
async def list_visible_metrics(user: StaffUser, db: DbSession):
    """Records for every founder the caller can see."""
    scope = await AuthorizationService(db).visible_founder_ids(user)
    repo = MetricsRepository(db)
    records = await repo.get_all() if scope is None else await repo.get_for_founders(scope)
    return [MetricsResponse.model_validate(r) for r in records]


@router.get("/founders/{founder_id}", response_model=List[MetricsResponse])
async def list_founder_metrics(founder_id: uuid.UUID, user: CurrentUser, db: DbSession):
    """A founder's records, newest month first."""
    await AuthorizationService(db).authorize(
        user, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=founder_id)
    )
    records = await MetricsRepository(db).get_by_founder(founder_id)
    return [MetricsResponse.model_validate(r) for r in records]


@router.get("/founders/{founder_id}/{month}", response_model=MetricsResponse)
async def get_founder_month(founder_id: uuid.UUID, month: str, user: CurrentUser, db: DbSession):
    """A founder's record for one YYYY-MM month."""
    await AuthorizationService(db).authorize(
        user, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=founder_id)
    )
    record = await MetricsRepository(db).get_by_founder_month(founder_id, month)
    if record is None:
        raise NotFound("No metrics found for this month", {"founder_id": str(founder_id), "month": month})
    return MetricsResponse.model_validate(record)


@router.delete("/{metrics_id}", response_model=SuccessResponse)
async def delete_metrics(metrics_id: uuid.UUID, user: StaffUser, db: DbSession):
    """
    Delete a record. Admins may only delete records they uploaded.
    """
    repo = MetricsRepository(db)
    record = await repo.get_by_id(metrics_id)
    if record is None:
        raise NotFound("Metrics not found", {"metrics_id": str(metrics_id)})
    AuthorizationService(db).authorize_metrics_delete(user, record)

    await repo.delete_by_id(metrics_id)
    await ActivityLogger(db).record(
        actor_id=user.id,
        role=user.role,
        action=ActivityAction.METRICS_DELETED,
        metadata={"metrics_id": metrics_id, "founder_id": record.founder_id, "month": record.month},
    )
    return SuccessResponse(message="Metrics deleted")
