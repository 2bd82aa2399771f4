"""
Founder report endpoints.
"""

import base64
import binascii
import uuid
from typing import List

from fastapi import APIRouter, status

from contentops.api.deps import CurrentUser, DbSession, PlatformViewer, StaffUser, Storage
from contentops.kernel.errors import InvalidFormat, NotFound
from contentops.kernel.events.activity_logger import ActivityLogger
from contentops.kernel.models.activity_log import ActivityAction
from contentops.kernel.permissions.permission_service import (
    AuthorizationService,
    Resource,
    ResourceClass,
)
from contentops.kernel.reports.report_repository import ReportRepository
from contentops.schemas.common import SuccessResponse
from contentops.schemas.report import ReportResponse, ReportUpload

router = APIRouter()


@router.post("/founders/{founder_id}", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def upload_report(
    founder_id: uuid.UUID,
    data: ReportUpload,
    user: StaffUser,
    db: DbSession,
    storage: Storage,
):
    """
    Upload a founder's PDF report for a month.

    Admins may only upload for founders assigned to them.
    """
    await AuthorizationService(db).authorize(
        user, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=founder_id)
    )
    try:
        blob = base64.b64decode(data.data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidFormat("Report data must be base64 encoded") from exc

    record = await ReportRepository(db, storage).upload(
        founder_id=founder_id,
        month=data.month,
        data=blob,
        content_type=data.content_type,
        uploaded_by=user.id,
    )
    await ActivityLogger(db).record(
        actor_id=user.id,
        role=user.role,
        action=ActivityAction.REPORT_UPLOADED,
        metadata={
            "report_id": record.id,
            "founder_id": founder_id,
            "month": record.month,
            "filename": data.filename,
        },
    )
    return ReportResponse.model_validate(record)


@router.get("", response_model=List[ReportResponse])
async def list_all_reports(user: PlatformViewer, db: DbSession, storage: Storage):
    """Every report (super-admin only)."""
    records = await ReportRepository(db, storage).get_all()
    return [ReportResponse.model_validate(r) for r in records]


@router.get("/admin", response_model=List[ReportResponse])
async def list_visible_reports(user: StaffUser, db: DbSession, storage: Storage):
    """Reports for every founder the caller can see."""
    scope = await AuthorizationService(db).visible_founder_ids(user)
    repo = ReportRepository(db, storage)
    records = await repo.get_all() if scope is None else await repo.get_for_founders(scope)
    return [ReportResponse.model_validate(r) for r in records]


@router.get("/founders/{founder_id}", response_model=List[ReportResponse])
async def list_founder_reports(founder_id: uuid.UUID, user: CurrentUser, db: DbSession, storage: Storage):
    await AuthorizationService(db).authorize(
        user, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=founder_id)
    )
    records = await ReportRepository(db, storage).get_by_founder(founder_id)
    return [ReportResponse.model_validate(r) for r in records]


@router.get("/founders/{founder_id}/{month}", response_model=ReportResponse)
async def get_founder_month_report(
    founder_id: uuid.UUID,
    month: str,
    user: CurrentUser,
    db: DbSession,
    storage: Storage,
):
    await AuthorizationService(db).authorize(
        user, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=founder_id)
    )
    record = await ReportRepository(db, storage).get_by_founder_month(founder_id, month)
    if record is None:
        raise NotFound("No report found for this month", {"founder_id": str(founder_id), "month": month})
    return ReportResponse.model_validate(record)


@router.delete("/{report_id}", response_model=SuccessResponse)
async def delete_report(report_id: uuid.UUID, user: StaffUser, db: DbSession, storage: Storage):
    """
    Delete a report and its file. Admins may only delete reports they uploaded.
    """
    repo = ReportRepository(db, storage)
    record = await repo.get_by_id(report_id)
    if record is None:
        raise NotFound("Report not found", {"report_id": str(report_id)})
    AuthorizationService(db).authorize_report_delete(user, record)

    await repo.delete_by_id(report_id)
    await ActivityLogger(db).record(
        actor_id=user.id,
        role=user.role,
        action=ActivityAction.REPORT_DELETED,
        metadata={"report_id": report_id, "founder_id": record.founder_id, "month": record.month},
    )
    return SuccessResponse(message="Report deleted")
