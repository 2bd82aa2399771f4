"""
Admin-founder assignment endpoints.
"""

import uuid
from typing import List

from fastapi import APIRouter, Query, status

from contentops.api.deps import CurrentUser, DbSession, SessionFactoryDep, UserManager
from contentops.database import unit_of_work
from contentops.kernel.assignments.assignment_store import AssignmentStore
from contentops.kernel.errors import Forbidden
from contentops.kernel.events.activity_logger import ActivityLogger
from contentops.kernel.models.activity_log import ActivityAction
from contentops.kernel.models.user import UserRole
from contentops.schemas.assignment import (
    AssignedAdmin,
    AssignedFounder,
    AssignmentReplace,
    AssignmentResponse,
)
from contentops.schemas.common import SuccessResponse

router = APIRouter()


@router.put("", response_model=List[AssignmentResponse])
async def replace_assignments(data: AssignmentReplace, user: UserManager, session_factory: SessionFactoryDep):
    """
    Replace the founder's full admin set. An empty list unassigns everyone.

    Runs in its own write-locked transaction so concurrent replacements for
    one founder queue instead of failing.
    """
    async with unit_of_work(session_factory, write_lock=True) as session:
        edges = await AssignmentStore(session).replace_assignments(
            founder_id=data.founder_id,
            admin_ids=data.admin_ids,
            assigned_by=user.id,
        )
        await ActivityLogger(session).record(
            actor_id=user.id,
            role=user.role,
            action=ActivityAction.ASSIGNMENTS_REPLACED,
            metadata={"founder_id": data.founder_id, "admin_ids": [e.admin_id for e in edges]},
        )
    return [AssignmentResponse.model_validate(e) for e in edges]


@router.get("/founders/{founder_id}/admins", response_model=List[AssignedAdmin])
async def list_admins_for_founder(founder_id: uuid.UUID, user: UserManager, db: DbSession):
    """Admins currently assigned to a founder."""
    return await AssignmentStore(db).list_admins_for_founder(founder_id)


@router.get("/admins/{admin_id}/founders", response_model=List[AssignedFounder])
async def list_founders_for_admin(
    admin_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
    include_counts: bool = Query(False),
):
    """
    Founders assigned to an admin, optionally with post counts.

    Super-admins may list any admin; admins only themselves.
    """
    if user.role != UserRole.SUPER_ADMIN and user.id != admin_id:
        raise Forbidden("You can only list your own assigned founders")
    return await AssignmentStore(db).list_founders_for_admin(admin_id, include_counts=include_counts)


@router.delete(
    "/admins/{admin_id}/founders/{founder_id}",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_assignment(
    admin_id: uuid.UUID,
    founder_id: uuid.UUID,
    user: UserManager,
    db: DbSession,
):
    """Remove a single admin-founder edge."""
    await AssignmentStore(db).delete_assignment(admin_id, founder_id)
    await ActivityLogger(db).record(
        actor_id=user.id,
        role=user.role,
        action=ActivityAction.ASSIGNMENT_DELETED,
        metadata={"admin_id": admin_id, "founder_id": founder_id},
    )
    return SuccessResponse(message="Assignment deleted")
