import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.core.db import get_db
from military_assets.core.permissions import Permission, RoleContext
from military_assets.models.enums.assignment_status import AssignmentStatus
from military_assets.schemas.assignments.assignment_schemas import (
    AssignmentCreateSchema,
    AssignmentOutSchema,
    AssignmentUpdateSchema,
)
from military_assets.schemas.common import Page
from military_assets.services.assignments.assignment_service import (
    create_assignment,
    get_assignment,
    list_assignments,
    update_assignment_status,
)
from military_assets.utils.check_roles import require_permission
from military_assets.utils.pagination import PageParams, page_params
from military_assets.utils.response import APIResponse, success_response

router = APIRouter(prefix="/assignments", tags=["Assignments"])


@router.post("", response_model=APIResponse[AssignmentOutSchema], status_code=status.HTTP_201_CREATED)
async def create_assignment_api(
    payload: AssignmentCreateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.ASSIGNMENT_WRITE)),
):
    return success_response("Asset assigned", await create_assignment(db, payload, current_user))


@router.put("/{assignment_id}", response_model=APIResponse[AssignmentOutSchema])
async def update_assignment_api(
    assignment_id: uuid.UUID,
    payload: AssignmentUpdateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.ASSIGNMENT_WRITE)),
):
    assignment = await update_assignment_status(db, assignment_id, payload, current_user)
    return success_response("Assignment updated", assignment)


@router.get("", response_model=APIResponse[Page[AssignmentOutSchema]])
async def list_assignments_api(
    base_id: uuid.UUID | None = Query(None, alias="baseId"),
    status_filter: AssignmentStatus | None = Query(None, alias="status"),
    asset_id: uuid.UUID | None = Query(None, alias="assetId"),
    assigned_to_user_id: uuid.UUID | None = Query(None, alias="assignedToUserId"),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    data = await list_assignments(
        db,
        current_user,
        page,
        base_id=base_id,
        status=status_filter,
        asset_id=asset_id,
        assigned_to_user_id=assigned_to_user_id,
    )
    return success_response("Assignments fetched", data)


@router.get("/{assignment_id}", response_model=APIResponse[AssignmentOutSchema])
async def get_assignment_api(
    assignment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    return success_response("Assignment fetched", await get_assignment(db, assignment_id, current_user))
