import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.core.db import get_db
from military_assets.core.permissions import Permission, RoleContext
from military_assets.schemas.bases.base_schemas import (
    BaseCreateSchema,
    BaseDetailSchema,
    BaseOutSchema,
    BaseUpdateSchema,
    CommanderHandoverOutSchema,
    CommanderHandoverSchema,
)
from military_assets.schemas.common import Page
from military_assets.services.bases.base_service import (
    create_base,
    get_base,
    handover_command,
    list_bases,
    list_handovers,
    set_base_active,
    update_base,
)
from military_assets.utils.check_roles import require_permission
from military_assets.utils.pagination import PageParams, page_params
from military_assets.utils.response import APIResponse, success_response

router = APIRouter(prefix="/bases", tags=["Bases"])


@router.get("", response_model=APIResponse[Page[BaseOutSchema]])
async def list_bases_api(
    is_active: bool | None = Query(None, alias="isActive"),
    search: str | None = Query(None, max_length=100),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    data = await list_bases(db, current_user, page, is_active=is_active, search=search)
    return success_response("Bases fetched", data)


@router.post("", response_model=APIResponse[BaseDetailSchema], status_code=status.HTTP_201_CREATED)
async def create_base_api(
    payload: BaseCreateSchema,
    db: AsyncSession = Depends(get_db),
    admin: RoleContext = Depends(require_permission(Permission.BASE_MANAGE)),
):
    return success_response("Base created", await create_base(db, payload, admin))


@router.get("/{base_id}", response_model=APIResponse[BaseDetailSchema])
async def get_base_api(
    base_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    return success_response("Base fetched", await get_base(db, base_id, current_user))


@router.patch("/{base_id}", response_model=APIResponse[BaseDetailSchema])
async def update_base_api(
    base_id: uuid.UUID,
    payload: BaseUpdateSchema,
    db: AsyncSession = Depends(get_db),
    admin: RoleContext = Depends(require_permission(Permission.BASE_MANAGE)),
):
    return success_response("Base updated", await update_base(db, base_id, payload, admin))


@router.post("/{base_id}/activate", response_model=APIResponse[BaseDetailSchema])
async def activate_base_api(
    base_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: RoleContext = Depends(require_permission(Permission.BASE_MANAGE)),
):
    return success_response("Base activated", await set_base_active(db, base_id, True, admin))


@router.post("/{base_id}/deactivate", response_model=APIResponse[BaseDetailSchema])
async def deactivate_base_api(
    base_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: RoleContext = Depends(require_permission(Permission.BASE_MANAGE)),
):
    return success_response("Base deactivated", await set_base_active(db, base_id, False, admin))


@router.post("/{base_id}/commander-handover", response_model=APIResponse[CommanderHandoverOutSchema])
async def commander_handover_api(
    base_id: uuid.UUID,
    payload: CommanderHandoverSchema,
    db: AsyncSession = Depends(get_db),
    admin: RoleContext = Depends(require_permission(Permission.BASE_MANAGE)),
):
    return success_response("Command handed over", await handover_command(db, base_id, payload, admin))


@router.get("/{base_id}/commander-handovers", response_model=APIResponse[List[CommanderHandoverOutSchema]])
async def list_handovers_api(
    base_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    return success_response("Handover history fetched", await list_handovers(db, base_id, current_user))
