import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.core.db import get_db
from military_assets.core.permissions import Permission, RoleContext
from military_assets.models.enums.transfer_status import TransferStatus
from military_assets.schemas.common import Page
from military_assets.schemas.inventory.transfer_schemas import (
    TransferCreateSchema,
    TransferOutSchema,
    TransferUpdateSchema,
)
from military_assets.services.inventory.transfer_service import (
    create_transfer,
    get_transfer,
    list_transfers,
    update_transfer_status,
)
from military_assets.utils.check_roles import require_permission
from military_assets.utils.pagination import PageParams, page_params
from military_assets.utils.response import APIResponse, success_response

router = APIRouter(prefix="/transfers", tags=["Transfers"])


@router.post("", response_model=APIResponse[TransferOutSchema], status_code=status.HTTP_201_CREATED)
async def create_transfer_api(
    payload: TransferCreateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.TRANSFER_WRITE)),
):
    return success_response("Transfer created", await create_transfer(db, payload, current_user))


@router.put("/{transfer_id}", response_model=APIResponse[TransferOutSchema])
async def update_transfer_api(
    transfer_id: uuid.UUID,
    payload: TransferUpdateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.TRANSFER_WRITE)),
):
    transfer = await update_transfer_status(db, transfer_id, payload, current_user)
    return success_response("Transfer updated", transfer)


@router.get("", response_model=APIResponse[Page[TransferOutSchema]])
async def list_transfers_api(
    base_id: uuid.UUID | None = Query(None, alias="baseId"),
    asset_type_id: uuid.UUID | None = Query(None, alias="assetTypeId"),
    status_filter: TransferStatus | None = Query(None, alias="status"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    data = await list_transfers(
        db,
        current_user,
        page,
        base_id=base_id,
        asset_type_id=asset_type_id,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
    )
    return success_response("Transfers fetched", data)


@router.get("/{transfer_id}", response_model=APIResponse[TransferOutSchema])
async def get_transfer_api(
    transfer_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    return success_response("Transfer fetched", await get_transfer(db, transfer_id, current_user))
