import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.core.db import get_db
from military_assets.core.permissions import Permission, RoleContext
from military_assets.models.enums.asset_status import AssetCondition, AssetStatus
from military_assets.schemas.assets.asset_schemas import (
    AssetCreateSchema,
    AssetDetailSchema,
    AssetOutSchema,
    AssetUpdateSchema,
)
from military_assets.schemas.common import Page
from military_assets.services.assets.asset_service import (
    get_asset,
    list_assets,
    register_asset,
    update_asset,
)
from military_assets.utils.check_roles import require_permission
from military_assets.utils.pagination import PageParams, page_params
from military_assets.utils.response import APIResponse, success_response

router = APIRouter(prefix="/assets", tags=["Assets"])


@router.get("", response_model=APIResponse[Page[AssetOutSchema]])
async def list_assets_api(
    base_id: uuid.UUID | None = Query(None, alias="baseId"),
    asset_type_id: uuid.UUID | None = Query(None, alias="assetTypeId"),
    status_filter: AssetStatus | None = Query(None, alias="status"),
    condition: AssetCondition | None = Query(None),
    search: str | None = Query(None, max_length=100),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    data = await list_assets(
        db,
        current_user,
        page,
        base_id=base_id,
        asset_type_id=asset_type_id,
        status=status_filter,
        condition=condition,
        search=search,
    )
    return success_response("Assets fetched", data)


@router.post("", response_model=APIResponse[AssetDetailSchema], status_code=status.HTTP_201_CREATED)
async def register_asset_api(
    payload: AssetCreateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.ASSET_WRITE)),
):
    return success_response("Asset registered", await register_asset(db, payload, current_user))


@router.get("/{asset_id}", response_model=APIResponse[AssetDetailSchema])
async def get_asset_api(
    asset_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    return success_response("Asset fetched", await get_asset(db, asset_id, current_user))


@router.patch("/{asset_id}", response_model=APIResponse[AssetDetailSchema])
async def update_asset_api(
    asset_id: uuid.UUID,
    payload: AssetUpdateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.ASSET_WRITE)),
):
    return success_response("Asset updated", await update_asset(db, asset_id, payload, current_user))
