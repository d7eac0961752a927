import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.core.db import get_db
from military_assets.core.permissions import Permission, RoleContext
from military_assets.schemas.assets.asset_type_schemas import (
    AssetTypeCreateSchema,
    AssetTypeOutSchema,
    AssetTypeUpdateSchema,
)
from military_assets.schemas.common import Page
from military_assets.services.assets.asset_type_service import (
    create_asset_type,
    get_asset_type,
    list_asset_types,
    update_asset_type,
)
from military_assets.utils.check_roles import require_permission
from military_assets.utils.pagination import PageParams, page_params
from military_assets.utils.response import APIResponse, success_response

router = APIRouter(prefix="/asset-types", tags=["Asset Types"])


@router.get("", response_model=APIResponse[Page[AssetTypeOutSchema]])
async def list_asset_types_api(
    category: str | None = Query(None, max_length=100),
    is_active: bool | None = Query(None, alias="isActive"),
    search: str | None = Query(None, max_length=100),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    _: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    data = await list_asset_types(db, page, category=category, is_active=is_active, search=search)
    return success_response("Asset types fetched", data)


@router.post("", response_model=APIResponse[AssetTypeOutSchema], status_code=status.HTTP_201_CREATED)
async def create_asset_type_api(
    payload: AssetTypeCreateSchema,
    db: AsyncSession = Depends(get_db),
    admin: RoleContext = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    return success_response("Asset type created", await create_asset_type(db, payload, admin))


@router.get("/{asset_type_id}", response_model=APIResponse[AssetTypeOutSchema])
async def get_asset_type_api(
    asset_type_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    return success_response("Asset type fetched", await get_asset_type(db, asset_type_id))


@router.patch("/{asset_type_id}", response_model=APIResponse[AssetTypeOutSchema])
async def update_asset_type_api(
    asset_type_id: uuid.UUID,
    payload: AssetTypeUpdateSchema,
    db: AsyncSession = Depends(get_db),
    admin: RoleContext = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    return success_response("Asset type updated", await update_asset_type(db, asset_type_id, payload, admin))
