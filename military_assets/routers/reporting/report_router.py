import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.constants.movement_type import MovementType
from military_assets.core.db import get_db
from military_assets.core.permissions import Permission, RoleContext
from military_assets.schemas.common import Page
from military_assets.schemas.inventory.balance_schemas import (
    AssetBalanceOutSchema,
    AssetMovementOutSchema,
)
from military_assets.schemas.reporting.dashboard_schemas import DashboardSchema
from military_assets.services.reporting.report_service import (
    get_dashboard,
    list_balances,
    list_movements,
)
from military_assets.utils.check_roles import require_permission
from military_assets.utils.pagination import PageParams, page_params
from military_assets.utils.response import APIResponse, success_response

router = APIRouter(tags=["Reporting"])


@router.get("/balances", response_model=APIResponse[Page[AssetBalanceOutSchema]])
async def list_balances_api(
    base_id: uuid.UUID | None = Query(None, alias="baseId"),
    asset_type_id: uuid.UUID | None = Query(None, alias="assetTypeId"),
    category: str | None = Query(None, max_length=100),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    data = await list_balances(
        db, current_user, page, base_id=base_id, asset_type_id=asset_type_id, category=category
    )
    return success_response("Balances fetched", data)


@router.get("/movements", response_model=APIResponse[Page[AssetMovementOutSchema]])
async def list_movements_api(
    base_id: uuid.UUID | None = Query(None, alias="baseId"),
    asset_type_id: uuid.UUID | None = Query(None, alias="assetTypeId"),
    movement_type: MovementType | None = Query(None, alias="movementType"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    data = await list_movements(
        db,
        current_user,
        page,
        base_id=base_id,
        asset_type_id=asset_type_id,
        movement_type=movement_type,
        start_date=start_date,
        end_date=end_date,
    )
    return success_response("Movements fetched", data)


@router.get("/dashboard/metrics", response_model=APIResponse[DashboardSchema])
async def dashboard_metrics_api(
    base_id: uuid.UUID | None = Query(None, alias="baseId"),
    asset_type_id: uuid.UUID | None = Query(None, alias="assetTypeId"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    data = await get_dashboard(
        db,
        current_user,
        base_id=base_id,
        asset_type_id=asset_type_id,
        start_date=start_date,
        end_date=end_date,
    )
    return success_response("Dashboard metrics fetched", data)
