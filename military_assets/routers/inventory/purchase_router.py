import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.core.db import get_db
from military_assets.core.permissions import Permission, RoleContext
from military_assets.schemas.common import Page
from military_assets.schemas.inventory.purchase_schemas import (
    PurchaseCreateSchema,
    PurchaseOutSchema,
)
from military_assets.services.inventory.purchase_service import (
    create_purchase,
    get_purchase,
    list_purchases,
)
from military_assets.utils.check_roles import require_permission
from military_assets.utils.pagination import PageParams, page_params
from military_assets.utils.response import APIResponse, success_response

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.post("", response_model=APIResponse[PurchaseOutSchema], status_code=status.HTTP_201_CREATED)
async def create_purchase_api(
    payload: PurchaseCreateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.PURCHASE_WRITE)),
):
    return success_response("Purchase recorded", await create_purchase(db, payload, current_user))


@router.get("", response_model=APIResponse[Page[PurchaseOutSchema]])
async def list_purchases_api(
    base_id: uuid.UUID | None = Query(None, alias="baseId"),
    asset_type_id: uuid.UUID | None = Query(None, alias="assetTypeId"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    data = await list_purchases(
        db,
        current_user,
        page,
        base_id=base_id,
        asset_type_id=asset_type_id,
        start_date=start_date,
        end_date=end_date,
    )
    return success_response("Purchases fetched", data)


@router.get("/{purchase_id}", response_model=APIResponse[PurchaseOutSchema])
async def get_purchase_api(
    purchase_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    return success_response("Purchase fetched", await get_purchase(db, purchase_id, current_user))
