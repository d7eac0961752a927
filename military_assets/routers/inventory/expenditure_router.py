import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.core.db import get_db
from military_assets.core.permissions import Permission, RoleContext
from military_assets.schemas.common import Page
from military_assets.schemas.inventory.expenditure_schemas import (
    ExpenditureCreateSchema,
    ExpenditureOutSchema,
)
from military_assets.services.inventory.expenditure_service import (
    create_expenditure,
    get_expenditure,
    list_expenditures,
)
from military_assets.utils.check_roles import require_permission
from military_assets.utils.pagination import PageParams, page_params
from military_assets.utils.response import APIResponse, success_response

router = APIRouter(prefix="/expenditures", tags=["Expenditures"])


@router.post("", response_model=APIResponse[ExpenditureOutSchema], status_code=status.HTTP_201_CREATED)
async def create_expenditure_api(
    payload: ExpenditureCreateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.EXPENDITURE_WRITE)),
):
    return success_response("Expenditure recorded", await create_expenditure(db, payload, current_user))


@router.get("", response_model=APIResponse[Page[ExpenditureOutSchema]])
async def list_expenditures_api(
    base_id: uuid.UUID | None = Query(None, alias="baseId"),
    asset_type_id: uuid.UUID | None = Query(None, alias="assetTypeId"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    data = await list_expenditures(
        db,
        current_user,
        page,
        base_id=base_id,
        asset_type_id=asset_type_id,
        start_date=start_date,
        end_date=end_date,
    )
    return success_response("Expenditures fetched", data)


@router.get("/{expenditure_id}", response_model=APIResponse[ExpenditureOutSchema])
async def get_expenditure_api(
    expenditure_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.LEDGER_READ)),
):
    return success_response("Expenditure fetched", await get_expenditure(db, expenditure_id, current_user))
