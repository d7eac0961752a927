import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.core.db import get_db
from military_assets.core.permissions import Permission
from military_assets.schemas.auth.activity_schemas import UserActivityOut
from military_assets.schemas.common import Page
from military_assets.services.auth.activity_service import list_user_activities
from military_assets.utils.check_roles import require_permission
from military_assets.utils.pagination import PageParams, page_params
from military_assets.utils.response import APIResponse, success_response

router = APIRouter(prefix="/activities", tags=["User Activities"])


@router.get("", response_model=APIResponse[Page[UserActivityOut]])
async def list_activities_api(
    user_id: uuid.UUID | None = Query(None, alias="userId"),
    code: str | None = Query(None, max_length=64),
    search: str | None = Query(None, max_length=100),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    _=Depends(require_permission(Permission.ACTIVITY_VIEW)),
):
    data = await list_user_activities(db, page, user_id=user_id, code=code, search=search)
    return success_response("User activities fetched", data)
