import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.core.db import get_db
from military_assets.core.permissions import Permission, RoleContext
from military_assets.models.enums.role import Role
from military_assets.schemas.common import Page
from military_assets.schemas.users.user_schemas import (
    UserCreateSchema,
    UserOutSchema,
    UserUpdateSchema,
)
from military_assets.services.users.user_service import (
    create_user,
    deactivate_user,
    get_user,
    list_users,
    update_user,
)
from military_assets.utils.check_roles import require_permission
from military_assets.utils.logger import get_logger
from military_assets.utils.pagination import PageParams, page_params
from military_assets.utils.response import APIResponse, success_response

router = APIRouter(prefix="/users", tags=["Users"])
logger = get_logger(__name__)


@router.post("", response_model=APIResponse[UserOutSchema], status_code=status.HTTP_201_CREATED)
async def create_user_api(
    payload: UserCreateSchema,
    db: AsyncSession = Depends(get_db),
    admin: RoleContext = Depends(require_permission(Permission.USER_MANAGE)),
):
    logger.info("Create user request", extra={"username": payload.username})
    user = await create_user(db, payload, admin)
    return success_response("User created successfully", user)


@router.get("", response_model=APIResponse[Page[UserOutSchema]])
async def list_users_api(
    base_id: uuid.UUID | None = Query(None, alias="baseId"),
    role: Role | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    search: str | None = Query(None, max_length=100),
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.USER_VIEW)),
):
    users = await list_users(
        db, current_user, page, base_id=base_id, role=role, is_active=is_active, search=search
    )
    return success_response("Users fetched", users)


@router.get("/{user_id}", response_model=APIResponse[UserOutSchema])
async def get_user_api(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(require_permission(Permission.USER_VIEW)),
):
    return success_response("User fetched", await get_user(db, user_id, current_user))


@router.patch("/{user_id}", response_model=APIResponse[UserOutSchema])
async def update_user_api(
    user_id: uuid.UUID,
    payload: UserUpdateSchema,
    db: AsyncSession = Depends(get_db),
    admin: RoleContext = Depends(require_permission(Permission.USER_MANAGE)),
):
    logger.info("Update user", extra={"user_id": str(user_id)})
    user = await update_user(db, user_id, payload, admin)
    return success_response("User updated successfully", user)


@router.delete("/{user_id}", response_model=APIResponse[UserOutSchema])
async def deactivate_user_api(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: RoleContext = Depends(require_permission(Permission.USER_MANAGE)),
):
    logger.info("Deactivate user", extra={"user_id": str(user_id)})
    user = await deactivate_user(db, user_id, admin)
    return success_response("User deactivated successfully", user)
