from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.core.db import get_db
from military_assets.core.permissions import RoleContext
from military_assets.schemas.auth.auth_schemas import (
    LoginRequest,
    LoginResponseData,
    ProfileSchema,
    RefreshRequest,
    TokenSchema,
)
from military_assets.services.auth.auth_service import (
    get_profile,
    login_user,
    logout_user,
    refresh_tokens,
)
from military_assets.utils.get_user import get_current_user
from military_assets.utils.logger import get_logger
from military_assets.utils.response import APIResponse, success_response

logger = get_logger("auth.router")

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=APIResponse[LoginResponseData])
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Login attempt", extra={"username": payload.username})
    data = await login_user(db, payload.username, payload.password)
    return success_response("Login successful", data)


@router.post("/refresh", response_model=APIResponse[TokenSchema])
async def refresh(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Token refresh attempt")
    tokens = await refresh_tokens(db, payload.refresh_token)
    return success_response("Token refreshed", tokens)


@router.post("/logout")
async def logout(
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(get_current_user),
):
    logger.info("Logout request", extra={"user_id": str(current_user.user_id)})
    await logout_user(db, current_user)
    return success_response("Logged out successfully")


@router.get("/profile", response_model=APIResponse[ProfileSchema])
async def profile(
    db: AsyncSession = Depends(get_db),
    current_user: RoleContext = Depends(get_current_user),
):
    return success_response("Profile fetched", await get_profile(db, current_user))
