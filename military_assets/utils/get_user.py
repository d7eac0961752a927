from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from military_assets.constants.error_codes import ErrorCode
from military_assets.core.db import get_db
from military_assets.core.exceptions import ForbiddenError, UnauthorizedError
from military_assets.core.permissions import RoleContext
from military_assets.core.security import decode_access_token, token_subject
from military_assets.models.users.user_models import User
from military_assets.utils.logger import get_logger

logger = get_logger("auth.guard")


async def get_current_user(
    request: Request,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> RoleContext:
    if not authorization or not authorization.startswith("Bearer "):
        logger.warning("Missing bearer token", extra={"path": request.url.path})
        raise UnauthorizedError("Missing or invalid authorization header")

    token = authorization.split("Bearer ")[1].strip()
    claims = decode_access_token(token)
    user_id = token_subject(claims)
    token_version = claims.get("token_version")

    result = await db.execute(
        select(User.id, User.username, User.role, User.base_id, User.is_active, User.token_version)
        .where(User.id == user_id)
    )
    user = result.first()

    if not user:
        logger.warning("Token user not found", extra={"user_id": str(user_id)})
        raise UnauthorizedError("User not found", ErrorCode.TOKEN_INVALID)

    if not user.is_active:
        logger.warning("Inactive user access blocked", extra={"user_id": str(user.id)})
        raise ForbiddenError("User account is inactive", ErrorCode.USER_INACTIVE)

    if user.token_version != token_version:
        logger.warning("Token version mismatch", extra={"user_id": str(user.id)})
        raise UnauthorizedError("Session expired", ErrorCode.SESSION_EXPIRED)

    ctx = RoleContext(
        user_id=user.id,
        username=user.username,
        role=user.role,
        base_id=user.base_id,
    )
    request.state.user = ctx
    return ctx
