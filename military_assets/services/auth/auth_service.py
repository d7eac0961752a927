from datetime import datetime, timezone

from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.constants.activity_codes import ActivityCode
from military_assets.constants.error_codes import ErrorCode
from military_assets.core.db import transaction
from military_assets.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from military_assets.core.permissions import RoleContext
from military_assets.core.security import create_access_token, new_refresh_token, verify_password
from military_assets.models.bases.base_models import MilitaryBase
from military_assets.models.users.user_models import RefreshToken, User
from military_assets.utils.activity_helpers import emit_actor_activity
from military_assets.utils.logger import get_logger

logger = get_logger("auth.service")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


async def _issue_refresh_token(db: AsyncSession, user: User) -> str:
    refresh_value, expires_at = new_refresh_token()
    db.add(RefreshToken(user_id=user.id, token=refresh_value, expires_at=expires_at))
    return refresh_value


def _access_token_for(user: User) -> str:
    return create_access_token(subject=str(user.id), token_version=user.token_version)


def _context_for(user: User) -> RoleContext:
    return RoleContext(user_id=user.id, username=user.username, role=user.role, base_id=user.base_id)


# =====================================================
# LOGIN
# =====================================================
async def login_user(db: AsyncSession, username: str, password: str) -> dict:
    logger.info("Authenticating user", extra={"username": username})

    async with transaction(db):
        user = await db.scalar(
            select(User).where(
                or_(
                    func.lower(User.username) == username.lower(),
                    func.lower(User.email) == username.lower(),
                )
            )
        )

        if not user or not verify_password(password, user.password_hash):
            logger.warning("Invalid credentials", extra={"username": username})
            raise UnauthorizedError("Invalid credentials", ErrorCode.INVALID_CREDENTIALS)

        if not user.is_active:
            logger.warning("Inactive user login blocked", extra={"username": username})
            raise ForbiddenError("User account is inactive", ErrorCode.USER_INACTIVE)

        user.last_login = datetime.now(timezone.utc)
        access_token = _access_token_for(user)
        refresh_value = await _issue_refresh_token(db, user)

        await emit_actor_activity(db, _context_for(user), ActivityCode.LOGIN)

    logger.info("Login successful", extra={"user_id": str(user.id)})

    return {
        "auth": {
            "access_token": access_token,
            "refresh_token": refresh_value,
            "token_type": "bearer",
        },
        "user": await get_profile(db, _context_for(user)),
    }


# =====================================================
# REFRESH
# =====================================================
async def refresh_tokens(db: AsyncSession, refresh_token_value: str) -> dict:
    logger.info("Refreshing token")

    async with transaction(db):
        token = await db.scalar(
            select(RefreshToken)
            .where(
                RefreshToken.token == refresh_token_value,
                RefreshToken.revoked.is_(False),
            )
            .with_for_update()
        )

        if not token or _as_utc(token.expires_at) <= datetime.now(timezone.utc):
            logger.warning("Invalid refresh token")
            raise UnauthorizedError("Invalid or expired refresh token", ErrorCode.TOKEN_INVALID)

        user = await db.get(User, token.user_id)
        if not user or not user.is_active:
            logger.warning("Refresh blocked for inactive user", extra={"user_id": str(token.user_id)})
            raise UnauthorizedError("User invalid or inactive", ErrorCode.USER_INACTIVE)

        token.revoked = True
        new_refresh_value = await _issue_refresh_token(db, user)
        access_token = _access_token_for(user)

    logger.info("Token refreshed", extra={"user_id": str(user.id)})

    return {
        "access_token": access_token,
        "refresh_token": new_refresh_value,
        "token_type": "bearer",
    }


# =====================================================
# LOGOUT
# =====================================================
async def logout_user(db: AsyncSession, ctx: RoleContext):
    logger.info("Logging out user", extra={"user_id": str(ctx.user_id)})

    async with transaction(db):
        await db.execute(
            update(User)
            .where(User.id == ctx.user_id)
            .values(token_version=User.token_version + 1)
            .execution_options(synchronize_session=False)
        )
        await db.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == ctx.user_id)
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )

        await emit_actor_activity(db, ctx, ActivityCode.LOGOUT)

    logger.info("Logout successful", extra={"user_id": str(ctx.user_id)})


# =====================================================
# PROFILE
# =====================================================
async def get_profile(db: AsyncSession, ctx: RoleContext) -> dict:
    row = (
        await db.execute(
            select(
                User.id,
                User.username,
                User.email,
                User.first_name,
                User.last_name,
                User.role,
                User.base_id,
                MilitaryBase.name.label("base_name"),
            )
            .outerjoin(MilitaryBase, MilitaryBase.id == User.base_id)
            .where(User.id == ctx.user_id)
        )
    ).first()

    if not row:
        raise NotFoundError("User not found", ErrorCode.USER_NOT_FOUND)

    return dict(row._mapping)
