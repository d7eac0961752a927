"""Shared existence checks and cross-record housekeeping for the workflows."""

import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.constants.error_codes import ErrorCode
from military_assets.core.exceptions import NotFoundError
from military_assets.models.assets.asset_type_models import AssetType
from military_assets.models.bases.base_models import MilitaryBase
from military_assets.models.users.user_models import User


async def get_active_base(db: AsyncSession, base_id: uuid.UUID) -> MilitaryBase:
    base = await db.scalar(
        select(MilitaryBase).where(
            MilitaryBase.id == base_id,
            MilitaryBase.is_active.is_(True),
        )
    )
    if not base:
        raise NotFoundError(
            "Base not found or inactive",
            ErrorCode.BASE_NOT_FOUND,
            details={"base_id": str(base_id)},
        )
    return base


async def get_active_asset_type(db: AsyncSession, asset_type_id: uuid.UUID) -> AssetType:
    asset_type = await db.scalar(
        select(AssetType).where(
            AssetType.id == asset_type_id,
            AssetType.is_active.is_(True),
        )
    )
    if not asset_type:
        raise NotFoundError(
            "Asset type not found or inactive",
            ErrorCode.ASSET_TYPE_NOT_FOUND,
            details={"asset_type_id": str(asset_type_id)},
        )
    return asset_type


async def get_active_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.scalar(
        select(User).where(User.id == user_id, User.is_active.is_(True))
    )
    if not user:
        raise NotFoundError(
            "User not found or inactive",
            ErrorCode.USER_NOT_FOUND,
            details={"user_id": str(user_id)},
        )
    return user


async def release_commands(
    db: AsyncSession,
    user_id: uuid.UUID,
    keep_base_id: uuid.UUID | None = None,
) -> None:
    """Clear ``commander_id`` on every base ``user_id`` commands, except ``keep_base_id``."""
    stmt = update(MilitaryBase).where(MilitaryBase.commander_id == user_id)
    if keep_base_id is not None:
        stmt = stmt.where(MilitaryBase.id != keep_base_id)
    await db.execute(stmt.values(commander_id=None))
