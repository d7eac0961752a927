import uuid

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.constants.activity_codes import ActivityCode
from military_assets.constants.error_codes import ErrorCode
from military_assets.core.db import transaction
from military_assets.core.exceptions import ConflictError, NotFoundError
from military_assets.core.permissions import RoleContext
from military_assets.models.assets.asset_type_models import AssetType
from military_assets.schemas.assets.asset_type_schemas import (
    AssetTypeCreateSchema,
    AssetTypeOutSchema,
    AssetTypeUpdateSchema,
)
from military_assets.utils.activity_helpers import emit_actor_activity
from military_assets.utils.logger import get_logger
from military_assets.utils.pagination import PageParams, paginated

logger = get_logger("catalog.asset_types")


async def _load(db: AsyncSession, asset_type_id: uuid.UUID) -> AssetType:
    asset_type = await db.scalar(
        select(AssetType)
        .where(AssetType.id == asset_type_id)
        .execution_options(populate_existing=True)
    )
    if not asset_type:
        raise NotFoundError("Asset type not found", ErrorCode.ASSET_TYPE_NOT_FOUND)
    return asset_type


async def create_asset_type(
    db: AsyncSession,
    payload: AssetTypeCreateSchema,
    ctx: RoleContext,
) -> AssetTypeOutSchema:
    async with transaction(db):
        exists = await db.scalar(
            select(AssetType.id).where(func.lower(AssetType.name) == payload.name.lower())
        )
        if exists:
            raise ConflictError("Asset type name already exists", ErrorCode.ASSET_TYPE_EXISTS)

        asset_type = AssetType(
            name=payload.name,
            category=payload.category,
            description=payload.description,
            unit_of_measure=payload.unit_of_measure,
            created_by_id=ctx.user_id,
        )
        db.add(asset_type)
        await db.flush()

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.CREATE_ASSET_TYPE,
            target_name=asset_type.name,
            category=asset_type.category,
        )

    logger.info("Asset type created", extra={"asset_type_id": str(asset_type.id), "user_id": str(ctx.user_id)})
    return AssetTypeOutSchema.model_validate(await _load(db, asset_type.id))


async def update_asset_type(
    db: AsyncSession,
    asset_type_id: uuid.UUID,
    payload: AssetTypeUpdateSchema,
    ctx: RoleContext,
) -> AssetTypeOutSchema:
    async with transaction(db):
        asset_type = await _load(db, asset_type_id)

        changes = []
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None and getattr(asset_type, field) != value:
                setattr(asset_type, field, value)
                changes.append(f"{field}={value}")

        if changes:
            asset_type.updated_by_id = ctx.user_id
            await db.flush()
            await emit_actor_activity(
                db,
                ctx,
                ActivityCode.UPDATE_ASSET_TYPE,
                target_name=asset_type.name,
                changes=", ".join(changes),
            )

    return AssetTypeOutSchema.model_validate(await _load(db, asset_type_id))


async def get_asset_type(db: AsyncSession, asset_type_id: uuid.UUID) -> AssetTypeOutSchema:
    return AssetTypeOutSchema.model_validate(await _load(db, asset_type_id))


async def list_asset_types(
    db: AsyncSession,
    page: PageParams,
    *,
    category: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> dict:
    filters = []
    if category:
        filters.append(AssetType.category == category)
    if is_active is not None:
        filters.append(AssetType.is_active.is_(is_active))
    if search:
        filters.append(AssetType.name.ilike(f"%{search}%"))

    total = await db.scalar(select(func.count(AssetType.id)).where(*filters))
    rows = (
        await db.scalars(
            select(AssetType)
            .where(*filters)
            .order_by(AssetType.category, AssetType.name)
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([AssetTypeOutSchema.model_validate(r) for r in rows], total or 0, page)
