"""Physical asset registry. Registration and edits never touch the ledger."""

import uuid

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.constants.activity_codes import ActivityCode
from military_assets.constants.error_codes import ErrorCode
from military_assets.core.db import transaction
from military_assets.core.exceptions import ConflictError, NotFoundError, ValidationError
from military_assets.core.permissions import RoleContext, ensure_base_access, scoped_base_id
from military_assets.models.assets.asset_models import Asset
from military_assets.models.assets.asset_type_models import AssetType
from military_assets.models.assignments.assignment_models import Assignment
from military_assets.models.bases.base_models import MilitaryBase
from military_assets.models.enums.asset_status import AssetCondition, AssetStatus
from military_assets.models.users.user_models import User
from military_assets.schemas.assets.asset_schemas import (
    AssetAssignmentHistorySchema,
    AssetCreateSchema,
    AssetDetailSchema,
    AssetOutSchema,
    AssetUpdateSchema,
)
from military_assets.services.lookups import get_active_asset_type, get_active_base
from military_assets.utils.activity_helpers import emit_actor_activity
from military_assets.utils.logger import get_logger
from military_assets.utils.pagination import PageParams, paginated

logger = get_logger("catalog.assets")

RECENT_ASSIGNMENTS_LIMIT = 10


def _asset_query():
    return (
        select(
            Asset,
            AssetType.name.label("asset_type_name"),
            MilitaryBase.name.label("base_name"),
        )
        .join(AssetType, AssetType.id == Asset.asset_type_id)
        .join(MilitaryBase, MilitaryBase.id == Asset.base_id)
        .execution_options(populate_existing=True)
    )


def _asset_fields(row) -> dict:
    a: Asset = row.Asset
    return dict(
        id=a.id,
        asset_type_id=a.asset_type_id,
        asset_type_name=row.asset_type_name,
        base_id=a.base_id,
        base_name=row.base_name,
        serial_number=a.serial_number,
        model=a.model,
        manufacturer=a.manufacturer,
        current_status=a.current_status,
        condition_status=a.condition_status,
        acquisition_date=a.acquisition_date,
        acquisition_cost=a.acquisition_cost,
        notes=a.notes,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )


# =====================================================
# REGISTER
# =====================================================
async def register_asset(
    db: AsyncSession,
    payload: AssetCreateSchema,
    ctx: RoleContext,
) -> AssetOutSchema:
    ensure_base_access(ctx, payload.base_id)

    async with transaction(db):
        base = await get_active_base(db, payload.base_id)
        asset_type = await get_active_asset_type(db, payload.asset_type_id)

        if payload.serial_number:
            exists = await db.scalar(
                select(Asset.id).where(Asset.serial_number == payload.serial_number)
            )
            if exists:
                raise ConflictError("Serial number already registered", ErrorCode.ASSET_SERIAL_EXISTS)

        asset = Asset(
            asset_type_id=payload.asset_type_id,
            base_id=payload.base_id,
            serial_number=payload.serial_number,
            model=payload.model,
            manufacturer=payload.manufacturer,
            current_status=AssetStatus.available,
            condition_status=payload.condition_status,
            acquisition_date=payload.acquisition_date,
            acquisition_cost=payload.acquisition_cost,
            notes=payload.notes,
            created_by_id=ctx.user_id,
        )
        db.add(asset)
        await db.flush()

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.REGISTER_ASSET,
            serial_number=asset.serial_number or str(asset.id),
            asset_type_name=asset_type.name,
            base_code=base.code,
        )

    logger.info(
        "Asset registered",
        extra={"asset_id": str(asset.id), "base_id": str(asset.base_id), "user_id": str(ctx.user_id)},
    )
    return await get_asset(db, asset.id, ctx)


# =====================================================
# EDIT
# =====================================================
async def update_asset(
    db: AsyncSession,
    asset_id: uuid.UUID,
    payload: AssetUpdateSchema,
    ctx: RoleContext,
) -> AssetOutSchema:
    async with transaction(db):
        asset = await db.scalar(
            select(Asset)
            .where(Asset.id == asset_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if not asset:
            raise NotFoundError("Asset not found", ErrorCode.ASSET_NOT_FOUND)

        ensure_base_access(ctx, asset.base_id)

        data = payload.model_dump(exclude_unset=True)

        if "current_status" in data and data["current_status"] is not None:
            if asset.current_status not in {
                AssetStatus.available,
                AssetStatus.maintenance,
                AssetStatus.disposed,
            }:
                raise ValidationError(
                    f"Asset status {asset.current_status.value} can only change through its workflow",
                    ErrorCode.ASSET_STATUS_LOCKED,
                )
            data["current_status"] = AssetStatus(data["current_status"])

        if data.get("condition_status") is not None:
            data["condition_status"] = AssetCondition(data["condition_status"])

        changes = []
        for field, value in data.items():
            if value is None and field in {"current_status", "condition_status"}:
                continue
            if getattr(asset, field) != value:
                setattr(asset, field, value)
                changes.append(f"{field}={getattr(value, 'value', value)}")

        if changes:
            asset.updated_by_id = ctx.user_id
            await db.flush()
            await emit_actor_activity(
                db,
                ctx,
                ActivityCode.UPDATE_ASSET,
                serial_number=asset.serial_number or str(asset.id),
                changes=", ".join(changes),
            )

    return await get_asset(db, asset_id, ctx)


# =====================================================
# READ
# =====================================================
async def get_asset(
    db: AsyncSession,
    asset_id: uuid.UUID,
    ctx: RoleContext,
) -> AssetDetailSchema:
    row = (await db.execute(_asset_query().where(Asset.id == asset_id))).first()
    if not row:
        raise NotFoundError("Asset not found", ErrorCode.ASSET_NOT_FOUND)

    ensure_base_access(ctx, row.Asset.base_id)

    history = (
        await db.execute(
            select(
                Assignment.id,
                Assignment.assigned_to_user_id,
                User.username.label("assigned_to_username"),
                Assignment.assignment_date,
                Assignment.expected_return_date,
                Assignment.actual_return_date,
                Assignment.status,
            )
            .join(User, User.id == Assignment.assigned_to_user_id)
            .where(Assignment.asset_id == asset_id)
            .order_by(Assignment.assignment_date.desc(), Assignment.created_at.desc())
            .limit(RECENT_ASSIGNMENTS_LIMIT)
        )
    ).all()

    return AssetDetailSchema(
        **_asset_fields(row),
        recent_assignments=[
            AssetAssignmentHistorySchema(**h._mapping) for h in history
        ],
    )


async def list_assets(
    db: AsyncSession,
    ctx: RoleContext,
    page: PageParams,
    *,
    base_id: uuid.UUID | None = None,
    asset_type_id: uuid.UUID | None = None,
    status: AssetStatus | None = None,
    condition: AssetCondition | None = None,
    search: str | None = None,
) -> dict:
    filters = []

    effective_base_id = scoped_base_id(ctx, base_id)
    if effective_base_id:
        filters.append(Asset.base_id == effective_base_id)
    if asset_type_id:
        filters.append(Asset.asset_type_id == asset_type_id)
    if status:
        filters.append(Asset.current_status == status)
    if condition:
        filters.append(Asset.condition_status == condition)
    if search:
        filters.append(Asset.serial_number.ilike(f"%{search}%"))

    total = await db.scalar(select(func.count(Asset.id)).where(*filters))
    rows = (
        await db.execute(
            _asset_query()
            .where(*filters)
            .order_by(Asset.created_at.desc())
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([AssetOutSchema(**_asset_fields(r)) for r in rows], total or 0, page)
