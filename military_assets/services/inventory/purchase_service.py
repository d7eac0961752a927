import uuid
from datetime import date

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from military_assets.constants.activity_codes import ActivityCode
from military_assets.constants.error_codes import ErrorCode
from military_assets.constants.movement_type import MovementType, ReferenceType
from military_assets.core.db import transaction
from military_assets.core.exceptions import NotFoundError
from military_assets.core.permissions import RoleContext, ensure_base_access, scoped_base_id
from military_assets.models.assets.asset_type_models import AssetType
from military_assets.models.bases.base_models import MilitaryBase
from military_assets.models.inventory.purchase_models import Purchase
from military_assets.models.users.user_models import User
from military_assets.schemas.inventory.purchase_schemas import (
    PurchaseCreateSchema,
    PurchaseOutSchema,
)
from military_assets.services.inventory.asset_balance_service import increase_stock
from military_assets.services.lookups import get_active_asset_type, get_active_base
from military_assets.utils.activity_helpers import emit_actor_activity
from military_assets.utils.logger import get_logger
from military_assets.utils.pagination import PageParams, paginated

logger = get_logger("workflow.purchase")

Creator = aliased(User)


# =====================================================
# MAPPER
# =====================================================
def _purchase_query():
    return (
        select(
            Purchase,
            MilitaryBase.name.label("base_name"),
            AssetType.name.label("asset_type_name"),
            Creator.username.label("created_by"),
        )
        .join(MilitaryBase, MilitaryBase.id == Purchase.base_id)
        .join(AssetType, AssetType.id == Purchase.asset_type_id)
        .outerjoin(Creator, Creator.id == Purchase.created_by_id)
        .execution_options(populate_existing=True)
    )


def _map_purchase(row) -> PurchaseOutSchema:
    p: Purchase = row.Purchase
    return PurchaseOutSchema(
        id=p.id,
        base_id=p.base_id,
        base_name=row.base_name,
        asset_type_id=p.asset_type_id,
        asset_type_name=row.asset_type_name,
        quantity=p.quantity,
        unit_cost=p.unit_cost,
        total_cost=p.total_cost,
        vendor=p.vendor,
        purchase_date=p.purchase_date,
        delivery_date=p.delivery_date,
        notes=p.notes,
        created_by_id=p.created_by_id,
        created_by=row.created_by,
        created_at=p.created_at,
    )


# =====================================================
# CREATE
# =====================================================
async def create_purchase(
    db: AsyncSession,
    payload: PurchaseCreateSchema,
    ctx: RoleContext,
) -> PurchaseOutSchema:
    ensure_base_access(ctx, payload.base_id)

    async with transaction(db):
        base = await get_active_base(db, payload.base_id)
        asset_type = await get_active_asset_type(db, payload.asset_type_id)

        total_cost = payload.total_cost
        if total_cost is None and payload.unit_cost is not None:
            total_cost = payload.unit_cost * payload.quantity

        purchase = Purchase(
            base_id=payload.base_id,
            asset_type_id=payload.asset_type_id,
            quantity=payload.quantity,
            unit_cost=payload.unit_cost,
            total_cost=total_cost,
            vendor=payload.vendor,
            purchase_date=payload.purchase_date,
            delivery_date=payload.delivery_date,
            notes=payload.notes,
            created_by_id=ctx.user_id,
        )
        db.add(purchase)
        await db.flush()

        await increase_stock(
            db,
            base_id=payload.base_id,
            asset_type_id=payload.asset_type_id,
            quantity=payload.quantity,
            movement_type=MovementType.PURCHASE,
            reference_type=ReferenceType.PURCHASE,
            reference_id=purchase.id,
            actor_id=ctx.user_id,
        )

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.CREATE_PURCHASE,
            quantity=payload.quantity,
            asset_type_name=asset_type.name,
            base_code=base.code,
        )

    logger.info(
        "Purchase recorded",
        extra={
            "user_id": str(ctx.user_id),
            "purchase_id": str(purchase.id),
            "base_id": str(payload.base_id),
            "asset_type_id": str(payload.asset_type_id),
            "quantity": payload.quantity,
        },
    )

    return await get_purchase(db, purchase.id, ctx)


# =====================================================
# READ
# =====================================================
async def get_purchase(
    db: AsyncSession,
    purchase_id: uuid.UUID,
    ctx: RoleContext,
) -> PurchaseOutSchema:
    row = (await db.execute(_purchase_query().where(Purchase.id == purchase_id))).first()
    if not row:
        raise NotFoundError("Purchase not found", ErrorCode.PURCHASE_NOT_FOUND)

    ensure_base_access(ctx, row.Purchase.base_id)
    return _map_purchase(row)


async def list_purchases(
    db: AsyncSession,
    ctx: RoleContext,
    page: PageParams,
    *,
    base_id: uuid.UUID | None = None,
    asset_type_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict:
    filters = []

    effective_base_id = scoped_base_id(ctx, base_id)
    if effective_base_id:
        filters.append(Purchase.base_id == effective_base_id)
    if asset_type_id:
        filters.append(Purchase.asset_type_id == asset_type_id)
    if start_date:
        filters.append(Purchase.purchase_date >= start_date)
    if end_date:
        filters.append(Purchase.purchase_date <= end_date)

    total = await db.scalar(select(func.count(Purchase.id)).where(*filters))

    rows = (
        await db.execute(
            _purchase_query()
            .where(*filters)
            .order_by(Purchase.purchase_date.desc(), Purchase.created_at.desc())
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([_map_purchase(r) for r in rows], total or 0, page)
