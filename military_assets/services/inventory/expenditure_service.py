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
from military_assets.models.inventory.expenditure_models import Expenditure
from military_assets.models.users.user_models import User
from military_assets.schemas.inventory.expenditure_schemas import (
    ExpenditureCreateSchema,
    ExpenditureOutSchema,
)
from military_assets.services.inventory.asset_balance_service import decrease_stock
from military_assets.services.lookups import get_active_asset_type, get_active_base
from military_assets.utils.activity_helpers import emit_actor_activity
from military_assets.utils.logger import get_logger
from military_assets.utils.pagination import PageParams, paginated

logger = get_logger("workflow.expenditure")

Authorizer = aliased(User)


def _expenditure_query():
    return (
        select(
            Expenditure,
            MilitaryBase.name.label("base_name"),
            AssetType.name.label("asset_type_name"),
            Authorizer.username.label("authorized_by"),
        )
        .join(MilitaryBase, MilitaryBase.id == Expenditure.base_id)
        .join(AssetType, AssetType.id == Expenditure.asset_type_id)
        .outerjoin(Authorizer, Authorizer.id == Expenditure.authorized_by_id)
        .execution_options(populate_existing=True)
    )


def _map_expenditure(row) -> ExpenditureOutSchema:
    e: Expenditure = row.Expenditure
    return ExpenditureOutSchema(
        id=e.id,
        base_id=e.base_id,
        base_name=row.base_name,
        asset_type_id=e.asset_type_id,
        asset_type_name=row.asset_type_name,
        quantity=e.quantity,
        expenditure_date=e.expenditure_date,
        reason=e.reason,
        operation_name=e.operation_name,
        notes=e.notes,
        authorized_by_id=e.authorized_by_id,
        authorized_by=row.authorized_by,
        created_at=e.created_at,
    )


async def create_expenditure(
    db: AsyncSession,
    payload: ExpenditureCreateSchema,
    ctx: RoleContext,
) -> ExpenditureOutSchema:
    ensure_base_access(ctx, payload.base_id)

    async with transaction(db):
        base = await get_active_base(db, payload.base_id)
        asset_type = await get_active_asset_type(db, payload.asset_type_id)

        expenditure = Expenditure(
            base_id=payload.base_id,
            asset_type_id=payload.asset_type_id,
            quantity=payload.quantity,
            expenditure_date=payload.expenditure_date,
            reason=payload.reason,
            operation_name=payload.operation_name,
            notes=payload.notes,
            authorized_by_id=ctx.user_id,
        )
        db.add(expenditure)
        await db.flush()

        await decrease_stock(
            db,
            base_id=payload.base_id,
            asset_type_id=payload.asset_type_id,
            quantity=payload.quantity,
            movement_type=MovementType.EXPENDITURE,
            reference_type=ReferenceType.EXPENDITURE,
            reference_id=expenditure.id,
            actor_id=ctx.user_id,
        )

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.CREATE_EXPENDITURE,
            quantity=payload.quantity,
            asset_type_name=asset_type.name,
            base_code=base.code,
            reason=payload.reason,
        )

    logger.info(
        "Expenditure recorded",
        extra={
            "user_id": str(ctx.user_id),
            "expenditure_id": str(expenditure.id),
            "base_id": str(payload.base_id),
            "asset_type_id": str(payload.asset_type_id),
            "quantity": payload.quantity,
        },
    )

    return await get_expenditure(db, expenditure.id, ctx)


async def get_expenditure(
    db: AsyncSession,
    expenditure_id: uuid.UUID,
    ctx: RoleContext,
) -> ExpenditureOutSchema:
    row = (await db.execute(_expenditure_query().where(Expenditure.id == expenditure_id))).first()
    if not row:
        raise NotFoundError("Expenditure not found", ErrorCode.EXPENDITURE_NOT_FOUND)

    ensure_base_access(ctx, row.Expenditure.base_id)
    return _map_expenditure(row)


async def list_expenditures(
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
        filters.append(Expenditure.base_id == effective_base_id)
    if asset_type_id:
        filters.append(Expenditure.asset_type_id == asset_type_id)
    if start_date:
        filters.append(Expenditure.expenditure_date >= start_date)
    if end_date:
        filters.append(Expenditure.expenditure_date <= end_date)

    total = await db.scalar(select(func.count(Expenditure.id)).where(*filters))

    rows = (
        await db.execute(
            _expenditure_query()
            .where(*filters)
            .order_by(Expenditure.expenditure_date.desc(), Expenditure.created_at.desc())
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([_map_expenditure(r) for r in rows], total or 0, page)
