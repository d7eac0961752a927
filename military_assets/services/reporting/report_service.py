"""Read-only views over the ledger and its movement journal."""

import uuid
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.constants.movement_type import MovementType
from military_assets.core.permissions import RoleContext, scoped_base_id
from military_assets.models.assets.asset_type_models import AssetType
from military_assets.models.bases.base_models import MilitaryBase
from military_assets.models.inventory.asset_balance_models import AssetBalance
from military_assets.models.inventory.asset_movement_models import AssetMovement
from military_assets.models.users.user_models import User
from military_assets.schemas.inventory.balance_schemas import (
    AssetBalanceOutSchema,
    AssetMovementOutSchema,
)
from military_assets.schemas.reporting.dashboard_schemas import (
    BalanceTotals,
    BaseMetrics,
    DashboardSchema,
    MovementTotals,
)
from military_assets.utils.logger import get_logger
from military_assets.utils.pagination import PageParams, paginated

logger = get_logger("reporting")

# Movements that only shift units between available and reserved
RESERVATION_MOVEMENTS = {
    MovementType.ASSIGNMENT_RESERVE.value,
    MovementType.ASSIGNMENT_RELEASE.value,
}


def _date_bounds(start_date: date | None, end_date: date | None) -> list:
    filters = []
    if start_date:
        filters.append(
            AssetMovement.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc)
        )
    if end_date:
        filters.append(
            AssetMovement.created_at
            < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
        )
    return filters


# =====================================================
# BALANCES
# =====================================================
async def list_balances(
    db: AsyncSession,
    ctx: RoleContext,
    page: PageParams,
    *,
    base_id: uuid.UUID | None = None,
    asset_type_id: uuid.UUID | None = None,
    category: str | None = None,
) -> dict:
    filters = []

    effective_base_id = scoped_base_id(ctx, base_id)
    if effective_base_id:
        filters.append(AssetBalance.base_id == effective_base_id)
    if asset_type_id:
        filters.append(AssetBalance.asset_type_id == asset_type_id)
    if category:
        filters.append(AssetType.category == category)

    stmt = (
        select(
            AssetBalance.base_id,
            MilitaryBase.name.label("base_name"),
            MilitaryBase.code.label("base_code"),
            AssetBalance.asset_type_id,
            AssetType.name.label("asset_type_name"),
            AssetType.category,
            AssetBalance.current_balance,
            AssetBalance.available_quantity,
            AssetBalance.reserved_quantity,
            AssetBalance.last_updated,
        )
        .join(MilitaryBase, MilitaryBase.id == AssetBalance.base_id)
        .join(AssetType, AssetType.id == AssetBalance.asset_type_id)
        .where(*filters)
    )

    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
    rows = (
        await db.execute(
            stmt.order_by(MilitaryBase.code, AssetType.name)
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([AssetBalanceOutSchema(**r._mapping) for r in rows], total or 0, page)


# =====================================================
# MOVEMENT JOURNAL
# =====================================================
async def list_movements(
    db: AsyncSession,
    ctx: RoleContext,
    page: PageParams,
    *,
    base_id: uuid.UUID | None = None,
    asset_type_id: uuid.UUID | None = None,
    movement_type: MovementType | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict:
    filters = _date_bounds(start_date, end_date)

    effective_base_id = scoped_base_id(ctx, base_id)
    if effective_base_id:
        filters.append(AssetMovement.base_id == effective_base_id)
    if asset_type_id:
        filters.append(AssetMovement.asset_type_id == asset_type_id)
    if movement_type:
        filters.append(AssetMovement.movement_type == movement_type.value)

    total = await db.scalar(select(func.count(AssetMovement.id)).where(*filters))

    rows = (
        await db.execute(
            select(
                AssetMovement.id,
                AssetMovement.base_id,
                MilitaryBase.name.label("base_name"),
                AssetMovement.asset_type_id,
                AssetType.name.label("asset_type_name"),
                AssetMovement.movement_type,
                AssetMovement.quantity_change,
                AssetMovement.reference_type,
                AssetMovement.reference_id,
                AssetMovement.created_by_id,
                User.username.label("created_by"),
                AssetMovement.created_at,
            )
            .join(MilitaryBase, MilitaryBase.id == AssetMovement.base_id)
            .join(AssetType, AssetType.id == AssetMovement.asset_type_id)
            .outerjoin(User, User.id == AssetMovement.created_by_id)
            .where(*filters)
            .order_by(AssetMovement.created_at.desc())
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([AssetMovementOutSchema(**r._mapping) for r in rows], total or 0, page)


# =====================================================
# DASHBOARD
# =====================================================
def _movement_totals(by_type: dict[str, int]) -> MovementTotals:
    transferred_in = by_type.get(MovementType.TRANSFER_IN.value, 0) + by_type.get(
        MovementType.TRANSFER_IN_REVERSAL.value, 0
    )
    transferred_out = -(
        by_type.get(MovementType.TRANSFER_OUT.value, 0)
        + by_type.get(MovementType.TRANSFER_OUT_REVERSAL.value, 0)
    )
    assigned = by_type.get(MovementType.ASSIGNMENT_RESERVE.value, 0) - by_type.get(
        MovementType.ASSIGNMENT_RELEASE.value, 0
    )
    expended = -(
        by_type.get(MovementType.EXPENDITURE.value, 0)
        + by_type.get(MovementType.ASSIGNMENT_WRITE_OFF.value, 0)
    )
    net = sum(qty for kind, qty in by_type.items() if kind not in RESERVATION_MOVEMENTS)

    return MovementTotals(
        purchased=by_type.get(MovementType.PURCHASE.value, 0),
        transferred_in=transferred_in,
        transferred_out=transferred_out,
        assigned=assigned,
        expended=expended,
        net_movement=net,
    )


async def get_dashboard(
    db: AsyncSession,
    ctx: RoleContext,
    *,
    base_id: uuid.UUID | None = None,
    asset_type_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> DashboardSchema:
    effective_base_id = scoped_base_id(ctx, base_id)

    balance_filters = []
    movement_filters = _date_bounds(start_date, end_date)
    if effective_base_id:
        balance_filters.append(AssetBalance.base_id == effective_base_id)
        movement_filters.append(AssetMovement.base_id == effective_base_id)
    if asset_type_id:
        balance_filters.append(AssetBalance.asset_type_id == asset_type_id)
        movement_filters.append(AssetMovement.asset_type_id == asset_type_id)

    base_filters = [MilitaryBase.id == effective_base_id] if effective_base_id else []
    bases = (
        await db.execute(
            select(MilitaryBase.id, MilitaryBase.name, MilitaryBase.code)
            .where(*base_filters)
            .order_by(MilitaryBase.code)
        )
    ).all()

    balance_rows = (
        await db.execute(
            select(
                AssetBalance.base_id,
                func.coalesce(func.sum(AssetBalance.current_balance), 0).label("current_balance"),
                func.coalesce(func.sum(AssetBalance.available_quantity), 0).label("available_quantity"),
                func.coalesce(func.sum(AssetBalance.reserved_quantity), 0).label("reserved_quantity"),
            )
            .where(*balance_filters)
            .group_by(AssetBalance.base_id)
        )
    ).all()
    balances_by_base = {r.base_id: r for r in balance_rows}

    movement_rows = (
        await db.execute(
            select(
                AssetMovement.base_id,
                AssetMovement.movement_type,
                func.sum(AssetMovement.quantity_change).label("quantity"),
            )
            .where(*movement_filters)
            .group_by(AssetMovement.base_id, AssetMovement.movement_type)
        )
    ).all()
    movements_by_base: dict[uuid.UUID, dict[str, int]] = defaultdict(dict)
    overall_movements: dict[str, int] = defaultdict(int)
    for r in movement_rows:
        movements_by_base[r.base_id][r.movement_type] = int(r.quantity or 0)
        overall_movements[r.movement_type] += int(r.quantity or 0)

    per_base = []
    totals = BalanceTotals()
    for b in bases:
        bal = balances_by_base.get(b.id)
        balance = BalanceTotals(
            current_balance=int(bal.current_balance) if bal else 0,
            available_quantity=int(bal.available_quantity) if bal else 0,
            reserved_quantity=int(bal.reserved_quantity) if bal else 0,
        )
        totals.current_balance += balance.current_balance
        totals.available_quantity += balance.available_quantity
        totals.reserved_quantity += balance.reserved_quantity

        per_base.append(
            BaseMetrics(
                base_id=b.id,
                base_name=b.name,
                base_code=b.code,
                balances=balance,
                movements=_movement_totals(movements_by_base.get(b.id, {})),
            )
        )

    logger.debug(
        "Dashboard computed",
        extra={"user_id": str(ctx.user_id), "base_id": str(effective_base_id) if effective_base_id else None},
    )

    return DashboardSchema(
        base_id=effective_base_id,
        asset_type_id=asset_type_id,
        totals=totals,
        movements=_movement_totals(dict(overall_movements)),
        bases=per_base,
    )
