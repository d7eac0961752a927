"""Balance ledger primitives.

Every change to ``asset_balances`` goes through this module. Each primitive
must run inside the caller's open transaction, writes one ``AssetMovement``
journal row, and never commits. Sufficiency checks are folded into the
UPDATE itself (``WHERE ... >= qty``) so concurrent writers on the same row
cannot both pass a stale read.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.constants.movement_type import MovementType, ReferenceType
from military_assets.core.exceptions import InsufficientBalance
from military_assets.models.inventory.asset_balance_models import AssetBalance
from military_assets.models.inventory.asset_movement_models import AssetMovement
from military_assets.utils.logger import get_logger

logger = get_logger("ledger")

POSITIVE_MOVEMENTS = {
    MovementType.PURCHASE,
    MovementType.TRANSFER_IN,
    MovementType.TRANSFER_OUT_REVERSAL,
    MovementType.ASSIGNMENT_RESERVE,
    MovementType.ASSIGNMENT_RELEASE,
}

NEGATIVE_MOVEMENTS = {
    MovementType.TRANSFER_OUT,
    MovementType.TRANSFER_IN_REVERSAL,
    MovementType.EXPENDITURE,
    MovementType.ASSIGNMENT_WRITE_OFF,
}


# =====================================================
# HELPERS
# =====================================================
def _insert_for(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise RuntimeError(f"Unsupported dialect for ledger upsert: {dialect}")


def _validate_quantity(qty: int):
    if not isinstance(qty, int) or isinstance(qty, bool) or qty <= 0:
        raise ValueError(f"Ledger quantity must be a positive integer, got {qty!r}")


def _record_movement(
    db: AsyncSession,
    *,
    base_id: uuid.UUID,
    asset_type_id: uuid.UUID,
    movement_type: MovementType,
    quantity_change: int,
    reference_type: ReferenceType,
    reference_id: uuid.UUID,
    actor_id: uuid.UUID | None,
):
    if movement_type in POSITIVE_MOVEMENTS and quantity_change < 0:
        raise ValueError(f"{movement_type.value} must have positive quantity")
    if movement_type in NEGATIVE_MOVEMENTS and quantity_change > 0:
        raise ValueError(f"{movement_type.value} must have negative quantity")

    db.add(
        AssetMovement(
            base_id=base_id,
            asset_type_id=asset_type_id,
            movement_type=movement_type.value,
            quantity_change=quantity_change,
            reference_type=reference_type.value,
            reference_id=reference_id,
            created_by_id=actor_id,
        )
    )


def _row_key(base_id: uuid.UUID, asset_type_id: uuid.UUID):
    return (
        AssetBalance.base_id == base_id,
        AssetBalance.asset_type_id == asset_type_id,
    )


# =====================================================
# READ
# =====================================================
async def get_balance(
    db: AsyncSession,
    base_id: uuid.UUID,
    asset_type_id: uuid.UUID,
) -> dict:
    """Current ledger figures; a missing row reads as zero."""
    row = (
        await db.execute(
            select(
                AssetBalance.current_balance,
                AssetBalance.available_quantity,
                AssetBalance.reserved_quantity,
            ).where(*_row_key(base_id, asset_type_id))
        )
    ).first()

    if row is None:
        return {"current_balance": 0, "available_quantity": 0, "reserved_quantity": 0}

    return {
        "current_balance": row.current_balance,
        "available_quantity": row.available_quantity,
        "reserved_quantity": row.reserved_quantity,
    }


# =====================================================
# GET-OR-CREATE
# =====================================================
async def ensure_balance_row(
    db: AsyncSession,
    base_id: uuid.UUID,
    asset_type_id: uuid.UUID,
):
    insert = _insert_for(db)
    stmt = (
        insert(AssetBalance)
        .values(
            base_id=base_id,
            asset_type_id=asset_type_id,
            current_balance=0,
            available_quantity=0,
            reserved_quantity=0,
            last_updated=datetime.now(timezone.utc),
        )
        .on_conflict_do_nothing(index_elements=["base_id", "asset_type_id"])
    )
    await db.execute(stmt)


# =====================================================
# INCREASE
# =====================================================
async def increase_stock(
    db: AsyncSession,
    *,
    base_id: uuid.UUID,
    asset_type_id: uuid.UUID,
    quantity: int,
    movement_type: MovementType,
    reference_type: ReferenceType,
    reference_id: uuid.UUID,
    actor_id: uuid.UUID | None,
):
    _validate_quantity(quantity)
    now = datetime.now(timezone.utc)

    insert = _insert_for(db)
    stmt = insert(AssetBalance).values(
        base_id=base_id,
        asset_type_id=asset_type_id,
        current_balance=quantity,
        available_quantity=quantity,
        reserved_quantity=0,
        last_updated=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["base_id", "asset_type_id"],
        set_={
            "current_balance": AssetBalance.current_balance + quantity,
            "available_quantity": AssetBalance.available_quantity + quantity,
            "last_updated": now,
        },
    )
    await db.execute(stmt)

    _record_movement(
        db,
        base_id=base_id,
        asset_type_id=asset_type_id,
        movement_type=movement_type,
        quantity_change=quantity,
        reference_type=reference_type,
        reference_id=reference_id,
        actor_id=actor_id,
    )

    logger.info(
        "Stock increased",
        extra={
            "base_id": str(base_id),
            "asset_type_id": str(asset_type_id),
            "quantity": quantity,
            "movement_type": movement_type.value,
            "reference_id": str(reference_id),
        },
    )


# =====================================================
# DECREASE
# =====================================================
async def decrease_stock(
    db: AsyncSession,
    *,
    base_id: uuid.UUID,
    asset_type_id: uuid.UUID,
    quantity: int,
    movement_type: MovementType,
    reference_type: ReferenceType,
    reference_id: uuid.UUID,
    actor_id: uuid.UUID | None,
    from_reserved: bool = False,
):
    """Remove units from current_balance and from the available (default) or reserved split."""
    _validate_quantity(quantity)

    split_column = AssetBalance.reserved_quantity if from_reserved else AssetBalance.available_quantity
    split_name = "reserved_quantity" if from_reserved else "available_quantity"

    result = await db.execute(
        update(AssetBalance)
        .where(
            *_row_key(base_id, asset_type_id),
            AssetBalance.current_balance >= quantity,
            split_column >= quantity,
        )
        .values(
            {
                "current_balance": AssetBalance.current_balance - quantity,
                split_name: split_column - quantity,
                "last_updated": datetime.now(timezone.utc),
            }
        )
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        balance = await get_balance(db, base_id, asset_type_id)
        logger.warning(
            "Insufficient balance",
            extra={
                "base_id": str(base_id),
                "asset_type_id": str(asset_type_id),
                "requested": quantity,
                "from_reserved": from_reserved,
                **balance,
            },
        )
        raise InsufficientBalance(
            f"Insufficient balance: requested {quantity}, "
            f"{'reserved' if from_reserved else 'available'} {balance[split_name]}",
            details={"requested": quantity, **balance},
        )

    _record_movement(
        db,
        base_id=base_id,
        asset_type_id=asset_type_id,
        movement_type=movement_type,
        quantity_change=-quantity,
        reference_type=reference_type,
        reference_id=reference_id,
        actor_id=actor_id,
    )

    logger.info(
        "Stock decreased",
        extra={
            "base_id": str(base_id),
            "asset_type_id": str(asset_type_id),
            "quantity": quantity,
            "movement_type": movement_type.value,
            "reference_id": str(reference_id),
        },
    )


# =====================================================
# RESERVE / RELEASE
# =====================================================
async def _shift(
    db: AsyncSession,
    *,
    base_id: uuid.UUID,
    asset_type_id: uuid.UUID,
    quantity: int,
    to_reserved: bool,
    reference_id: uuid.UUID,
    actor_id: uuid.UUID | None,
):
    _validate_quantity(quantity)

    source = AssetBalance.available_quantity if to_reserved else AssetBalance.reserved_quantity
    movement_type = MovementType.ASSIGNMENT_RESERVE if to_reserved else MovementType.ASSIGNMENT_RELEASE

    result = await db.execute(
        update(AssetBalance)
        .where(*_row_key(base_id, asset_type_id), source >= quantity)
        .values(
            available_quantity=(
                AssetBalance.available_quantity - quantity
                if to_reserved
                else AssetBalance.available_quantity + quantity
            ),
            reserved_quantity=(
                AssetBalance.reserved_quantity + quantity
                if to_reserved
                else AssetBalance.reserved_quantity - quantity
            ),
            last_updated=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        balance = await get_balance(db, base_id, asset_type_id)
        logger.warning(
            "Reservation shift rejected",
            extra={
                "base_id": str(base_id),
                "asset_type_id": str(asset_type_id),
                "requested": quantity,
                "movement_type": movement_type.value,
                **balance,
            },
        )
        kind = "available" if to_reserved else "reserved"
        raise InsufficientBalance(
            f"Insufficient {kind} quantity: requested {quantity}, "
            f"{kind} {balance[f'{kind}_quantity']}",
            details={"requested": quantity, **balance},
        )

    # Reservation shifts do not change current_balance; the journal records
    # the number of units moved between the two splits.
    _record_movement(
        db,
        base_id=base_id,
        asset_type_id=asset_type_id,
        movement_type=movement_type,
        quantity_change=quantity,
        reference_type=ReferenceType.ASSIGNMENT,
        reference_id=reference_id,
        actor_id=actor_id,
    )


async def reserve(
    db: AsyncSession,
    *,
    base_id: uuid.UUID,
    asset_type_id: uuid.UUID,
    quantity: int,
    reference_id: uuid.UUID,
    actor_id: uuid.UUID | None,
):
    await _shift(
        db,
        base_id=base_id,
        asset_type_id=asset_type_id,
        quantity=quantity,
        to_reserved=True,
        reference_id=reference_id,
        actor_id=actor_id,
    )


async def release(
    db: AsyncSession,
    *,
    base_id: uuid.UUID,
    asset_type_id: uuid.UUID,
    quantity: int,
    reference_id: uuid.UUID,
    actor_id: uuid.UUID | None,
):
    await _shift(
        db,
        base_id=base_id,
        asset_type_id=asset_type_id,
        quantity=quantity,
        to_reserved=False,
        reference_id=reference_id,
        actor_id=actor_id,
    )
