"""Transfer workflow.

Stock leaves the source balance when the transfer is created and reaches the
destination only on completion. Cancelling restores the source; reopening a
completed transfer takes the stock back off the destination.
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from military_assets.constants.activity_codes import ActivityCode
from military_assets.constants.error_codes import ErrorCode
from military_assets.constants.movement_type import MovementType, ReferenceType
from military_assets.core.db import transaction
from military_assets.core.exceptions import (
    InvalidStateTransition,
    NotFoundError,
    ValidationError,
)
from military_assets.core.permissions import (
    Permission,
    RoleContext,
    ensure_any_base_access,
    ensure_base_access,
    require_permission,
    scoped_base_id,
)
from military_assets.models.assets.asset_type_models import AssetType
from military_assets.models.bases.base_models import MilitaryBase
from military_assets.models.enums.transfer_status import TransferStatus
from military_assets.models.inventory.transfer_models import Transfer
from military_assets.models.users.user_models import User
from military_assets.schemas.inventory.transfer_schemas import (
    TransferCreateSchema,
    TransferOutSchema,
    TransferUpdateSchema,
)
from military_assets.services.inventory.asset_balance_service import (
    decrease_stock,
    ensure_balance_row,
    increase_stock,
)
from military_assets.services.lookups import (
    get_active_asset_type,
    get_active_base,
    get_active_user,
)
from military_assets.utils.activity_helpers import emit_actor_activity
from military_assets.utils.logger import get_logger
from military_assets.utils.pagination import PageParams, paginated

logger = get_logger("workflow.transfer")

ALLOWED_TRANSITIONS = {
    TransferStatus.pending: {TransferStatus.in_transit, TransferStatus.completed, TransferStatus.cancelled},
    TransferStatus.in_transit: {TransferStatus.completed, TransferStatus.cancelled},
    TransferStatus.completed: {TransferStatus.in_transit},
    TransferStatus.cancelled: set(),
}

FromBase = aliased(MilitaryBase)
ToBase = aliased(MilitaryBase)
Requester = aliased(User)
Approver = aliased(User)
Completer = aliased(User)


def generate_tracking_number(transfer_date: date) -> str:
    return f"TRF-{transfer_date:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


# =====================================================
# MAPPER
# =====================================================
def _transfer_query():
    return (
        select(
            Transfer,
            FromBase.name.label("from_base_name"),
            ToBase.name.label("to_base_name"),
            AssetType.name.label("asset_type_name"),
            Requester.username.label("requested_by"),
            Approver.username.label("approved_by"),
            Completer.username.label("completed_by"),
        )
        .join(FromBase, FromBase.id == Transfer.from_base_id)
        .join(ToBase, ToBase.id == Transfer.to_base_id)
        .join(AssetType, AssetType.id == Transfer.asset_type_id)
        .outerjoin(Requester, Requester.id == Transfer.requested_by_id)
        .outerjoin(Approver, Approver.id == Transfer.approved_by_id)
        .outerjoin(Completer, Completer.id == Transfer.completed_by_id)
        .execution_options(populate_existing=True)
    )


def _map_transfer(row) -> TransferOutSchema:
    t: Transfer = row.Transfer
    return TransferOutSchema(
        id=t.id,
        from_base_id=t.from_base_id,
        from_base_name=row.from_base_name,
        to_base_id=t.to_base_id,
        to_base_name=row.to_base_name,
        asset_type_id=t.asset_type_id,
        asset_type_name=row.asset_type_name,
        quantity=t.quantity,
        transfer_date=t.transfer_date,
        reason=t.reason,
        status=t.status,
        tracking_number=t.tracking_number,
        notes=t.notes,
        requested_by_id=t.requested_by_id,
        requested_by=row.requested_by,
        approved_by_id=t.approved_by_id,
        approved_by=row.approved_by,
        completed_by_id=t.completed_by_id,
        completed_by=row.completed_by,
        completed_at=t.completed_at,
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


# =====================================================
# CREATE
# =====================================================
async def create_transfer(
    db: AsyncSession,
    payload: TransferCreateSchema,
    ctx: RoleContext,
) -> TransferOutSchema:
    if payload.from_base_id == payload.to_base_id:
        raise ValidationError(
            "Source and destination bases must differ",
            ErrorCode.TRANSFER_SAME_BASE,
        )

    ensure_base_access(ctx, payload.from_base_id)

    async with transaction(db):
        from_base = await get_active_base(db, payload.from_base_id)
        to_base = await get_active_base(db, payload.to_base_id)
        asset_type = await get_active_asset_type(db, payload.asset_type_id)

        transfer = Transfer(
            from_base_id=payload.from_base_id,
            to_base_id=payload.to_base_id,
            asset_type_id=payload.asset_type_id,
            quantity=payload.quantity,
            transfer_date=payload.transfer_date,
            reason=payload.reason,
            notes=payload.notes,
            status=TransferStatus.pending,
            tracking_number=payload.tracking_number or generate_tracking_number(payload.transfer_date),
            requested_by_id=ctx.user_id,
            created_by_id=ctx.user_id,
        )
        db.add(transfer)
        await db.flush()

        # Source loses the stock now; it is committed to transit.
        await decrease_stock(
            db,
            base_id=payload.from_base_id,
            asset_type_id=payload.asset_type_id,
            quantity=payload.quantity,
            movement_type=MovementType.TRANSFER_OUT,
            reference_type=ReferenceType.TRANSFER,
            reference_id=transfer.id,
            actor_id=ctx.user_id,
        )

        await ensure_balance_row(db, payload.to_base_id, payload.asset_type_id)

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.CREATE_TRANSFER,
            tracking_number=transfer.tracking_number,
            quantity=payload.quantity,
            asset_type_name=asset_type.name,
            from_base=from_base.code,
            to_base=to_base.code,
        )

    logger.info(
        "Transfer created",
        extra={
            "user_id": str(ctx.user_id),
            "transfer_id": str(transfer.id),
            "from_base_id": str(payload.from_base_id),
            "to_base_id": str(payload.to_base_id),
            "asset_type_id": str(payload.asset_type_id),
            "quantity": payload.quantity,
        },
    )

    return await get_transfer(db, transfer.id, ctx)


# =====================================================
# STATE MACHINE
# =====================================================
async def update_transfer_status(
    db: AsyncSession,
    transfer_id: uuid.UUID,
    payload: TransferUpdateSchema,
    ctx: RoleContext,
) -> TransferOutSchema:
    async with transaction(db):
        transfer = await db.scalar(
            select(Transfer)
            .where(Transfer.id == transfer_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if not transfer:
            raise NotFoundError("Transfer not found", ErrorCode.TRANSFER_NOT_FOUND)

        ensure_any_base_access(ctx, transfer.from_base_id, transfer.to_base_id)

        old_status = transfer.status
        new_status = payload.status

        if new_status not in ALLOWED_TRANSITIONS[old_status]:
            logger.warning(
                "Invalid transfer transition",
                extra={
                    "user_id": str(ctx.user_id),
                    "transfer_id": str(transfer.id),
                    "from_status": old_status.value,
                    "to_status": new_status.value,
                },
            )
            raise InvalidStateTransition(
                f"Cannot move transfer from {old_status.value} to {new_status.value}",
                details={"current_status": old_status.value, "requested_status": new_status.value},
            )

        if old_status == TransferStatus.completed:
            require_permission(ctx, Permission.TRANSFER_REOPEN)

        if payload.approved_by:
            await get_active_user(db, payload.approved_by)
        if payload.received_by:
            await get_active_user(db, payload.received_by)

        if new_status == TransferStatus.in_transit:
            if old_status == TransferStatus.completed:
                await decrease_stock(
                    db,
                    base_id=transfer.to_base_id,
                    asset_type_id=transfer.asset_type_id,
                    quantity=transfer.quantity,
                    movement_type=MovementType.TRANSFER_IN_REVERSAL,
                    reference_type=ReferenceType.TRANSFER,
                    reference_id=transfer.id,
                    actor_id=ctx.user_id,
                )
                transfer.completed_by_id = None
                transfer.completed_at = None
            transfer.approved_by_id = payload.approved_by or transfer.approved_by_id or ctx.user_id

        elif new_status == TransferStatus.completed:
            await increase_stock(
                db,
                base_id=transfer.to_base_id,
                asset_type_id=transfer.asset_type_id,
                quantity=transfer.quantity,
                movement_type=MovementType.TRANSFER_IN,
                reference_type=ReferenceType.TRANSFER,
                reference_id=transfer.id,
                actor_id=ctx.user_id,
            )
            if payload.approved_by:
                transfer.approved_by_id = payload.approved_by
            transfer.completed_by_id = payload.received_by or ctx.user_id
            transfer.completed_at = datetime.now(timezone.utc)

        elif new_status == TransferStatus.cancelled:
            # Stock was removed from the source at creation.
            await increase_stock(
                db,
                base_id=transfer.from_base_id,
                asset_type_id=transfer.asset_type_id,
                quantity=transfer.quantity,
                movement_type=MovementType.TRANSFER_OUT_REVERSAL,
                reference_type=ReferenceType.TRANSFER,
                reference_id=transfer.id,
                actor_id=ctx.user_id,
            )

        transfer.status = new_status
        transfer.updated_by_id = ctx.user_id
        if payload.notes is not None:
            transfer.notes = payload.notes

        await db.flush()

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.UPDATE_TRANSFER_STATUS,
            tracking_number=transfer.tracking_number,
            old_status=old_status.value,
            new_status=new_status.value,
        )

    logger.info(
        "Transfer status updated",
        extra={
            "user_id": str(ctx.user_id),
            "transfer_id": str(transfer_id),
            "from_status": old_status.value,
            "to_status": new_status.value,
        },
    )

    return await get_transfer(db, transfer_id, ctx)


# =====================================================
# READ
# =====================================================
async def get_transfer(
    db: AsyncSession,
    transfer_id: uuid.UUID,
    ctx: RoleContext,
) -> TransferOutSchema:
    row = (await db.execute(_transfer_query().where(Transfer.id == transfer_id))).first()
    if not row:
        raise NotFoundError("Transfer not found", ErrorCode.TRANSFER_NOT_FOUND)

    ensure_any_base_access(ctx, row.Transfer.from_base_id, row.Transfer.to_base_id)
    return _map_transfer(row)


async def list_transfers(
    db: AsyncSession,
    ctx: RoleContext,
    page: PageParams,
    *,
    base_id: uuid.UUID | None = None,
    asset_type_id: uuid.UUID | None = None,
    status: TransferStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict:
    filters = []

    effective_base_id = scoped_base_id(ctx, base_id)
    if effective_base_id:
        filters.append(
            or_(
                Transfer.from_base_id == effective_base_id,
                Transfer.to_base_id == effective_base_id,
            )
        )
    if asset_type_id:
        filters.append(Transfer.asset_type_id == asset_type_id)
    if status:
        filters.append(Transfer.status == status)
    if start_date:
        filters.append(Transfer.transfer_date >= start_date)
    if end_date:
        filters.append(Transfer.transfer_date <= end_date)

    total = await db.scalar(select(func.count(Transfer.id)).where(*filters))

    rows = (
        await db.execute(
            _transfer_query()
            .where(*filters)
            .order_by(Transfer.transfer_date.desc(), Transfer.created_at.desc())
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([_map_transfer(r) for r in rows], total or 0, page)
