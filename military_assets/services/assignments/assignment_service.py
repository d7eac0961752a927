"""Assignment workflow: one physical asset on loan to one user.

Creating an assignment reserves one unit of the asset's (base, type) balance.
Returning releases it; losing or damaging it writes the reserved unit off.
"""

import uuid
from datetime import date

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from military_assets.constants.activity_codes import ActivityCode
from military_assets.constants.error_codes import ErrorCode
from military_assets.constants.movement_type import MovementType, ReferenceType
from military_assets.core.db import transaction
from military_assets.core.exceptions import (
    AssetNotAvailable,
    InvalidStateTransition,
    NotFoundError,
)
from military_assets.core.permissions import RoleContext, ensure_base_access, scoped_base_id
from military_assets.models.assets.asset_models import Asset
from military_assets.models.assets.asset_type_models import AssetType
from military_assets.models.assignments.assignment_models import Assignment
from military_assets.models.bases.base_models import MilitaryBase
from military_assets.models.enums.asset_status import AssetStatus
from military_assets.models.enums.assignment_status import AssignmentStatus
from military_assets.models.users.user_models import User
from military_assets.schemas.assignments.assignment_schemas import (
    AssignmentCreateSchema,
    AssignmentOutSchema,
    AssignmentUpdateSchema,
)
from military_assets.services.inventory.asset_balance_service import (
    decrease_stock,
    release,
    reserve,
)
from military_assets.services.lookups import get_active_user
from military_assets.utils.activity_helpers import emit_actor_activity
from military_assets.utils.logger import get_logger
from military_assets.utils.pagination import PageParams, paginated

logger = get_logger("workflow.assignment")

# Terminal assignment status -> resulting asset status
TERMINAL_ASSET_STATUS = {
    AssignmentStatus.returned: AssetStatus.available,
    AssignmentStatus.lost: AssetStatus.lost,
    AssignmentStatus.damaged: AssetStatus.damaged,
}

Assignee = aliased(User)
Assigner = aliased(User)


# =====================================================
# MAPPER
# =====================================================
def _assignment_query():
    return (
        select(
            Assignment,
            Asset.serial_number,
            Asset.asset_type_id,
            Asset.base_id,
            AssetType.name.label("asset_type_name"),
            MilitaryBase.name.label("base_name"),
            Assignee.username.label("assigned_to_username"),
            Assigner.username.label("assigned_by"),
        )
        .join(Asset, Asset.id == Assignment.asset_id)
        .join(AssetType, AssetType.id == Asset.asset_type_id)
        .join(MilitaryBase, MilitaryBase.id == Asset.base_id)
        .join(Assignee, Assignee.id == Assignment.assigned_to_user_id)
        .outerjoin(Assigner, Assigner.id == Assignment.assigned_by_id)
        .execution_options(populate_existing=True)
    )


def _map_assignment(row) -> AssignmentOutSchema:
    a: Assignment = row.Assignment
    return AssignmentOutSchema(
        id=a.id,
        asset_id=a.asset_id,
        serial_number=row.serial_number,
        asset_type_id=row.asset_type_id,
        asset_type_name=row.asset_type_name,
        base_id=row.base_id,
        base_name=row.base_name,
        assigned_to_user_id=a.assigned_to_user_id,
        assigned_to_username=row.assigned_to_username,
        assigned_by_id=a.assigned_by_id,
        assigned_by=row.assigned_by,
        assignment_date=a.assignment_date,
        expected_return_date=a.expected_return_date,
        actual_return_date=a.actual_return_date,
        status=a.status,
        purpose=a.purpose,
        notes=a.notes,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )


async def _get_asset(db: AsyncSession, asset_id: uuid.UUID) -> Asset:
    asset = await db.scalar(
        select(Asset)
        .where(Asset.id == asset_id)
        .execution_options(populate_existing=True)
    )
    if not asset:
        raise NotFoundError("Asset not found", ErrorCode.ASSET_NOT_FOUND)
    return asset


# =====================================================
# CREATE
# =====================================================
async def create_assignment(
    db: AsyncSession,
    payload: AssignmentCreateSchema,
    ctx: RoleContext,
) -> AssignmentOutSchema:
    async with transaction(db):
        asset = await _get_asset(db, payload.asset_id)
        ensure_base_access(ctx, asset.base_id)

        if asset.current_status != AssetStatus.available:
            raise AssetNotAvailable(
                f"Asset is {asset.current_status.value}, not available",
                details={"asset_id": str(asset.id), "current_status": asset.current_status.value},
            )

        assignee = await get_active_user(db, payload.assigned_to_user_id)

        # Flip the status only if nobody else took the asset in the meantime.
        result = await db.execute(
            update(Asset)
            .where(Asset.id == asset.id, Asset.current_status == AssetStatus.available)
            .values(current_status=AssetStatus.assigned, updated_by_id=ctx.user_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise AssetNotAvailable(
                "Asset is no longer available",
                details={"asset_id": str(asset.id)},
            )

        assignment = Assignment(
            asset_id=asset.id,
            assigned_to_user_id=assignee.id,
            assigned_by_id=ctx.user_id,
            assignment_date=payload.assignment_date,
            expected_return_date=payload.expected_return_date,
            status=AssignmentStatus.active,
            purpose=payload.purpose,
            notes=payload.notes,
            created_by_id=ctx.user_id,
        )
        db.add(assignment)
        await db.flush()

        await reserve(
            db,
            base_id=asset.base_id,
            asset_type_id=asset.asset_type_id,
            quantity=1,
            reference_id=assignment.id,
            actor_id=ctx.user_id,
        )

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.CREATE_ASSIGNMENT,
            serial_number=asset.serial_number or str(asset.id),
            assignee=assignee.username,
        )

    logger.info(
        "Asset assigned",
        extra={
            "user_id": str(ctx.user_id),
            "assignment_id": str(assignment.id),
            "asset_id": str(asset.id),
            "assigned_to_user_id": str(assignee.id),
            "base_id": str(asset.base_id),
        },
    )

    return await get_assignment(db, assignment.id, ctx)


# =====================================================
# UPDATE (return / lost / damaged)
# =====================================================
async def update_assignment_status(
    db: AsyncSession,
    assignment_id: uuid.UUID,
    payload: AssignmentUpdateSchema,
    ctx: RoleContext,
) -> AssignmentOutSchema:
    async with transaction(db):
        assignment = await db.scalar(
            select(Assignment)
            .where(Assignment.id == assignment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if not assignment:
            raise NotFoundError("Assignment not found", ErrorCode.ASSIGNMENT_NOT_FOUND)

        asset = await _get_asset(db, assignment.asset_id)
        ensure_base_access(ctx, asset.base_id)

        old_status = assignment.status
        new_status = payload.status

        if new_status == old_status:
            logger.info(
                "Assignment status unchanged",
                extra={"assignment_id": str(assignment.id), "status": old_status.value},
            )
            return await get_assignment(db, assignment.id, ctx)

        if old_status != AssignmentStatus.active or new_status == AssignmentStatus.active:
            raise InvalidStateTransition(
                f"Cannot move assignment from {old_status.value} to {new_status.value}",
                details={"current_status": old_status.value, "requested_status": new_status.value},
            )

        if new_status == AssignmentStatus.returned:
            await release(
                db,
                base_id=asset.base_id,
                asset_type_id=asset.asset_type_id,
                quantity=1,
                reference_id=assignment.id,
                actor_id=ctx.user_id,
            )
            assignment.actual_return_date = payload.actual_return_date or date.today()
        else:
            await decrease_stock(
                db,
                base_id=asset.base_id,
                asset_type_id=asset.asset_type_id,
                quantity=1,
                movement_type=MovementType.ASSIGNMENT_WRITE_OFF,
                reference_type=ReferenceType.ASSIGNMENT,
                reference_id=assignment.id,
                actor_id=ctx.user_id,
                from_reserved=True,
            )
            assignment.actual_return_date = payload.actual_return_date

        asset.current_status = TERMINAL_ASSET_STATUS[new_status]
        asset.updated_by_id = ctx.user_id

        assignment.status = new_status
        assignment.updated_by_id = ctx.user_id
        if payload.notes is not None:
            assignment.notes = payload.notes

        await db.flush()

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.UPDATE_ASSIGNMENT_STATUS,
            serial_number=asset.serial_number or str(asset.id),
            new_status=new_status.value,
        )

    logger.info(
        "Assignment status updated",
        extra={
            "user_id": str(ctx.user_id),
            "assignment_id": str(assignment_id),
            "from_status": old_status.value,
            "to_status": new_status.value,
        },
    )

    return await get_assignment(db, assignment_id, ctx)


# =====================================================
# READ
# =====================================================
async def get_assignment(
    db: AsyncSession,
    assignment_id: uuid.UUID,
    ctx: RoleContext,
) -> AssignmentOutSchema:
    row = (await db.execute(_assignment_query().where(Assignment.id == assignment_id))).first()
    if not row:
        raise NotFoundError("Assignment not found", ErrorCode.ASSIGNMENT_NOT_FOUND)

    ensure_base_access(ctx, row.base_id)
    return _map_assignment(row)


async def list_assignments(
    db: AsyncSession,
    ctx: RoleContext,
    page: PageParams,
    *,
    base_id: uuid.UUID | None = None,
    status: AssignmentStatus | None = None,
    asset_id: uuid.UUID | None = None,
    assigned_to_user_id: uuid.UUID | None = None,
) -> dict:
    filters = []

    effective_base_id = scoped_base_id(ctx, base_id)
    if effective_base_id:
        filters.append(Asset.base_id == effective_base_id)
    if status:
        filters.append(Assignment.status == status)
    if asset_id:
        filters.append(Assignment.asset_id == asset_id)
    if assigned_to_user_id:
        filters.append(Assignment.assigned_to_user_id == assigned_to_user_id)

    total = await db.scalar(
        select(func.count(Assignment.id))
        .join(Asset, Asset.id == Assignment.asset_id)
        .where(*filters)
    )

    rows = (
        await db.execute(
            _assignment_query()
            .where(*filters)
            .order_by(Assignment.assignment_date.desc(), Assignment.created_at.desc())
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([_map_assignment(r) for r in rows], total or 0, page)
