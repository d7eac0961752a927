import uuid

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from military_assets.constants.activity_codes import ActivityCode
from military_assets.constants.error_codes import ErrorCode
from military_assets.core.db import transaction
from military_assets.core.exceptions import ConflictError, NotFoundError, ValidationError
from military_assets.core.permissions import RoleContext, ensure_base_access, scoped_base_id
from military_assets.models.bases.base_models import CommanderHandover, MilitaryBase
from military_assets.models.enums.role import Role
from military_assets.models.inventory.asset_balance_models import AssetBalance
from military_assets.models.users.user_models import User
from military_assets.schemas.bases.base_schemas import (
    BaseCreateSchema,
    BaseDetailSchema,
    BaseOutSchema,
    BaseUpdateSchema,
    CommanderHandoverOutSchema,
    CommanderHandoverSchema,
)
from military_assets.services.lookups import release_commands
from military_assets.utils.activity_helpers import emit_actor_activity
from military_assets.utils.logger import get_logger
from military_assets.utils.pagination import PageParams, paginated

logger = get_logger("bases")

Commander = aliased(User)
PreviousCommander = aliased(User)
NewCommander = aliased(User)


# =====================================================
# MAPPER
# =====================================================
def _base_query():
    return (
        select(MilitaryBase, Commander.username.label("commander_username"))
        .outerjoin(Commander, Commander.id == MilitaryBase.commander_id)
        .execution_options(populate_existing=True)
    )


def _base_fields(row) -> dict:
    b: MilitaryBase = row.MilitaryBase
    return dict(
        id=b.id,
        name=b.name,
        code=b.code,
        location=b.location,
        contact_info=b.contact_info,
        commander_id=b.commander_id,
        commander_username=row.commander_username,
        is_active=b.is_active,
        created_at=b.created_at,
        updated_at=b.updated_at,
    )


async def _load_for_update(db: AsyncSession, base_id: uuid.UUID) -> MilitaryBase:
    base = await db.scalar(
        select(MilitaryBase)
        .where(MilitaryBase.id == base_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if not base:
        raise NotFoundError("Base not found", ErrorCode.BASE_NOT_FOUND)
    return base


async def _ensure_code_free(db: AsyncSession, code: str, exclude_id: uuid.UUID | None = None):
    stmt = select(MilitaryBase.id).where(func.upper(MilitaryBase.code) == code.upper())
    if exclude_id:
        stmt = stmt.where(MilitaryBase.id != exclude_id)
    if await db.scalar(stmt):
        raise ConflictError("Base code already exists", ErrorCode.BASE_CODE_EXISTS)


# =====================================================
# CREATE / UPDATE
# =====================================================
async def create_base(
    db: AsyncSession,
    payload: BaseCreateSchema,
    ctx: RoleContext,
) -> BaseDetailSchema:
    code = payload.code.upper()

    async with transaction(db):
        await _ensure_code_free(db, code)

        base = MilitaryBase(
            name=payload.name,
            code=code,
            location=payload.location,
            contact_info=payload.contact_info,
            created_by_id=ctx.user_id,
        )
        db.add(base)
        await db.flush()

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.CREATE_BASE,
            base_name=base.name,
            base_code=base.code,
        )

    logger.info("Base created", extra={"base_id": str(base.id), "code": code, "user_id": str(ctx.user_id)})
    return await get_base(db, base.id, ctx)


async def update_base(
    db: AsyncSession,
    base_id: uuid.UUID,
    payload: BaseUpdateSchema,
    ctx: RoleContext,
) -> BaseDetailSchema:
    async with transaction(db):
        base = await _load_for_update(db, base_id)

        data = payload.model_dump(exclude_unset=True)
        if data.get("code"):
            data["code"] = data["code"].upper()
            if data["code"] != base.code:
                await _ensure_code_free(db, data["code"], exclude_id=base.id)

        changes = []
        for field, value in data.items():
            if field in {"name", "code", "location"} and value is None:
                continue
            if getattr(base, field) != value:
                setattr(base, field, value)
                changes.append(f"{field}={value}")

        if changes:
            base.updated_by_id = ctx.user_id
            await db.flush()
            await emit_actor_activity(
                db,
                ctx,
                ActivityCode.UPDATE_BASE,
                base_code=base.code,
                changes=", ".join(changes),
            )

    return await get_base(db, base_id, ctx)


async def set_base_active(
    db: AsyncSession,
    base_id: uuid.UUID,
    is_active: bool,
    ctx: RoleContext,
) -> BaseDetailSchema:
    async with transaction(db):
        base = await _load_for_update(db, base_id)

        if base.is_active != is_active:
            base.is_active = is_active
            base.updated_by_id = ctx.user_id
            await db.flush()

            await emit_actor_activity(
                db,
                ctx,
                ActivityCode.ACTIVATE_BASE if is_active else ActivityCode.DEACTIVATE_BASE,
                base_code=base.code,
            )
            logger.info(
                "Base activation changed",
                extra={"base_id": str(base_id), "is_active": is_active, "user_id": str(ctx.user_id)},
            )

    return await get_base(db, base_id, ctx)


# =====================================================
# COMMANDER HANDOVER
# =====================================================
async def handover_command(
    db: AsyncSession,
    base_id: uuid.UUID,
    payload: CommanderHandoverSchema,
    ctx: RoleContext,
) -> CommanderHandoverOutSchema:
    async with transaction(db):
        base = await _load_for_update(db, base_id)

        if not base.is_active:
            raise ValidationError("Cannot hand over command of an inactive base", ErrorCode.BASE_INACTIVE)

        commander = await db.scalar(
            select(User).where(User.id == payload.new_commander_id).with_for_update()
        )
        if not commander or not commander.is_active or commander.role != Role.base_commander:
            raise ValidationError(
                "New commander must be an active base commander",
                ErrorCode.BASE_INVALID_COMMANDER,
            )

        if base.commander_id == commander.id:
            raise ValidationError(
                "User already commands this base",
                ErrorCode.BASE_INVALID_COMMANDER,
            )

        handover = CommanderHandover(
            base_id=base.id,
            previous_commander_id=base.commander_id,
            new_commander_id=commander.id,
            handover_date=payload.handover_date,
            notes=payload.handover_notes,
            performed_by_id=ctx.user_id,
        )
        db.add(handover)

        base.commander_id = commander.id
        base.updated_by_id = ctx.user_id
        commander.base_id = base.id
        await release_commands(db, commander.id, keep_base_id=base.id)

        await db.flush()

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.COMMANDER_HANDOVER,
            base_code=base.code,
            new_commander=commander.username,
        )

    logger.info(
        "Commander handover",
        extra={
            "base_id": str(base_id),
            "previous_commander_id": str(handover.previous_commander_id) if handover.previous_commander_id else None,
            "new_commander_id": str(handover.new_commander_id),
            "user_id": str(ctx.user_id),
        },
    )

    history = await list_handovers(db, base_id, ctx)
    return next(h for h in history if h.id == handover.id)


async def list_handovers(
    db: AsyncSession,
    base_id: uuid.UUID,
    ctx: RoleContext,
) -> list[CommanderHandoverOutSchema]:
    ensure_base_access(ctx, base_id)

    exists = await db.scalar(select(MilitaryBase.id).where(MilitaryBase.id == base_id))
    if not exists:
        raise NotFoundError("Base not found", ErrorCode.BASE_NOT_FOUND)

    rows = (
        await db.execute(
            select(
                CommanderHandover,
                PreviousCommander.username.label("previous_commander_username"),
                NewCommander.username.label("new_commander_username"),
            )
            .outerjoin(PreviousCommander, PreviousCommander.id == CommanderHandover.previous_commander_id)
            .outerjoin(NewCommander, NewCommander.id == CommanderHandover.new_commander_id)
            .where(CommanderHandover.base_id == base_id)
            .order_by(CommanderHandover.handover_date.desc(), CommanderHandover.created_at.desc())
            .execution_options(populate_existing=True)
        )
    ).all()

    return [
        CommanderHandoverOutSchema(
            id=r.CommanderHandover.id,
            base_id=r.CommanderHandover.base_id,
            previous_commander_id=r.CommanderHandover.previous_commander_id,
            previous_commander_username=r.previous_commander_username,
            new_commander_id=r.CommanderHandover.new_commander_id,
            new_commander_username=r.new_commander_username,
            handover_date=r.CommanderHandover.handover_date,
            notes=r.CommanderHandover.notes,
            performed_by_id=r.CommanderHandover.performed_by_id,
            created_at=r.CommanderHandover.created_at,
        )
        for r in rows
    ]


# =====================================================
# READ
# =====================================================
async def get_base(
    db: AsyncSession,
    base_id: uuid.UUID,
    ctx: RoleContext,
) -> BaseDetailSchema:
    ensure_base_access(ctx, base_id)

    row = (await db.execute(_base_query().where(MilitaryBase.id == base_id))).first()
    if not row:
        raise NotFoundError("Base not found", ErrorCode.BASE_NOT_FOUND)

    summary = (
        await db.execute(
            select(
                func.count(AssetBalance.asset_type_id).label("asset_type_count"),
                func.coalesce(func.sum(AssetBalance.current_balance), 0).label("total_current_balance"),
                func.coalesce(func.sum(AssetBalance.available_quantity), 0).label("total_available_quantity"),
                func.coalesce(func.sum(AssetBalance.reserved_quantity), 0).label("total_reserved_quantity"),
            ).where(AssetBalance.base_id == base_id)
        )
    ).one()

    return BaseDetailSchema(**_base_fields(row), **summary._mapping)


async def list_bases(
    db: AsyncSession,
    ctx: RoleContext,
    page: PageParams,
    *,
    is_active: bool | None = None,
    search: str | None = None,
) -> dict:
    filters = []

    effective_base_id = scoped_base_id(ctx)
    if effective_base_id:
        filters.append(MilitaryBase.id == effective_base_id)
    if is_active is not None:
        filters.append(MilitaryBase.is_active.is_(is_active))
    if search:
        filters.append(MilitaryBase.name.ilike(f"%{search}%"))

    total = await db.scalar(select(func.count(MilitaryBase.id)).where(*filters))
    rows = (
        await db.execute(
            _base_query()
            .where(*filters)
            .order_by(MilitaryBase.code)
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([BaseOutSchema(**_base_fields(r)) for r in rows], total or 0, page)
