import uuid

from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.constants.activity_codes import ActivityCode
from military_assets.constants.error_codes import ErrorCode
from military_assets.core.db import transaction
from military_assets.core.exceptions import ConflictError, NotFoundError, ValidationError
from military_assets.core.permissions import RoleContext, ensure_base_access, scoped_base_id
from military_assets.core.security import hash_password
from military_assets.models.bases.base_models import MilitaryBase
from military_assets.models.enums.role import Role
from military_assets.models.users.user_models import RefreshToken, User
from military_assets.schemas.users.user_schemas import (
    UserCreateSchema,
    UserOutSchema,
    UserUpdateSchema,
)
from military_assets.services.lookups import get_active_base, release_commands
from military_assets.utils.activity_helpers import emit_actor_activity
from military_assets.utils.logger import get_logger
from military_assets.utils.pagination import PageParams, paginated

logger = get_logger("users")


def _user_query():
    return (
        select(User, MilitaryBase.name.label("base_name"))
        .outerjoin(MilitaryBase, MilitaryBase.id == User.base_id)
        .execution_options(populate_existing=True)
    )


def _map_user(row) -> UserOutSchema:
    u: User = row.User
    return UserOutSchema(
        id=u.id,
        username=u.username,
        email=u.email,
        first_name=u.first_name,
        last_name=u.last_name,
        role=u.role,
        base_id=u.base_id,
        base_name=row.base_name,
        is_active=u.is_active,
        last_login=u.last_login,
        created_at=u.created_at,
    )


async def _ensure_unique(db: AsyncSession, username: str | None, email: str | None, exclude_id=None):
    clauses = []
    if username:
        clauses.append(func.lower(User.username) == username.lower())
    if email:
        clauses.append(func.lower(User.email) == email.lower())
    if not clauses:
        return

    stmt = select(User.id).where(or_(*clauses))
    if exclude_id:
        stmt = stmt.where(User.id != exclude_id)

    if await db.scalar(stmt):
        raise ConflictError("User with this username or email already exists", ErrorCode.USER_EXISTS)


async def _revoke_sessions(db: AsyncSession, user: User):
    user.token_version += 1
    await db.execute(
        update(RefreshToken)
        .where(RefreshToken.user_id == user.id, RefreshToken.revoked.is_(False))
        .values(revoked=True)
    )


# =========================
# CREATE USER
# =========================
async def create_user(
    db: AsyncSession,
    payload: UserCreateSchema,
    ctx: RoleContext,
) -> UserOutSchema:
    if payload.role != Role.admin and not payload.base_id:
        raise ValidationError(
            f"Role {payload.role.value} requires a home base",
            ErrorCode.USER_BASE_REQUIRED,
        )

    async with transaction(db):
        await _ensure_unique(db, payload.username, payload.email)
        if payload.base_id:
            await get_active_base(db, payload.base_id)

        user = User(
            username=payload.username,
            email=payload.email,
            first_name=payload.first_name,
            last_name=payload.last_name,
            password_hash=hash_password(payload.password),
            role=payload.role,
            base_id=payload.base_id,
        )
        db.add(user)
        await db.flush()

        await emit_actor_activity(
            db,
            ctx,
            ActivityCode.CREATE_USER,
            target_username=user.username,
            target_role=user.role.value,
        )

    logger.info("User created", extra={"user_id": str(user.id), "role": user.role.value, "created_by": str(ctx.user_id)})
    return await get_user(db, user.id, ctx)


# =========================
# UPDATE USER
# =========================
async def update_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    payload: UserUpdateSchema,
    ctx: RoleContext,
) -> UserOutSchema:
    async with transaction(db):
        user = await db.scalar(
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if not user:
            raise NotFoundError("User not found", ErrorCode.USER_NOT_FOUND)

        data = payload.model_dump(exclude_unset=True)
        password = data.pop("password", None)

        if data.get("is_active") is False and user.id == ctx.user_id:
            raise ValidationError("You cannot deactivate your own account", ErrorCode.USER_SELF_DEACTIVATION)

        new_role = data.get("role") or user.role
        new_base_id = data["base_id"] if "base_id" in data else user.base_id
        if new_role != Role.admin and not new_base_id:
            raise ValidationError(
                f"Role {new_role.value} requires a home base",
                ErrorCode.USER_BASE_REQUIRED,
            )
        if data.get("base_id") and data["base_id"] != user.base_id:
            await get_active_base(db, data["base_id"])
        if data.get("email"):
            await _ensure_unique(db, None, data["email"], exclude_id=user.id)

        changes = []
        for field, value in data.items():
            if field in {"role", "is_active"} and value is None:
                continue
            if getattr(user, field) != value:
                setattr(user, field, value)
                changes.append(f"{field}={getattr(value, 'value', value)}")

        if password:
            user.password_hash = hash_password(password)
            changes.append("password reset")

        if password or data.get("is_active") is False:
            await _revoke_sessions(db, user)

        # a user keeps command only of their home base, and only as an active base commander
        if not user.is_active or user.role != Role.base_commander:
            await release_commands(db, user.id)
        else:
            await release_commands(db, user.id, keep_base_id=user.base_id)

        if changes:
            await db.flush()
            await emit_actor_activity(
                db,
                ctx,
                ActivityCode.UPDATE_USER,
                target_username=user.username,
                changes=", ".join(changes),
            )

    logger.info("User updated", extra={"user_id": str(user_id), "updated_by": str(ctx.user_id)})
    return await get_user(db, user_id, ctx)


async def deactivate_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    ctx: RoleContext,
) -> UserOutSchema:
    if user_id == ctx.user_id:
        raise ValidationError("You cannot deactivate your own account", ErrorCode.USER_SELF_DEACTIVATION)

    async with transaction(db):
        user = await db.scalar(
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if not user:
            raise NotFoundError("User not found", ErrorCode.USER_NOT_FOUND)

        if user.is_active:
            user.is_active = False
            await _revoke_sessions(db, user)
            await release_commands(db, user.id)
            await db.flush()

            await emit_actor_activity(
                db,
                ctx,
                ActivityCode.DEACTIVATE_USER,
                target_username=user.username,
            )

    logger.info("User deactivated", extra={"user_id": str(user_id), "deactivated_by": str(ctx.user_id)})
    return await get_user(db, user_id, ctx)


# =========================
# READ
# =========================
async def get_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    ctx: RoleContext,
) -> UserOutSchema:
    row = (await db.execute(_user_query().where(User.id == user_id))).first()
    if not row:
        raise NotFoundError("User not found", ErrorCode.USER_NOT_FOUND)

    if row.User.id != ctx.user_id:
        ensure_base_access(ctx, row.User.base_id)

    return _map_user(row)


async def list_users(
    db: AsyncSession,
    ctx: RoleContext,
    page: PageParams,
    *,
    base_id: uuid.UUID | None = None,
    role: Role | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> dict:
    filters = []

    effective_base_id = scoped_base_id(ctx, base_id)
    if effective_base_id:
        filters.append(User.base_id == effective_base_id)
    if role:
        filters.append(User.role == role)
    if is_active is not None:
        filters.append(User.is_active.is_(is_active))
    if search:
        filters.append(
            or_(
                User.username.ilike(f"%{search}%"),
                User.email.ilike(f"%{search}%"),
            )
        )

    total = await db.scalar(select(func.count(User.id)).where(*filters))
    rows = (
        await db.execute(
            _user_query()
            .where(*filters)
            .order_by(User.username)
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([_map_user(r) for r in rows], total or 0, page)
