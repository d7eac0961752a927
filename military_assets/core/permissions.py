"""Role context and the flat role-to-capability table.

Every workflow entry point consults this module; scoping rules are not
re-derived in routers or services.
"""

import enum
import uuid
from dataclasses import dataclass
from typing import Optional

from military_assets.constants.error_codes import ErrorCode
from military_assets.core.exceptions import ForbiddenError
from military_assets.models.enums.role import Role
from military_assets.utils.logger import get_logger

logger = get_logger("auth.scope")


class Permission(str, enum.Enum):
    LEDGER_READ = "ledger:read"
    PURCHASE_WRITE = "purchase:write"
    TRANSFER_WRITE = "transfer:write"
    TRANSFER_REOPEN = "transfer:reopen"
    ASSIGNMENT_WRITE = "assignment:write"
    EXPENDITURE_WRITE = "expenditure:write"
    ASSET_WRITE = "asset:write"
    USER_VIEW = "user:view"
    USER_MANAGE = "user:manage"
    BASE_MANAGE = "base:manage"
    CATALOG_MANAGE = "catalog:manage"
    ACTIVITY_VIEW = "activity:view"


ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.admin: frozenset(Permission),
    Role.base_commander: frozenset(
        {
            Permission.LEDGER_READ,
            Permission.PURCHASE_WRITE,
            Permission.TRANSFER_WRITE,
            Permission.ASSIGNMENT_WRITE,
            Permission.EXPENDITURE_WRITE,
            Permission.ASSET_WRITE,
            Permission.USER_VIEW,
        }
    ),
    Role.logistics_officer: frozenset(
        {
            Permission.LEDGER_READ,
            Permission.PURCHASE_WRITE,
            Permission.TRANSFER_WRITE,
        }
    ),
}


@dataclass(frozen=True)
class RoleContext:
    user_id: uuid.UUID
    username: str
    role: Role
    base_id: Optional[uuid.UUID] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin

    @property
    def actor_label(self) -> str:
        return self.role.value.replace("_", " ").title()


def has_permission(ctx: RoleContext, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(ctx.role, frozenset())


def require_permission(ctx: RoleContext, permission: Permission) -> None:
    if not has_permission(ctx, permission):
        logger.warning(
            "Role not permitted",
            extra={"user_id": str(ctx.user_id), "role": ctx.role.value, "permission": permission.value},
        )
        raise ForbiddenError(
            f"Role '{ctx.role.value}' is not permitted to perform this action",
            ErrorCode.ROLE_NOT_PERMITTED,
        )


def can_access_base(ctx: RoleContext, base_id: Optional[uuid.UUID]) -> bool:
    if ctx.is_admin:
        return True
    return ctx.base_id is not None and ctx.base_id == base_id


def ensure_base_access(ctx: RoleContext, base_id: Optional[uuid.UUID]) -> None:
    if can_access_base(ctx, base_id):
        return

    logger.warning(
        "Base access denied",
        extra={
            "user_id": str(ctx.user_id),
            "role": ctx.role.value,
            "user_base_id": str(ctx.base_id) if ctx.base_id else None,
            "requested_base_id": str(base_id) if base_id else None,
        },
    )
    raise ForbiddenError(
        "You can only access data for your assigned base",
        ErrorCode.BASE_SCOPE_VIOLATION,
    )


def ensure_any_base_access(ctx: RoleContext, *base_ids: uuid.UUID) -> None:
    if any(can_access_base(ctx, b) for b in base_ids):
        return
    ensure_base_access(ctx, base_ids[0] if base_ids else None)


def scoped_base_id(
    ctx: RoleContext, requested_base_id: Optional[uuid.UUID] = None
) -> Optional[uuid.UUID]:
    """Base filter to apply to a read. None means unrestricted (admin only)."""
    if ctx.is_admin:
        return requested_base_id

    if ctx.base_id is None:
        raise ForbiddenError(
            "No base assigned to this account",
            ErrorCode.NO_BASE_ASSIGNED,
        )

    if requested_base_id is not None and requested_base_id != ctx.base_id:
        ensure_base_access(ctx, requested_base_id)

    return ctx.base_id
