from fastapi import Depends

from military_assets.core.permissions import Permission, RoleContext
from military_assets.core.permissions import require_permission as check_permission
from military_assets.utils.get_user import get_current_user


def require_permission(permission: Permission):
    async def permission_checker(ctx: RoleContext = Depends(get_current_user)) -> RoleContext:
        check_permission(ctx, permission)
        return ctx
    return permission_checker
