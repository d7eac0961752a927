import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.constants.activity_codes import ActivityCode
from military_assets.constants.activity_templates import ACTIVITY_TEMPLATES
from military_assets.core.permissions import RoleContext
from military_assets.models.support.activity_models import UserActivity


def render_activity(code: ActivityCode, **context) -> str:
    """Fill the template for ``code``; a missing template or key is a programming error."""
    if code not in ACTIVITY_TEMPLATES:
        raise ValueError(f"No activity template for {code.value}")
    try:
        return ACTIVITY_TEMPLATES[code].format(**context)
    except KeyError as exc:
        raise ValueError(f"Activity {code.value} needs context key {exc.args[0]!r}")


async def emit_activity(
    db: AsyncSession,
    *,
    user_id: uuid.UUID | None,
    username: str,
    code: ActivityCode,
    **context,
):
    # added to the caller's transaction; commits or rolls back with the action itself
    db.add(
        UserActivity(
            user_id=user_id,
            username_snapshot=username,
            code=code.value,
            message=render_activity(code, **context),
        )
    )


async def emit_actor_activity(db: AsyncSession, ctx: RoleContext, code: ActivityCode, **context):
    await emit_activity(
        db,
        user_id=ctx.user_id,
        username=ctx.username,
        code=code,
        actor_role=ctx.actor_label,
        actor_username=ctx.username,
        **context,
    )
