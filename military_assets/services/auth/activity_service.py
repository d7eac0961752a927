# military_assets/services/auth/activity_service.py

import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from military_assets.models.support.activity_models import UserActivity
from military_assets.schemas.auth.activity_schemas import UserActivityOut
from military_assets.utils.pagination import PageParams, paginated


async def list_user_activities(
    db: AsyncSession,
    page: PageParams,
    *,
    user_id: uuid.UUID | None = None,
    code: str | None = None,
    search: str | None = None,
) -> dict:
    filters = []

    if user_id:
        filters.append(UserActivity.user_id == user_id)
    if code:
        filters.append(UserActivity.code == code)
    if search:
        filters.append(
            UserActivity.message.ilike(f"%{search}%")
            | UserActivity.username_snapshot.ilike(f"%{search}%")
        )

    total = await db.scalar(select(func.count(UserActivity.id)).where(*filters))

    rows = (
        await db.scalars(
            select(UserActivity)
            .where(*filters)
            .order_by(UserActivity.created_at.desc())
            .limit(page.limit)
            .offset(page.offset)
        )
    ).all()

    return paginated([UserActivityOut.model_validate(r) for r in rows], total or 0, page)
