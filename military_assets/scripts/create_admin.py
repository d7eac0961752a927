import asyncio
import os

from sqlalchemy import select

from military_assets.core.db import Database
from military_assets.core.security import hash_password
from military_assets.models.enums.role import Role
from military_assets.models.users.user_models import User
from military_assets.utils.logger import get_logger

logger = get_logger("scripts.create_admin")


async def create_admin(database: Database, username: str, password: str) -> bool:
    async with database.session() as session:
        exists = await session.scalar(select(User.id).where(User.username == username))
        if exists:
            logger.info("Admin user already exists", extra={"username": username})
            return False

        session.add(
            User(
                username=username,
                password_hash=hash_password(password),
                role=Role.admin,
                is_active=True,
            )
        )
        await session.commit()
        logger.info("Admin user created", extra={"username": username})
        return True


async def main():
    database = Database.from_settings()
    try:
        await create_admin(
            database,
            os.getenv("ADMIN_USERNAME", "admin"),
            os.environ["ADMIN_PASSWORD"],
        )
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
