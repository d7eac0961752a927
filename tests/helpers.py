from datetime import date

from military_assets.core.db import Database
from military_assets.core.permissions import RoleContext
from military_assets.core.security import create_access_token
from military_assets.models.assets.asset_models import Asset
from military_assets.models.users.user_models import User
from military_assets.schemas.inventory.purchase_schemas import PurchaseCreateSchema
from military_assets.services.inventory.asset_balance_service import get_balance
from military_assets.services.inventory.purchase_service import create_purchase

TEST_PASSWORD = "Password123!"


def role_context(user: User) -> RoleContext:
    return RoleContext(user_id=user.id, username=user.username, role=user.role, base_id=user.base_id)


async def balance_of(database: Database, base_id, asset_type_id) -> dict:
    """Ledger figures read through a fresh session."""
    async with database.session() as s:
        return await get_balance(s, base_id, asset_type_id)


async def stock(database: Database, ctx: RoleContext, base_id, asset_type_id, quantity: int):
    async with database.session() as s:
        return await create_purchase(
            s,
            PurchaseCreateSchema(
                base_id=base_id,
                asset_type_id=asset_type_id,
                quantity=quantity,
                purchase_date=date.today(),
            ),
            ctx,
        )


async def register_unit(database: Database, base_id, asset_type_id, serial: str) -> Asset:
    async with database.session() as s:
        asset = Asset(base_id=base_id, asset_type_id=asset_type_id, serial_number=serial)
        s.add(asset)
        await s.commit()
        return asset


def auth_headers(ctx: RoleContext, token_version: int = 0) -> dict:
    token = create_access_token(subject=str(ctx.user_id), token_version=token_version)
    return {"Authorization": f"Bearer {token}"}
