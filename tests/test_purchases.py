"""
Purchase workflow tests.

A purchase adds exactly its quantity to the (base, asset type) balance,
records one PURCHASE journal row and one activity row, and is limited to
the caller's own base unless the caller is an admin.
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select, update

from military_assets.constants.error_codes import ErrorCode
from military_assets.core.exceptions import ForbiddenError, NotFoundError
from military_assets.models.assets.asset_type_models import AssetType
from military_assets.models.inventory.asset_movement_models import AssetMovement
from military_assets.models.support.activity_models import UserActivity
from military_assets.schemas.inventory.purchase_schemas import PurchaseCreateSchema
from military_assets.services.inventory.purchase_service import (
    create_purchase,
    get_purchase,
    list_purchases,
)
from military_assets.utils.pagination import PageParams

from helpers import auth_headers, balance_of, stock


def _payload(seed, quantity=10, **kwargs) -> PurchaseCreateSchema:
    return PurchaseCreateSchema(
        base_id=kwargs.pop("base_id", seed.alpha_id),
        asset_type_id=kwargs.pop("asset_type_id", seed.tank_id),
        quantity=quantity,
        purchase_date=date(2024, 3, 1),
        **kwargs,
    )


class TestCreatePurchase:
    async def test_purchase_increases_balance_by_quantity(self, database, session, seed):
        await create_purchase(session, _payload(seed, 10), seed.admin)
        await create_purchase(session, _payload(seed, 5), seed.admin)

        balance = await balance_of(database, seed.alpha_id, seed.tank_id)
        assert balance == {"current_balance": 15, "available_quantity": 15, "reserved_quantity": 0}

    async def test_total_cost_defaults_to_unit_cost_times_quantity(self, session, seed):
        purchase = await create_purchase(
            session, _payload(seed, 4, unit_cost=Decimal("1250.50"), vendor="Acme Defence"), seed.admin
        )

        assert purchase.total_cost == Decimal("5002.00")
        assert purchase.vendor == "Acme Defence"

    async def test_explicit_total_cost_is_kept(self, session, seed):
        purchase = await create_purchase(
            session,
            _payload(seed, 2, unit_cost=Decimal("10.00"), total_cost=Decimal("15.00")),
            seed.admin,
        )
        assert purchase.total_cost == Decimal("15.00")

    async def test_output_carries_names(self, session, seed):
        purchase = await create_purchase(session, _payload(seed, 1), seed.commander_a)

        assert purchase.base_name == "Fort Alpha"
        assert purchase.asset_type_name == "T-90 Tank"
        assert purchase.created_by == "cmd_alpha"

    async def test_purchase_writes_journal_and_activity(self, session, seed):
        purchase = await create_purchase(session, _payload(seed, 3), seed.logistics_a)

        movement = await session.scalar(select(AssetMovement))
        assert movement.reference_id == purchase.id
        assert movement.quantity_change == 3

        activity = await session.scalar(select(UserActivity))
        assert activity.code == "CREATE_PURCHASE"
        assert "log_alpha" in activity.message

    async def test_commander_cannot_purchase_for_other_base(self, database, session, seed):
        with pytest.raises(ForbiddenError) as exc_info:
            await create_purchase(session, _payload(seed, 5, base_id=seed.bravo_id), seed.commander_a)

        assert exc_info.value.error_code == ErrorCode.BASE_SCOPE_VIOLATION
        balance = await balance_of(database, seed.bravo_id, seed.tank_id)
        assert balance["current_balance"] == 0

    async def test_inactive_asset_type_is_rejected(self, session, seed):
        await session.execute(update(AssetType).where(AssetType.id == seed.rifle_id).values(is_active=False))
        await session.commit()

        with pytest.raises(NotFoundError) as exc_info:
            await create_purchase(session, _payload(seed, 1, asset_type_id=seed.rifle_id), seed.admin)

        assert exc_info.value.error_code == ErrorCode.ASSET_TYPE_NOT_FOUND


class TestReadPurchases:
    async def test_list_is_scoped_to_commander_base(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 3)
        await stock(database, seed.admin, seed.bravo_id, seed.tank_id, 7)

        result = await list_purchases(session, seed.commander_b, PageParams(limit=20, offset=0))

        assert result["pagination"]["total"] == 1
        assert result["items"][0].base_id == seed.bravo_id

    async def test_admin_filters_by_date_range(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 3)

        result = await list_purchases(
            session,
            seed.admin,
            PageParams(limit=20, offset=0),
            start_date=date(2000, 1, 1),
            end_date=date(2000, 12, 31),
        )
        assert result["items"] == []

    async def test_other_base_purchase_is_hidden(self, database, session, seed):
        purchase = await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 3)

        with pytest.raises(ForbiddenError):
            await get_purchase(session, purchase.id, seed.commander_b)


class TestPurchaseApi:
    async def test_create_returns_201_envelope(self, client, database, seed):
        response = await client.post(
            "/purchases",
            json={
                "baseId": str(seed.alpha_id),
                "assetTypeId": str(seed.tank_id),
                "quantity": 10,
                "purchaseDate": "2024-03-01",
                "unitCost": "99.99",
            },
            headers=auth_headers(seed.logistics_a),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["quantity"] == 10
        assert body["data"]["base_name"] == "Fort Alpha"

        balance = await balance_of(database, seed.alpha_id, seed.tank_id)
        assert balance["current_balance"] == 10

    @pytest.mark.parametrize("quantity", [0, -3, "10", 2.5])
    async def test_bad_quantity_is_rejected_before_persistence(self, client, database, seed, quantity):
        response = await client.post(
            "/purchases",
            json={
                "baseId": str(seed.alpha_id),
                "assetTypeId": str(seed.tank_id),
                "quantity": quantity,
                "purchaseDate": "2024-03-01",
            },
            headers=auth_headers(seed.admin),
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        balance = await balance_of(database, seed.alpha_id, seed.tank_id)
        assert balance["current_balance"] == 0

    async def test_unknown_field_is_rejected(self, client, seed):
        response = await client.post(
            "/purchases",
            json={
                "baseId": str(seed.alpha_id),
                "assetTypeId": str(seed.tank_id),
                "quantity": 1,
                "purchaseDate": "2024-03-01",
                "discount": 5,
            },
            headers=auth_headers(seed.admin),
        )
        assert response.status_code == 400

    async def test_commander_other_base_returns_403(self, client, seed):
        response = await client.post(
            "/purchases",
            json={
                "baseId": str(seed.bravo_id),
                "assetTypeId": str(seed.tank_id),
                "quantity": 1,
                "purchaseDate": "2024-03-01",
            },
            headers=auth_headers(seed.commander_a),
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "BASE_SCOPE_VIOLATION"

    async def test_unknown_asset_type_is_404(self, client, database, seed):
        response = await client.post(
            "/purchases",
            json={
                "baseId": str(seed.alpha_id),
                "assetTypeId": str(uuid.uuid4()),
                "quantity": 1,
                "purchaseDate": "2024-03-01",
            },
            headers=auth_headers(seed.admin),
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "ASSET_TYPE_NOT_FOUND"
        assert (await balance_of(database, seed.alpha_id, seed.tank_id))["current_balance"] == 0
