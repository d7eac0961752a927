"""
Transfer workflow tests.

Stock leaves the source when a transfer is created and reaches the
destination on completion. Cancelling gives it back to the source and
reopening a completed transfer takes it back off the destination.
"""

import asyncio
import uuid
from dataclasses import replace
from datetime import date

import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import select

from military_assets.constants.error_codes import ErrorCode
from military_assets.constants.movement_type import MovementType
from military_assets.core.exceptions import (
    ForbiddenError,
    InsufficientBalance,
    InvalidStateTransition,
)
from military_assets.models.enums.transfer_status import TransferStatus
from military_assets.models.inventory.asset_movement_models import AssetMovement
from military_assets.models.inventory.transfer_models import Transfer
from military_assets.schemas.inventory.transfer_schemas import (
    TransferCreateSchema,
    TransferUpdateSchema,
)
from military_assets.services.inventory.transfer_service import (
    create_transfer,
    get_transfer,
    list_transfers,
    update_transfer_status,
)
from military_assets.utils.pagination import PageParams

from helpers import auth_headers, balance_of, stock


def _request(seed, quantity, **kwargs) -> TransferCreateSchema:
    return TransferCreateSchema(
        from_base_id=kwargs.pop("from_base_id", seed.alpha_id),
        to_base_id=kwargs.pop("to_base_id", seed.bravo_id),
        asset_type_id=seed.tank_id,
        quantity=quantity,
        transfer_date=date(2024, 5, 10),
        **kwargs,
    )


async def _move(session, transfer_id, status, ctx, **kwargs):
    return await update_transfer_status(
        session, transfer_id, TransferUpdateSchema(status=status, **kwargs), ctx
    )


class TestTransferLifecycle:
    async def test_full_lifecycle_moves_stock_between_bases(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 20)

        transfer = await create_transfer(session, _request(seed, 8), seed.commander_a)

        assert transfer.status == TransferStatus.pending
        assert transfer.tracking_number.startswith("TRF-20240510-")
        assert (await balance_of(database, seed.alpha_id, seed.tank_id))["current_balance"] == 12
        assert (await balance_of(database, seed.bravo_id, seed.tank_id))["current_balance"] == 0

        in_transit = await _move(session, transfer.id, TransferStatus.in_transit, seed.commander_a)
        assert in_transit.approved_by == "cmd_alpha"
        assert (await balance_of(database, seed.bravo_id, seed.tank_id))["current_balance"] == 0

        completed = await _move(
            session,
            transfer.id,
            TransferStatus.completed,
            seed.commander_b,
            received_by=seed.commander_b.user_id,
        )

        assert completed.status == TransferStatus.completed
        assert completed.completed_by == "cmd_bravo"
        assert completed.completed_at is not None
        assert await balance_of(database, seed.alpha_id, seed.tank_id) == {
            "current_balance": 12,
            "available_quantity": 12,
            "reserved_quantity": 0,
        }
        assert await balance_of(database, seed.bravo_id, seed.tank_id) == {
            "current_balance": 8,
            "available_quantity": 8,
            "reserved_quantity": 0,
        }

    async def test_journal_records_out_and_in(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 5)
        transfer = await create_transfer(session, _request(seed, 5), seed.admin)
        await _move(session, transfer.id, TransferStatus.completed, seed.admin)

        rows = (
            await session.execute(
                select(AssetMovement.movement_type, AssetMovement.base_id, AssetMovement.quantity_change)
                .where(AssetMovement.reference_id == transfer.id)
                .order_by(AssetMovement.quantity_change)
            )
        ).all()

        assert [(r.movement_type, r.base_id, r.quantity_change) for r in rows] == [
            (MovementType.TRANSFER_OUT.value, seed.alpha_id, -5),
            (MovementType.TRANSFER_IN.value, seed.bravo_id, 5),
        ]

    async def test_destination_commander_sees_pending_transfer(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 5)
        await create_transfer(session, _request(seed, 2), seed.admin)

        result = await list_transfers(session, seed.commander_b, PageParams(limit=20, offset=0))
        assert result["pagination"]["total"] == 1


class TestTransferPreconditions:
    async def test_insufficient_stock_leaves_balances_untouched(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 3)

        with pytest.raises(InsufficientBalance):
            await create_transfer(session, _request(seed, 4), seed.commander_a)

        assert (await balance_of(database, seed.alpha_id, seed.tank_id))["current_balance"] == 3
        assert await session.scalar(select(Transfer.id)) is None

    def test_same_base_is_rejected_by_schema(self, seed):
        with pytest.raises(SchemaValidationError):
            _request(seed, 1, to_base_id=seed.alpha_id)

    async def test_commander_cannot_send_from_other_base(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 5)

        with pytest.raises(ForbiddenError):
            await create_transfer(session, _request(seed, 1), seed.commander_b)

        assert (await balance_of(database, seed.alpha_id, seed.tank_id))["current_balance"] == 5

    async def test_custom_tracking_number_is_kept(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 5)
        transfer = await create_transfer(session, _request(seed, 1, tracking_number="CONVOY-7"), seed.admin)
        assert transfer.tracking_number == "CONVOY-7"


class TestConcurrentTransfers:
    async def test_racing_transfers_cannot_overdraw_source(self, database, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 10)

        async def attempt():
            async with database.session() as s:
                return await create_transfer(s, _request(seed, 6), seed.commander_a)

        results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientBalance)
        assert await balance_of(database, seed.alpha_id, seed.tank_id) == {
            "current_balance": 4,
            "available_quantity": 4,
            "reserved_quantity": 0,
        }


class TestTransferTransitions:
    async def test_completing_twice_is_rejected(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 5)
        transfer = await create_transfer(session, _request(seed, 5), seed.admin)
        await _move(session, transfer.id, TransferStatus.completed, seed.admin)

        with pytest.raises(InvalidStateTransition):
            await _move(session, transfer.id, TransferStatus.completed, seed.admin)

        assert (await balance_of(database, seed.bravo_id, seed.tank_id))["current_balance"] == 5

    @pytest.mark.parametrize("via_transit", [False, True])
    async def test_cancel_restores_source(self, database, session, seed, via_transit):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 10)
        transfer = await create_transfer(session, _request(seed, 6), seed.commander_a)
        if via_transit:
            await _move(session, transfer.id, TransferStatus.in_transit, seed.commander_a)

        cancelled = await _move(session, transfer.id, TransferStatus.cancelled, seed.commander_a)

        assert cancelled.status == TransferStatus.cancelled
        assert (await balance_of(database, seed.alpha_id, seed.tank_id))["current_balance"] == 10
        assert (await balance_of(database, seed.bravo_id, seed.tank_id))["current_balance"] == 0

    async def test_cancelled_is_terminal(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 2)
        transfer = await create_transfer(session, _request(seed, 2), seed.admin)
        await _move(session, transfer.id, TransferStatus.cancelled, seed.admin)

        with pytest.raises(InvalidStateTransition):
            await _move(session, transfer.id, TransferStatus.pending, seed.admin)

    async def test_admin_can_reopen_completed_transfer(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 4)
        transfer = await create_transfer(session, _request(seed, 4), seed.admin)
        await _move(session, transfer.id, TransferStatus.completed, seed.admin)

        reopened = await _move(session, transfer.id, TransferStatus.in_transit, seed.admin)

        assert reopened.status == TransferStatus.in_transit
        assert reopened.completed_at is None
        assert (await balance_of(database, seed.bravo_id, seed.tank_id))["current_balance"] == 0

    async def test_commander_cannot_reopen(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 4)
        transfer = await create_transfer(session, _request(seed, 4), seed.commander_a)
        await _move(session, transfer.id, TransferStatus.completed, seed.commander_b)

        with pytest.raises(ForbiddenError) as exc_info:
            await _move(session, transfer.id, TransferStatus.in_transit, seed.commander_b)

        assert exc_info.value.error_code == ErrorCode.ROLE_NOT_PERMITTED
        assert (await balance_of(database, seed.bravo_id, seed.tank_id))["current_balance"] == 4

    async def test_reopen_fails_when_destination_already_spent(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 4)
        transfer = await create_transfer(session, _request(seed, 4), seed.admin)
        await _move(session, transfer.id, TransferStatus.completed, seed.admin)
        await create_transfer(
            session,
            _request(seed, 1, from_base_id=seed.bravo_id, to_base_id=seed.alpha_id),
            seed.admin,
        )

        with pytest.raises(InsufficientBalance):
            await _move(session, transfer.id, TransferStatus.in_transit, seed.admin)

        current = await get_transfer(session, transfer.id, seed.admin)
        assert current.status == TransferStatus.completed

    async def test_unrelated_commander_cannot_see_transfer(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 4)
        transfer = await create_transfer(session, _request(seed, 1), seed.admin)

        outsider = replace(seed.commander_a, username="cmd_other", base_id=uuid.uuid4())
        with pytest.raises(ForbiddenError):
            await get_transfer(session, transfer.id, outsider)


class TestTransferApi:
    async def test_same_base_returns_400(self, client, seed):
        response = await client.post(
            "/transfers",
            json={
                "fromBaseId": str(seed.alpha_id),
                "toBaseId": str(seed.alpha_id),
                "assetTypeId": str(seed.tank_id),
                "quantity": 1,
                "transferDate": "2024-05-10",
            },
            headers=auth_headers(seed.admin),
        )
        assert response.status_code == 400

    async def test_insufficient_stock_returns_400(self, client, database, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 1)

        response = await client.post(
            "/transfers",
            json={
                "fromBaseId": str(seed.alpha_id),
                "toBaseId": str(seed.bravo_id),
                "assetTypeId": str(seed.tank_id),
                "quantity": 2,
                "transferDate": "2024-05-10",
            },
            headers=auth_headers(seed.logistics_a),
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INSUFFICIENT_BALANCE"

    async def test_destination_commander_completes_over_http(self, client, database, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 3)
        created = await client.post(
            "/transfers",
            json={
                "fromBaseId": str(seed.alpha_id),
                "toBaseId": str(seed.bravo_id),
                "assetTypeId": str(seed.tank_id),
                "quantity": 3,
                "transferDate": "2024-05-10",
                "reason": "Exercise rotation",
            },
            headers=auth_headers(seed.commander_a),
        )
        assert created.status_code == 201
        transfer_id = created.json()["data"]["id"]

        response = await client.put(
            f"/transfers/{transfer_id}",
            json={"status": "completed"},
            headers=auth_headers(seed.commander_b),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "completed"
        assert (await balance_of(database, seed.bravo_id, seed.tank_id))["current_balance"] == 3
