"""
Balance ledger primitive tests.

Every change to a (base, asset type) balance goes through the primitives in
asset_balance_service. These tests verify that:
1. Increases create the row on first use and add to it afterwards
2. Decreases never drive current or available quantity negative
3. Reserve and release move units between the two splits only
4. Each mutation writes exactly one movement journal row
5. available + reserved == current after every operation
"""

import uuid

import pytest
from sqlalchemy import select

from military_assets.constants.movement_type import MovementType, ReferenceType
from military_assets.core.exceptions import InsufficientBalance
from military_assets.models.inventory.asset_balance_models import AssetBalance
from military_assets.models.inventory.asset_movement_models import AssetMovement
from military_assets.services.inventory.asset_balance_service import (
    decrease_stock,
    ensure_balance_row,
    get_balance,
    increase_stock,
    release,
    reserve,
)

from helpers import balance_of


async def _increase(session, seed, quantity, base_id=None):
    await increase_stock(
        session,
        base_id=base_id or seed.alpha_id,
        asset_type_id=seed.tank_id,
        quantity=quantity,
        movement_type=MovementType.PURCHASE,
        reference_type=ReferenceType.PURCHASE,
        reference_id=uuid.uuid4(),
        actor_id=seed.admin.user_id,
    )


async def _decrease(session, seed, quantity, **kwargs):
    await decrease_stock(
        session,
        base_id=seed.alpha_id,
        asset_type_id=seed.tank_id,
        quantity=quantity,
        movement_type=kwargs.pop("movement_type", MovementType.EXPENDITURE),
        reference_type=ReferenceType.EXPENDITURE,
        reference_id=uuid.uuid4(),
        actor_id=seed.admin.user_id,
        **kwargs,
    )


def _assert_consistent(balance: dict):
    assert balance["available_quantity"] + balance["reserved_quantity"] == balance["current_balance"]
    assert balance["current_balance"] >= 0
    assert balance["available_quantity"] >= 0
    assert balance["reserved_quantity"] >= 0


class TestIncrease:
    async def test_missing_row_reads_as_zero(self, session, seed):
        balance = await get_balance(session, seed.alpha_id, seed.tank_id)
        assert balance == {"current_balance": 0, "available_quantity": 0, "reserved_quantity": 0}

    async def test_first_increase_creates_row(self, session, seed):
        await _increase(session, seed, 10)
        await session.commit()

        balance = await balance_of_session(session, seed)
        assert balance == {"current_balance": 10, "available_quantity": 10, "reserved_quantity": 0}

    async def test_increase_adds_to_existing_row(self, session, seed):
        await _increase(session, seed, 10)
        await _increase(session, seed, 5)
        await session.commit()

        balance = await balance_of_session(session, seed)
        assert balance["current_balance"] == 15
        assert balance["available_quantity"] == 15

    async def test_increase_rejects_non_positive_quantity(self, session, seed):
        with pytest.raises(ValueError):
            await _increase(session, seed, 0)

    async def test_increase_writes_journal_row(self, session, seed):
        await _increase(session, seed, 7)
        await session.commit()

        movements = (await session.scalars(select(AssetMovement))).all()
        assert len(movements) == 1
        assert movements[0].movement_type == MovementType.PURCHASE.value
        assert movements[0].quantity_change == 7
        assert movements[0].base_id == seed.alpha_id


class TestDecrease:
    async def test_decrease_within_available(self, session, seed):
        await _increase(session, seed, 10)
        await _decrease(session, seed, 4)
        await session.commit()

        balance = await balance_of_session(session, seed)
        assert balance == {"current_balance": 6, "available_quantity": 6, "reserved_quantity": 0}

    async def test_decrease_to_exactly_zero(self, session, seed):
        await _increase(session, seed, 3)
        await _decrease(session, seed, 3)
        await session.commit()

        balance = await balance_of_session(session, seed)
        assert balance["current_balance"] == 0
        _assert_consistent(balance)

    async def test_insufficient_available_raises_without_mutation(self, database, session, seed):
        await _increase(session, seed, 5)
        await session.commit()

        with pytest.raises(InsufficientBalance) as exc_info:
            await _decrease(session, seed, 6)
        await session.rollback()

        assert exc_info.value.status_code == 400
        assert exc_info.value.details["requested"] == 6

        balance = await balance_of(database, seed.alpha_id, seed.tank_id)
        assert balance["current_balance"] == 5
        assert balance["available_quantity"] == 5

    async def test_decrease_on_missing_row_raises(self, session, seed):
        with pytest.raises(InsufficientBalance):
            await _decrease(session, seed, 1)

    async def test_reserved_units_are_not_spendable(self, session, seed):
        await _increase(session, seed, 2)
        await reserve(
            session,
            base_id=seed.alpha_id,
            asset_type_id=seed.tank_id,
            quantity=2,
            reference_id=uuid.uuid4(),
            actor_id=seed.admin.user_id,
        )

        with pytest.raises(InsufficientBalance):
            await _decrease(session, seed, 1)

    async def test_write_off_from_reserved(self, session, seed):
        await _increase(session, seed, 3)
        await reserve(
            session,
            base_id=seed.alpha_id,
            asset_type_id=seed.tank_id,
            quantity=1,
            reference_id=uuid.uuid4(),
            actor_id=seed.admin.user_id,
        )
        await _decrease(
            session,
            seed,
            1,
            movement_type=MovementType.ASSIGNMENT_WRITE_OFF,
            from_reserved=True,
        )
        await session.commit()

        balance = await balance_of_session(session, seed)
        assert balance == {"current_balance": 2, "available_quantity": 2, "reserved_quantity": 0}

    async def test_negative_journal_sign(self, session, seed):
        await _increase(session, seed, 5)
        await _decrease(session, seed, 2)
        await session.commit()

        change = await session.scalar(
            select(AssetMovement.quantity_change).where(
                AssetMovement.movement_type == MovementType.EXPENDITURE.value
            )
        )
        assert change == -2


class TestReservation:
    async def test_reserve_then_release_restores_split(self, session, seed):
        await _increase(session, seed, 4)
        ref = uuid.uuid4()

        await reserve(
            session,
            base_id=seed.alpha_id,
            asset_type_id=seed.tank_id,
            quantity=1,
            reference_id=ref,
            actor_id=seed.admin.user_id,
        )
        await session.commit()

        reserved = await balance_of_session(session, seed)
        assert reserved == {"current_balance": 4, "available_quantity": 3, "reserved_quantity": 1}

        await release(
            session,
            base_id=seed.alpha_id,
            asset_type_id=seed.tank_id,
            quantity=1,
            reference_id=ref,
            actor_id=seed.admin.user_id,
        )
        await session.commit()

        released = await balance_of_session(session, seed)
        assert released == {"current_balance": 4, "available_quantity": 4, "reserved_quantity": 0}

    async def test_reserve_more_than_available_raises(self, session, seed):
        await _increase(session, seed, 1)

        with pytest.raises(InsufficientBalance):
            await reserve(
                session,
                base_id=seed.alpha_id,
                asset_type_id=seed.tank_id,
                quantity=2,
                reference_id=uuid.uuid4(),
                actor_id=seed.admin.user_id,
            )

    async def test_release_without_reservation_raises(self, session, seed):
        await _increase(session, seed, 1)

        with pytest.raises(InsufficientBalance):
            await release(
                session,
                base_id=seed.alpha_id,
                asset_type_id=seed.tank_id,
                quantity=1,
                reference_id=uuid.uuid4(),
                actor_id=seed.admin.user_id,
            )


class TestEnsureRow:
    async def test_ensure_balance_row_is_idempotent(self, session, seed):
        await ensure_balance_row(session, seed.bravo_id, seed.tank_id)
        await ensure_balance_row(session, seed.bravo_id, seed.tank_id)
        await session.commit()

        rows = (
            await session.scalars(
                select(AssetBalance).where(AssetBalance.base_id == seed.bravo_id)
            )
        ).all()
        assert len(rows) == 1
        assert rows[0].current_balance == 0

    async def test_ensure_balance_row_keeps_existing_figures(self, session, seed):
        await _increase(session, seed, 9)
        await ensure_balance_row(session, seed.alpha_id, seed.tank_id)
        await session.commit()

        balance = await balance_of_session(session, seed)
        assert balance["current_balance"] == 9

    async def test_ensure_balance_row_writes_no_journal(self, session, seed):
        await ensure_balance_row(session, seed.bravo_id, seed.rifle_id)
        await session.commit()

        assert (await session.scalars(select(AssetMovement))).all() == []


async def balance_of_session(session, seed):
    balance = await get_balance(session, seed.alpha_id, seed.tank_id)
    _assert_consistent(balance)
    return balance
