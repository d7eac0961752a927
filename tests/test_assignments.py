"""
Assignment workflow tests.

Assigning a physical asset reserves one unit of its (base, asset type)
balance without changing current_balance. Returning releases the unit;
losing or damaging the asset writes the reserved unit off.
"""

from datetime import date

import pytest
from sqlalchemy import select

from military_assets.constants.movement_type import MovementType
from military_assets.core.exceptions import (
    AssetNotAvailable,
    ForbiddenError,
    InsufficientBalance,
    InvalidStateTransition,
)
from military_assets.models.assets.asset_models import Asset
from military_assets.models.enums.asset_status import AssetStatus
from military_assets.models.enums.assignment_status import AssignmentStatus
from military_assets.models.inventory.asset_movement_models import AssetMovement
from military_assets.schemas.assignments.assignment_schemas import (
    AssignmentCreateSchema,
    AssignmentUpdateSchema,
)
from military_assets.services.assignments.assignment_service import (
    create_assignment,
    list_assignments,
    update_assignment_status,
)
from military_assets.utils.pagination import PageParams

from helpers import auth_headers, balance_of, register_unit, stock


def _assign(asset_id, user_id, **kwargs) -> AssignmentCreateSchema:
    return AssignmentCreateSchema(
        asset_id=asset_id,
        assigned_to_user_id=user_id,
        assignment_date=kwargs.pop("assignment_date", date(2024, 6, 1)),
        **kwargs,
    )


async def _asset_status(session, asset_id) -> AssetStatus:
    return await session.scalar(
        select(Asset.current_status)
        .where(Asset.id == asset_id)
        .execution_options(populate_existing=True)
    )


@pytest.fixture
async def rifle(database, seed):
    await stock(database, seed.admin, seed.alpha_id, seed.rifle_id, 5)
    return await register_unit(database, seed.alpha_id, seed.rifle_id, "RFL-0001")


class TestCreateAssignment:
    async def test_assignment_reserves_one_unit(self, database, session, seed, rifle):
        assignment = await create_assignment(
            session,
            _assign(rifle.id, seed.logistics_a.user_id, purpose="Patrol duty"),
            seed.commander_a,
        )

        assert assignment.status == AssignmentStatus.active
        assert assignment.serial_number == "RFL-0001"
        assert assignment.assigned_to_username == "log_alpha"
        assert assignment.assigned_by == "cmd_alpha"
        assert await _asset_status(session, rifle.id) == AssetStatus.assigned
        assert await balance_of(database, seed.alpha_id, seed.rifle_id) == {
            "current_balance": 5,
            "available_quantity": 4,
            "reserved_quantity": 1,
        }

    async def test_assigned_asset_cannot_be_assigned_again(self, database, session, seed, rifle):
        await create_assignment(session, _assign(rifle.id, seed.logistics_a.user_id), seed.commander_a)

        with pytest.raises(AssetNotAvailable):
            await create_assignment(session, _assign(rifle.id, seed.commander_a.user_id), seed.commander_a)

        assert (await balance_of(database, seed.alpha_id, seed.rifle_id))["reserved_quantity"] == 1

    async def test_commander_cannot_assign_other_base_asset(self, session, seed, rifle):
        with pytest.raises(ForbiddenError):
            await create_assignment(session, _assign(rifle.id, seed.commander_b.user_id), seed.commander_b)

    async def test_unstocked_asset_cannot_be_reserved(self, database, session, seed):
        unit = await register_unit(database, seed.bravo_id, seed.tank_id, "TNK-0042")

        with pytest.raises(InsufficientBalance):
            await create_assignment(session, _assign(unit.id, seed.commander_b.user_id), seed.commander_b)

        assert await _asset_status(session, unit.id) == AssetStatus.available

    def test_expected_return_before_assignment_is_rejected(self, seed):
        with pytest.raises(ValueError):
            _assign(
                seed.alpha_id,
                seed.logistics_a.user_id,
                assignment_date=date(2024, 6, 10),
                expected_return_date=date(2024, 6, 1),
            )


class TestAssignmentStatus:
    async def test_return_releases_unit(self, database, session, seed, rifle):
        assignment = await create_assignment(session, _assign(rifle.id, seed.logistics_a.user_id), seed.commander_a)

        returned = await update_assignment_status(
            session,
            assignment.id,
            AssignmentUpdateSchema(status=AssignmentStatus.returned, actual_return_date=date(2024, 6, 20)),
            seed.commander_a,
        )

        assert returned.status == AssignmentStatus.returned
        assert returned.actual_return_date == date(2024, 6, 20)
        assert await _asset_status(session, rifle.id) == AssetStatus.available
        assert await balance_of(database, seed.alpha_id, seed.rifle_id) == {
            "current_balance": 5,
            "available_quantity": 5,
            "reserved_quantity": 0,
        }

    async def test_return_is_idempotent(self, database, session, seed, rifle):
        assignment = await create_assignment(session, _assign(rifle.id, seed.logistics_a.user_id), seed.commander_a)
        payload = AssignmentUpdateSchema(status=AssignmentStatus.returned)

        await update_assignment_status(session, assignment.id, payload, seed.commander_a)
        again = await update_assignment_status(session, assignment.id, payload, seed.commander_a)

        assert again.status == AssignmentStatus.returned
        assert (await balance_of(database, seed.alpha_id, seed.rifle_id))["available_quantity"] == 5
        releases = (
            await session.scalars(
                select(AssetMovement).where(
                    AssetMovement.movement_type == MovementType.ASSIGNMENT_RELEASE.value
                )
            )
        ).all()
        assert len(releases) == 1

    @pytest.mark.parametrize(
        "status, asset_status",
        [(AssignmentStatus.lost, AssetStatus.lost), (AssignmentStatus.damaged, AssetStatus.damaged)],
    )
    async def test_loss_writes_off_reserved_unit(self, database, session, seed, rifle, status, asset_status):
        assignment = await create_assignment(session, _assign(rifle.id, seed.logistics_a.user_id), seed.commander_a)

        await update_assignment_status(
            session, assignment.id, AssignmentUpdateSchema(status=status), seed.commander_a
        )

        assert await _asset_status(session, rifle.id) == asset_status
        assert await balance_of(database, seed.alpha_id, seed.rifle_id) == {
            "current_balance": 4,
            "available_quantity": 4,
            "reserved_quantity": 0,
        }

    async def test_closed_assignment_cannot_change_outcome(self, session, seed, rifle):
        assignment = await create_assignment(session, _assign(rifle.id, seed.logistics_a.user_id), seed.commander_a)
        await update_assignment_status(
            session, assignment.id, AssignmentUpdateSchema(status=AssignmentStatus.returned), seed.commander_a
        )

        with pytest.raises(InvalidStateTransition):
            await update_assignment_status(
                session, assignment.id, AssignmentUpdateSchema(status=AssignmentStatus.lost), seed.commander_a
            )

    async def test_returned_asset_can_be_assigned_again(self, database, session, seed, rifle):
        first = await create_assignment(session, _assign(rifle.id, seed.logistics_a.user_id), seed.commander_a)
        await update_assignment_status(
            session, first.id, AssignmentUpdateSchema(status=AssignmentStatus.returned), seed.commander_a
        )

        second = await create_assignment(session, _assign(rifle.id, seed.commander_a.user_id), seed.admin)

        assert second.status == AssignmentStatus.active
        assert (await balance_of(database, seed.alpha_id, seed.rifle_id))["reserved_quantity"] == 1


class TestAssignmentReads:
    async def test_list_is_scoped_to_base(self, session, seed, rifle):
        await create_assignment(session, _assign(rifle.id, seed.logistics_a.user_id), seed.commander_a)

        mine = await list_assignments(session, seed.commander_a, PageParams(limit=20, offset=0))
        theirs = await list_assignments(session, seed.commander_b, PageParams(limit=20, offset=0))

        assert mine["pagination"]["total"] == 1
        assert theirs["pagination"]["total"] == 0

    async def test_filter_by_status(self, session, seed, rifle):
        await create_assignment(session, _assign(rifle.id, seed.logistics_a.user_id), seed.commander_a)

        result = await list_assignments(
            session, seed.admin, PageParams(limit=20, offset=0), status=AssignmentStatus.returned
        )
        assert result["items"] == []


class TestAssignmentApi:
    async def test_logistics_officer_cannot_assign(self, client, seed, rifle):
        response = await client.post(
            "/assignments",
            json={
                "assetId": str(rifle.id),
                "assignedToUserId": str(seed.logistics_a.user_id),
                "assignmentDate": "2024-06-01",
            },
            headers=auth_headers(seed.logistics_a),
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "ROLE_NOT_PERMITTED"

    async def test_assign_and_return_over_http(self, client, database, seed, rifle):
        created = await client.post(
            "/assignments",
            json={
                "assetId": str(rifle.id),
                "assignedToUserId": str(seed.logistics_a.user_id),
                "assignmentDate": "2024-06-01",
                "expectedReturnDate": "2024-06-15",
            },
            headers=auth_headers(seed.commander_a),
        )
        assert created.status_code == 201
        assignment_id = created.json()["data"]["id"]

        response = await client.put(
            f"/assignments/{assignment_id}",
            json={"status": "returned"},
            headers=auth_headers(seed.commander_a),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "returned"
        assert response.json()["data"]["actual_return_date"] == date.today().isoformat()
        assert (await balance_of(database, seed.alpha_id, seed.rifle_id))["reserved_quantity"] == 0
