"""
Dashboard and movement journal tests.

Dashboard movement figures are derived from the journal, so they must
agree with the balances the workflows left behind.
"""

from datetime import date

from military_assets.models.enums.transfer_status import TransferStatus
from military_assets.schemas.assignments.assignment_schemas import AssignmentCreateSchema
from military_assets.schemas.inventory.expenditure_schemas import ExpenditureCreateSchema
from military_assets.schemas.inventory.transfer_schemas import TransferCreateSchema, TransferUpdateSchema
from military_assets.services.assignments.assignment_service import create_assignment
from military_assets.services.inventory.expenditure_service import create_expenditure
from military_assets.services.inventory.transfer_service import create_transfer, update_transfer_status
from military_assets.services.reporting.report_service import get_dashboard, list_movements
from military_assets.utils.pagination import PageParams

from helpers import auth_headers, register_unit, stock


async def _activity(database, session, seed):
    """Purchase 20 tanks at Alpha, send 8 to Bravo, expend 2 and assign 1."""
    await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 20)

    transfer = await create_transfer(
        session,
        TransferCreateSchema(
            from_base_id=seed.alpha_id,
            to_base_id=seed.bravo_id,
            asset_type_id=seed.tank_id,
            quantity=8,
            transfer_date=date(2024, 9, 1),
        ),
        seed.admin,
    )
    await update_transfer_status(
        session, transfer.id, TransferUpdateSchema(status=TransferStatus.completed), seed.admin
    )

    await create_expenditure(
        session,
        ExpenditureCreateSchema(
            base_id=seed.alpha_id,
            asset_type_id=seed.tank_id,
            quantity=2,
            expenditure_date=date(2024, 9, 2),
            reason="Combat loss",
        ),
        seed.admin,
    )

    unit = await register_unit(database, seed.alpha_id, seed.tank_id, "TNK-900")
    await create_assignment(
        session,
        AssignmentCreateSchema(
            asset_id=unit.id,
            assigned_to_user_id=seed.commander_a.user_id,
            assignment_date=date(2024, 9, 3),
        ),
        seed.admin,
    )


class TestDashboard:
    async def test_admin_dashboard_covers_all_bases(self, database, session, seed):
        await _activity(database, session, seed)

        dashboard = await get_dashboard(session, seed.admin, asset_type_id=seed.tank_id)

        assert dashboard.totals.current_balance == 18
        assert dashboard.totals.reserved_quantity == 1
        assert dashboard.totals.available_quantity == 17

        per_base = {b.base_code: b for b in dashboard.bases}
        alpha = per_base["ALPHA"].movements
        assert alpha.purchased == 20
        assert alpha.transferred_out == 8
        assert alpha.expended == 2
        assert alpha.assigned == 1
        assert alpha.net_movement == 10

        bravo = per_base["BRAVO"].movements
        assert bravo.transferred_in == 8
        assert bravo.net_movement == 8
        assert per_base["BRAVO"].balances.current_balance == 8

    async def test_commander_dashboard_is_scoped(self, database, session, seed):
        await _activity(database, session, seed)

        dashboard = await get_dashboard(session, seed.commander_b)

        assert dashboard.base_id == seed.bravo_id
        assert [b.base_code for b in dashboard.bases] == ["BRAVO"]
        assert dashboard.totals.current_balance == 8
        assert dashboard.movements.purchased == 0

    async def test_dashboard_endpoint(self, client, database, session, seed):
        await _activity(database, session, seed)

        response = await client.get("/dashboard/metrics", headers=auth_headers(seed.commander_a))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totals"]["current_balance"] == 10
        assert data["movements"]["net_movement"] == 10


class TestMovementJournal:
    async def test_journal_lists_every_ledger_change(self, database, session, seed):
        await _activity(database, session, seed)

        result = await list_movements(session, seed.admin, PageParams(limit=100, offset=0))
        kinds = sorted(m.movement_type for m in result["items"])

        assert kinds == [
            "ASSIGNMENT_RESERVE",
            "EXPENDITURE",
            "PURCHASE",
            "TRANSFER_IN",
            "TRANSFER_OUT",
        ]

    async def test_journal_sums_to_balance(self, database, session, seed):
        await _activity(database, session, seed)

        result = await list_movements(session, seed.commander_a, PageParams(limit=100, offset=0))
        net = sum(
            m.quantity_change
            for m in result["items"]
            if m.movement_type not in {"ASSIGNMENT_RESERVE", "ASSIGNMENT_RELEASE"}
        )
        assert net == 10
