"""
Base administration tests: creation, activation, command handover and the
per-base ledger summary.
"""

from datetime import date

import pytest

from military_assets.constants.error_codes import ErrorCode
from military_assets.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from military_assets.models.enums.role import Role
from military_assets.schemas.bases.base_schemas import CommanderHandoverSchema
from military_assets.schemas.users.user_schemas import UserUpdateSchema
from military_assets.services.bases.base_service import (
    get_base,
    handover_command,
    list_handovers,
    set_base_active,
)
from military_assets.services.users.user_service import deactivate_user, update_user

from helpers import auth_headers, stock


class TestBaseApi:
    async def test_admin_creates_base_with_upper_case_code(self, client, seed):
        response = await client.post(
            "/bases",
            json={"name": "Outpost Charlie", "code": "charlie", "location": "East Ridge"},
            headers=auth_headers(seed.admin),
        )

        assert response.status_code == 201
        assert response.json()["data"]["code"] == "CHARLIE"
        assert response.json()["data"]["total_current_balance"] == 0

    async def test_duplicate_code_is_409(self, client, seed):
        response = await client.post(
            "/bases",
            json={"name": "Another Alpha", "code": "alpha", "location": "Nowhere"},
            headers=auth_headers(seed.admin),
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "BASE_CODE_EXISTS"

    async def test_commander_cannot_create_base(self, client, seed):
        response = await client.post(
            "/bases",
            json={"name": "Rogue Base", "code": "ROGUE", "location": "Hills"},
            headers=auth_headers(seed.commander_a),
        )
        assert response.status_code == 403

    async def test_commander_lists_only_home_base(self, client, seed):
        response = await client.get("/bases", headers=auth_headers(seed.commander_b))

        assert response.status_code == 200
        assert [b["code"] for b in response.json()["data"]["items"]] == ["BRAVO"]


class TestBaseSummary:
    async def test_summary_sums_balances(self, database, session, seed):
        await stock(database, seed.admin, seed.alpha_id, seed.tank_id, 3)
        await stock(database, seed.admin, seed.alpha_id, seed.rifle_id, 40)

        base = await get_base(session, seed.alpha_id, seed.commander_a)

        assert base.asset_type_count == 2
        assert base.total_current_balance == 43
        assert base.total_available_quantity == 43
        assert base.commander_username == "cmd_alpha"

    async def test_other_base_is_forbidden(self, session, seed):
        with pytest.raises(ForbiddenError):
            await get_base(session, seed.alpha_id, seed.commander_b)


class TestBaseActivation:
    async def test_deactivated_base_refuses_new_stock(self, database, session, seed):
        await set_base_active(session, seed.bravo_id, False, seed.admin)

        with pytest.raises(NotFoundError) as exc_info:
            await stock(database, seed.admin, seed.bravo_id, seed.tank_id, 1)

        assert exc_info.value.error_code == ErrorCode.BASE_NOT_FOUND

    async def test_reactivation_restores_workflows(self, database, session, seed):
        await set_base_active(session, seed.bravo_id, False, seed.admin)
        restored = await set_base_active(session, seed.bravo_id, True, seed.admin)

        assert restored.is_active is True
        await stock(database, seed.admin, seed.bravo_id, seed.tank_id, 1)


class TestCommanderHandover:
    async def test_handover_moves_commander_and_records_history(self, session, seed):
        handover = await handover_command(
            session,
            seed.alpha_id,
            CommanderHandoverSchema(
                new_commander_id=seed.commander_b.user_id,
                handover_date=date(2024, 7, 1),
                handover_notes="Rotation",
            ),
            seed.admin,
        )

        assert handover.previous_commander_username == "cmd_alpha"
        assert handover.new_commander_username == "cmd_bravo"

        base = await get_base(session, seed.alpha_id, seed.admin)
        assert base.commander_id == seed.commander_b.user_id

        history = await list_handovers(session, seed.alpha_id, seed.admin)
        assert [h.id for h in history] == [handover.id]

    async def test_previous_base_no_longer_names_moved_commander(self, session, seed):
        await handover_command(
            session,
            seed.alpha_id,
            CommanderHandoverSchema(new_commander_id=seed.commander_b.user_id, handover_date=date(2024, 7, 1)),
            seed.admin,
        )

        bravo = await get_base(session, seed.bravo_id, seed.admin)
        assert bravo.commander_id is None
        assert bravo.commander_username is None

    async def test_non_commander_cannot_take_command(self, session, seed):
        with pytest.raises(ValidationError) as exc_info:
            await handover_command(
                session,
                seed.alpha_id,
                CommanderHandoverSchema(new_commander_id=seed.logistics_a.user_id, handover_date=date(2024, 7, 1)),
                seed.admin,
            )

        assert exc_info.value.error_code == ErrorCode.BASE_INVALID_COMMANDER

    async def test_current_commander_cannot_take_command_again(self, session, seed):
        with pytest.raises(ValidationError):
            await handover_command(
                session,
                seed.alpha_id,
                CommanderHandoverSchema(new_commander_id=seed.commander_a.user_id, handover_date=date(2024, 7, 1)),
                seed.admin,
            )


class TestCommandFollowsUser:
    async def test_demoted_commander_releases_base(self, session, seed):
        await update_user(session, seed.commander_b.user_id, UserUpdateSchema(role=Role.logistics_officer), seed.admin)

        assert (await get_base(session, seed.bravo_id, seed.admin)).commander_id is None

    async def test_rehomed_commander_releases_old_base(self, session, seed):
        await update_user(session, seed.commander_b.user_id, UserUpdateSchema(base_id=seed.alpha_id), seed.admin)

        assert (await get_base(session, seed.bravo_id, seed.admin)).commander_id is None
        assert (await get_base(session, seed.alpha_id, seed.admin)).commander_id == seed.commander_a.user_id

    async def test_unrelated_update_keeps_command(self, session, seed):
        await update_user(session, seed.commander_b.user_id, UserUpdateSchema(first_name="Dana"), seed.admin)

        assert (await get_base(session, seed.bravo_id, seed.admin)).commander_id == seed.commander_b.user_id

    async def test_deactivated_commander_releases_base(self, session, seed):
        await deactivate_user(session, seed.commander_b.user_id, seed.admin)

        assert (await get_base(session, seed.bravo_id, seed.admin)).commander_id is None
