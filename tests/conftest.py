"""
Shared fixtures for the military asset API test suite.

Provides:
- A fresh SQLite database file per test, driven through the same Database
  handle the application uses
- Seeded reference data (two bases, one asset type, one user per role)
- An in-process httpx client bound to an app built around the test database
"""

import os

os.environ["APP_ENV"] = "development"
os.environ["DB_TYPE"] = "sqlite"
os.environ["JWT_ACCESS_SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_military_assets.db")

from types import SimpleNamespace

import httpx
import pytest

from military_assets.core.db import Database
from military_assets.core.security import hash_password
from military_assets.models.assets.asset_type_models import AssetType
from military_assets.models.bases.base_models import MilitaryBase
from military_assets.models.enums.role import Role
from military_assets.models.users.user_models import User

from helpers import TEST_PASSWORD, role_context

# =============================================================================
# Database
# =============================================================================


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session() as s:
        yield s


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
async def seed(database):
    async with database.session() as s:
        alpha = MilitaryBase(name="Fort Alpha", code="ALPHA", location="North Sector")
        bravo = MilitaryBase(name="Camp Bravo", code="BRAVO", location="South Sector")
        tank = AssetType(name="T-90 Tank", category="Vehicle")
        rifle = AssetType(name="Rifle", category="Weapon")
        s.add_all([alpha, bravo, tank, rifle])
        await s.flush()

        password_hash = hash_password(TEST_PASSWORD)

        def make_user(username, role, base_id=None, email=None):
            return User(
                username=username,
                email=email,
                password_hash=password_hash,
                role=role,
                base_id=base_id,
            )

        admin = make_user("admin", Role.admin, email="admin@example.com")
        commander_a = make_user("cmd_alpha", Role.base_commander, alpha.id)
        commander_b = make_user("cmd_bravo", Role.base_commander, bravo.id)
        logistics_a = make_user("log_alpha", Role.logistics_officer, alpha.id)
        s.add_all([admin, commander_a, commander_b, logistics_a])
        await s.flush()

        alpha.commander_id = commander_a.id
        bravo.commander_id = commander_b.id
        await s.commit()

        return SimpleNamespace(
            alpha_id=alpha.id,
            bravo_id=bravo.id,
            tank_id=tank.id,
            rifle_id=rifle.id,
            admin=role_context(admin),
            commander_a=role_context(commander_a),
            commander_b=role_context(commander_b),
            logistics_a=role_context(logistics_a),
        )


# =============================================================================
# HTTP client
# =============================================================================


@pytest.fixture
async def client(database):
    from main import create_app

    app = create_app(database)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
