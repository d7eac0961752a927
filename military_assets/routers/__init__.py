# military_assets/routers/__init__.py

from .auth.auth_router import router as auth_router
from .auth.activity_router import router as activity_router

from .users.user_router import router as user_router

from .bases.base_router import router as base_router
from .assets.asset_type_router import router as asset_type_router
from .assets.asset_router import router as asset_router

from .inventory.purchase_router import router as purchase_router
from .inventory.transfer_router import router as transfer_router
from .inventory.expenditure_router import router as expenditure_router
from .assignments.assignment_router import router as assignment_router

from .reporting.report_router import router as report_router


__all__ = [
    "auth_router",
    "activity_router",

    "user_router",

    "base_router",
    "asset_type_router",
    "asset_router",

    "purchase_router",
    "transfer_router",
    "expenditure_router",
    "assignment_router",

    "report_router",
]
