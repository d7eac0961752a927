from datetime import date

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from military_assets.models.assets.asset_models import Asset
from military_assets.models.assignments.assignment_models import Assignment
from military_assets.models.enums.assignment_status import AssignmentStatus
from military_assets.models.inventory.asset_balance_models import AssetBalance
from military_assets.utils.logger import get_logger

logger = get_logger("jobs.maintenance")


async def audit_ledger(db: AsyncSession) -> list[dict]:
    """Return (and log) every balance row that breaks the ledger invariant."""
    rows = (
        await db.execute(
            select(
                AssetBalance.base_id,
                AssetBalance.asset_type_id,
                AssetBalance.current_balance,
                AssetBalance.available_quantity,
                AssetBalance.reserved_quantity,
            ).where(
                or_(
                    AssetBalance.available_quantity + AssetBalance.reserved_quantity
                    != AssetBalance.current_balance,
                    AssetBalance.current_balance < 0,
                    AssetBalance.available_quantity < 0,
                    AssetBalance.reserved_quantity < 0,
                )
            )
        )
    ).all()

    violations = []
    for r in rows:
        violation = {
            "base_id": str(r.base_id),
            "asset_type_id": str(r.asset_type_id),
            "current_balance": r.current_balance,
            "available_quantity": r.available_quantity,
            "reserved_quantity": r.reserved_quantity,
        }
        logger.error("Ledger invariant violated", extra=violation)
        violations.append(violation)

    logger.info("Ledger audit finished", extra={"violations": len(violations)})
    return violations


async def find_overdue_assignments(db: AsyncSession, today: date | None = None) -> list[dict]:
    today = today or date.today()

    rows = (
        await db.execute(
            select(
                Assignment.id,
                Assignment.asset_id,
                Assignment.assigned_to_user_id,
                Assignment.expected_return_date,
                Asset.base_id,
            )
            .join(Asset, Asset.id == Assignment.asset_id)
            .where(
                Assignment.status == AssignmentStatus.active,
                Assignment.expected_return_date.isnot(None),
                Assignment.expected_return_date < today,
            )
            .order_by(Assignment.expected_return_date)
        )
    ).all()

    overdue = []
    for r in rows:
        item = {
            "assignment_id": str(r.id),
            "asset_id": str(r.asset_id),
            "assigned_to_user_id": str(r.assigned_to_user_id),
            "base_id": str(r.base_id),
            "expected_return_date": r.expected_return_date.isoformat(),
            "days_overdue": (today - r.expected_return_date).days,
        }
        logger.warning("Assignment overdue", extra=item)
        overdue.append(item)

    return overdue
