from sqlalchemy import Column, Integer, DateTime, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.sql import func
from military_assets.core.db import Base


class AssetBalance(Base):
    """Ledger row per (base, asset type). Mutated only through the balance ledger service."""

    __tablename__ = "asset_balances"

    base_id = Column(Uuid, ForeignKey("bases.id", ondelete="RESTRICT"), primary_key=True)
    asset_type_id = Column(Uuid, ForeignKey("asset_types.id", ondelete="RESTRICT"), primary_key=True)
    current_balance = Column(Integer, nullable=False, default=0)
    available_quantity = Column(Integer, nullable=False, default=0)
    reserved_quantity = Column(Integer, nullable=False, default=0)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("current_balance >= 0", name="ck_asset_balance_current_non_negative"),
        CheckConstraint("available_quantity >= 0", name="ck_asset_balance_available_non_negative"),
        CheckConstraint("reserved_quantity >= 0", name="ck_asset_balance_reserved_non_negative"),
        CheckConstraint(
            "available_quantity + reserved_quantity = current_balance",
            name="ck_asset_balance_split_consistent",
        ),
    )

    def __repr__(self):
        return (
            f"<AssetBalance base_id={self.base_id} asset_type_id={self.asset_type_id} "
            f"current={self.current_balance} available={self.available_quantity} reserved={self.reserved_quantity}>"
        )
