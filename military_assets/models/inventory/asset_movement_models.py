import uuid

from sqlalchemy import Column, Integer, String, CheckConstraint, ForeignKey, Index, Uuid
from military_assets.core.db import Base
from military_assets.models.base.mixins import TimestampMixin


class AssetMovement(Base, TimestampMixin):
    """Append-only journal of every ledger adjustment."""

    __tablename__ = "asset_movements"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    base_id = Column(Uuid, ForeignKey("bases.id", ondelete="RESTRICT"), nullable=False, index=True)
    asset_type_id = Column(Uuid, ForeignKey("asset_types.id", ondelete="RESTRICT"), nullable=False, index=True)
    movement_type = Column(String(40), nullable=False, index=True)
    quantity_change = Column(Integer, nullable=False)
    reference_type = Column(String(50), nullable=False)
    reference_id = Column(Uuid, nullable=False)
    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)

    __table_args__ = (
        CheckConstraint("quantity_change <> 0", name="ck_asset_movement_quantity_non_zero"),
        Index("ix_asset_movement_base_type", "base_id", "asset_type_id"),
        Index("ix_asset_movement_reference", "reference_type", "reference_id"),
    )

    def __repr__(self):
        return f"<AssetMovement id={self.id} base_id={self.base_id} type={self.movement_type} qty={self.quantity_change}>"
