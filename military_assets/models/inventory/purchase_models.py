import uuid

from sqlalchemy import Column, Integer, String, Text, Date, Numeric, ForeignKey, Index, CheckConstraint, Uuid
from military_assets.core.db import Base
from military_assets.models.base.mixins import TimestampMixin


class Purchase(Base, TimestampMixin):
    """Immutable acquisition record. APPEND-ONLY."""

    __tablename__ = "purchases"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    base_id = Column(Uuid, ForeignKey("bases.id", ondelete="RESTRICT"), nullable=False, index=True)
    asset_type_id = Column(Uuid, ForeignKey("asset_types.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_cost = Column(Numeric(14, 2), nullable=True)
    total_cost = Column(Numeric(16, 2), nullable=True)
    vendor = Column(String(200), nullable=True)
    purchase_date = Column(Date, nullable=False, index=True)
    delivery_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_by_id = Column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_purchase_quantity_positive"),
        CheckConstraint("unit_cost IS NULL OR unit_cost >= 0", name="ck_purchase_unit_cost_non_negative"),
        CheckConstraint("total_cost IS NULL OR total_cost >= 0", name="ck_purchase_total_cost_non_negative"),
        Index("ix_purchase_base_type", "base_id", "asset_type_id"),
    )

    def __repr__(self):
        return f"<Purchase id={self.id} base_id={self.base_id} qty={self.quantity}>"
