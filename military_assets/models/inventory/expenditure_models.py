import uuid

from sqlalchemy import Column, Integer, String, Text, Date, ForeignKey, CheckConstraint, Index, Uuid
from military_assets.core.db import Base
from military_assets.models.base.mixins import TimestampMixin


class Expenditure(Base, TimestampMixin):
    """Immutable record of stock consumed (training, operations). APPEND-ONLY."""

    __tablename__ = "expenditures"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    base_id = Column(Uuid, ForeignKey("bases.id", ondelete="RESTRICT"), nullable=False, index=True)
    asset_type_id = Column(Uuid, ForeignKey("asset_types.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    expenditure_date = Column(Date, nullable=False, index=True)
    reason = Column(String(500), nullable=False)
    operation_name = Column(String(200), nullable=True)
    notes = Column(Text, nullable=True)
    authorized_by_id = Column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_expenditure_quantity_positive"),
        Index("ix_expenditure_base_type", "base_id", "asset_type_id"),
    )

    def __repr__(self):
        return f"<Expenditure id={self.id} base_id={self.base_id} qty={self.quantity}>"
