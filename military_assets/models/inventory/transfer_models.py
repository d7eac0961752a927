import uuid

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Enum, ForeignKey, CheckConstraint, Index, Uuid
from military_assets.core.db import Base
from military_assets.models.base.mixins import TimestampMixin, AuditMixin
from military_assets.models.enums.transfer_status import TransferStatus


class Transfer(Base, TimestampMixin, AuditMixin):
    """Movement of a fixed quantity of one asset type between two bases."""

    __tablename__ = "transfers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    from_base_id = Column(Uuid, ForeignKey("bases.id", ondelete="RESTRICT"), nullable=False, index=True)
    to_base_id = Column(Uuid, ForeignKey("bases.id", ondelete="RESTRICT"), nullable=False, index=True)
    asset_type_id = Column(Uuid, ForeignKey("asset_types.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    transfer_date = Column(Date, nullable=False)
    reason = Column(String(500), nullable=True)
    status = Column(Enum(TransferStatus, name="transfer_status"), nullable=False, default=TransferStatus.pending, index=True)
    tracking_number = Column(String(100), nullable=False, unique=True)
    notes = Column(Text, nullable=True)
    requested_by_id = Column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    approved_by_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    completed_by_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_transfer_qty_positive"),
        CheckConstraint("from_base_id != to_base_id", name="ck_transfer_base_diff"),
        Index("ix_transfer_type_status", "asset_type_id", "status"),
        Index("ix_transfer_bases_status", "from_base_id", "to_base_id", "status"),
    )

    def __repr__(self):
        return f"<Transfer id={self.id} {self.from_base_id}->{self.to_base_id} qty={self.quantity} status={self.status}>"
