import uuid

from sqlalchemy import Column, String, Date, Numeric, Enum, ForeignKey, Index, Text, Uuid, CheckConstraint
from military_assets.core.db import Base
from military_assets.models.base.mixins import TimestampMixin, AuditMixin
from military_assets.models.enums.asset_status import AssetStatus, AssetCondition


class Asset(Base, TimestampMixin, AuditMixin):
    """One physical unit of an asset type, owned by exactly one base."""

    __tablename__ = "assets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_type_id = Column(Uuid, ForeignKey("asset_types.id", ondelete="RESTRICT"), nullable=False, index=True)
    base_id = Column(Uuid, ForeignKey("bases.id", ondelete="RESTRICT"), nullable=False, index=True)
    serial_number = Column(String(100), nullable=True, unique=True)
    model = Column(String(100), nullable=True)
    manufacturer = Column(String(100), nullable=True)
    current_status = Column(Enum(AssetStatus, name="asset_status"), nullable=False, default=AssetStatus.available, index=True)
    condition_status = Column(Enum(AssetCondition, name="asset_condition"), nullable=False, default=AssetCondition.good)
    acquisition_date = Column(Date, nullable=True)
    acquisition_cost = Column(Numeric(14, 2), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("acquisition_cost IS NULL OR acquisition_cost >= 0", name="ck_asset_cost_non_negative"),
        Index("ix_asset_base_type_status", "base_id", "asset_type_id", "current_status"),
    )

    def __repr__(self):
        return f"<Asset id={self.id} serial={self.serial_number} status={self.current_status}>"
