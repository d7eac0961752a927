import uuid

from sqlalchemy import Column, String, Boolean, Index, Uuid
from military_assets.core.db import Base
from military_assets.models.base.mixins import TimestampMixin, AuditMixin


class AssetType(Base, TimestampMixin, AuditMixin):
    __tablename__ = "asset_types"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True, index=True)
    category = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=True)
    unit_of_measure = Column(String(50), nullable=False, default="unit")
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (Index("ix_asset_type_category_name", "category", "name"),)

    def __repr__(self):
        return f"<AssetType id={self.id} name={self.name} category={self.category}>"
