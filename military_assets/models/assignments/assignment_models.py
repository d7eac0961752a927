import uuid

from sqlalchemy import Column, String, Text, Date, Enum, ForeignKey, Index, Uuid
from military_assets.core.db import Base
from military_assets.models.base.mixins import TimestampMixin, AuditMixin
from military_assets.models.enums.assignment_status import AssignmentStatus


class Assignment(Base, TimestampMixin, AuditMixin):
    """Loan of one physical asset to one user."""

    __tablename__ = "assignments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_id = Column(Uuid, ForeignKey("assets.id", ondelete="RESTRICT"), nullable=False, index=True)
    assigned_to_user_id = Column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    assigned_by_id = Column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    assignment_date = Column(Date, nullable=False)
    expected_return_date = Column(Date, nullable=True)
    actual_return_date = Column(Date, nullable=True)
    status = Column(Enum(AssignmentStatus, name="assignment_status"), nullable=False, default=AssignmentStatus.active, index=True)
    purpose = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (Index("ix_assignment_asset_status", "asset_id", "status"),)

    def __repr__(self):
        return f"<Assignment id={self.id} asset_id={self.asset_id} status={self.status}>"
