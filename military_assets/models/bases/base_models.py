import uuid

from sqlalchemy import Column, String, Boolean, Date, Text, ForeignKey, Index, Uuid
from military_assets.core.db import Base
from military_assets.models.base.mixins import TimestampMixin, AuditMixin


class MilitaryBase(Base, TimestampMixin, AuditMixin):
    """A physical installation. Deactivated, never hard-deleted."""

    __tablename__ = "bases"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False, unique=True, index=True)
    location = Column(String(200), nullable=False)
    commander_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    contact_info = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (Index("ix_base_active", "is_active"),)

    def __repr__(self):
        return f"<MilitaryBase id={self.id} code={self.code} active={self.is_active}>"


class CommanderHandover(Base, TimestampMixin):
    __tablename__ = "commander_handovers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    base_id = Column(Uuid, ForeignKey("bases.id", ondelete="RESTRICT"), nullable=False, index=True)
    previous_commander_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    new_commander_id = Column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    handover_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    performed_by_id = Column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)

    def __repr__(self):
        return f"<CommanderHandover base_id={self.base_id} {self.previous_commander_id}->{self.new_commander_id}>"
