from sqlalchemy import Column, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func


def _user_reference():
    # users can be deactivated but never deleted; SET NULL keeps history rows valid if one ever is
    return Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class AuditMixin:
    """Who created and last changed the row. Set from the caller's RoleContext in services."""

    @declared_attr
    def created_by_id(cls):
        return _user_reference()

    @declared_attr
    def updated_by_id(cls):
        return _user_reference()
