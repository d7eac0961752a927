import uuid

from sqlalchemy import Column, ForeignKey, Index, String, Uuid
from military_assets.core.db import Base
from military_assets.models.base.mixins import TimestampMixin


class UserActivity(Base, TimestampMixin):
    """Who did what, in plain words. Written in the same transaction as the action it describes."""

    __tablename__ = "user_activity"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    # kept so the trail still reads correctly after a rename
    username_snapshot = Column(String(150), nullable=False, index=True)
    code = Column(String(64), nullable=False)
    message = Column(String, nullable=False)

    __table_args__ = (
        Index("ix_user_activity_user_created", "user_id", "created_at"),
        Index("ix_user_activity_code_created", "code", "created_at"),
    )

    def __repr__(self):
        return f"<UserActivity {self.code} by {self.username_snapshot} at {self.created_at}>"
