from sqlalchemy import Column, Integer, String, ForeignKey, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class UserActivity(Base, TimestampMixin):
    """Append-only audit trail. Rows are written by emit_activity and never updated."""

    __tablename__ = "user_activity"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    # survives profile deletion; "system" for scheduled jobs
    username_snapshot = Column(String(255), nullable=False, index=True)
    code = Column(String(50), nullable=False, index=True)
    target_id = Column(String(64), nullable=True)
    message = Column(String, nullable=False)

    __table_args__ = (
        Index("ix_user_activity_user_created", "user_id", "created_at"),
        Index("ix_user_activity_code_target", "code", "target_id"),
    )

    def __repr__(self):
        return f"<UserActivity id={self.id} code={self.code} target={self.target_id}>"
