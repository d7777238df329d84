from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func


class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now()
    )


class SoftDeleteMixin:
    is_deleted = Column(Boolean, default=False, nullable=False)


class VersionMixin:
    """Optimistic lock counter. Writers send the version they read; see ensure_version."""

    version = Column(Integer, nullable=False, default=1)


class AuditMixin:
    # Profiles are owned by the identity provider, so only the id is stored
    @declared_attr
    def created_by_id(cls):
        return Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)

    @declared_attr
    def updated_by_id(cls):
        return Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
