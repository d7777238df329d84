from sqlalchemy import Column, String, Boolean, Enum
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, VersionMixin
from app.models.enums.user_role import UserRole


class Profile(Base, TimestampMixin, VersionMixin):
    """Back-office staff member. The id is the identity provider's user id."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.viewer, index=True)
    phone = Column(String(30), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Profile id={self.id} email={self.email} role={self.role}>"
