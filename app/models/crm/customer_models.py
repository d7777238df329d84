from sqlalchemy import Column, Integer, String, Boolean, Date, Text, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin, VersionMixin


class Customer(Base, TimestampMixin, AuditMixin, VersionMixin):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)

    full_name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True, unique=True, index=True)
    phone = Column(String(30), nullable=True, index=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=False, default="UAE", index=True)
    date_of_birth = Column(Date, nullable=True)
    preferred_language = Column(String(10), nullable=False, default="en")
    marketing_consent = Column(Boolean, nullable=False, default=False)

    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (Index("ix_customer_active", "is_active"),)

    def __repr__(self):
        return f"<Customer id={self.id} name={self.full_name} active={self.is_active}>"
