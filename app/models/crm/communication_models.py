from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.crm import CommunicationType, CommunicationDirection


class Communication(Base, TimestampMixin):
    __tablename__ = "communications"

    id = Column(Integer, primary_key=True)
    inquiry_id = Column(Integer, ForeignKey("inquiries.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(Enum(CommunicationType), nullable=False, index=True)
    direction = Column(Enum(CommunicationDirection), nullable=False, index=True)
    subject = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)

    handled_by_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_communication_customer_created", "customer_id", "created_at"),)

    def __repr__(self):
        return f"<Communication id={self.id} type={self.type} direction={self.direction}>"
