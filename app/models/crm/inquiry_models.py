from sqlalchemy import Column, Integer, String, Text, ForeignKey, Enum, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin
from app.models.enums.crm import InquirySource, InquiryPriority, InquiryStatus


class Inquiry(Base, TimestampMixin, AuditMixin):
    __tablename__ = "inquiries"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True, index=True)

    source = Column(Enum(InquirySource), nullable=False, default=InquirySource.website, index=True)
    subject = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    priority = Column(Enum(InquiryPriority), nullable=False, default=InquiryPriority.medium, index=True)
    status = Column(Enum(InquiryStatus), nullable=False, default=InquiryStatus.new, index=True)
    assigned_to_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    response = Column(Text, nullable=True)

    __table_args__ = (Index("ix_inquiry_status_priority", "status", "priority"),)

    def __repr__(self):
        return f"<Inquiry id={self.id} customer_id={self.customer_id} status={self.status}>"
