from sqlalchemy import Column, Integer, Numeric, String, Text, Date, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin
from app.models.enums.invoice_status import PaymentMethod, CurrencyCode


class Payment(Base, TimestampMixin, AuditMixin):
    """Money received against an invoice. Refunds are stored with a negative amount."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)

    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(Enum(CurrencyCode), nullable=False)
    payment_date = Column(Date, nullable=False, index=True)
    payment_method = Column(Enum(PaymentMethod), nullable=False, index=True)
    transaction_id = Column(String(100), nullable=True, index=True)
    # set on refund rows; the original cannot be deleted while refunds point at it
    refund_of_id = Column(Integer, ForeignKey("payments.id", ondelete="RESTRICT"), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    invoice = relationship("Invoice", back_populates="payments")

    def __repr__(self):
        return f"<Payment id={self.id} amount={self.amount}>"
