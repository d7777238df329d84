from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, Date, ForeignKey, Numeric, Enum, Index, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin, AuditMixin, VersionMixin
from app.models.enums.invoice_status import InvoiceStatus, CurrencyCode


class Invoice(Base, TimestampMixin, SoftDeleteMixin, AuditMixin, VersionMixin):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    invoice_number = Column(String(50), nullable=False, unique=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(Enum(InvoiceStatus), nullable=False, default=InvoiceStatus.draft, index=True)

    currency = Column(Enum(CurrencyCode), nullable=False, default=CurrencyCode.AED)
    subtotal = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    vat_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    vat_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total_paid = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    balance_due = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    due_date = Column(Date, nullable=True, index=True)
    terms = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
        lazy="selectin",
    )
    payments = relationship(
        "Payment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="Payment.payment_date",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_invoice_customer_status", "customer_id", "status"),
        CheckConstraint("subtotal >= 0 AND vat_amount >= 0 AND total_amount >= 0", name="ck_invoice_amounts_non_negative"),
    )

    def __repr__(self):
        return f"<Invoice {self.invoice_number} status={self.status}>"


class InvoiceItem(Base, TimestampMixin):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(String(500), nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    line_total = Column(Numeric(14, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_invoice_item_qty_positive"),
        CheckConstraint("unit_price >= 0", name="ck_invoice_item_price_non_negative"),
        CheckConstraint("line_total >= 0", name="ck_invoice_item_total_non_negative"),
    )

    def __repr__(self):
        return f"<InvoiceItem id={self.id} qty={self.quantity} total={self.line_total}>"
