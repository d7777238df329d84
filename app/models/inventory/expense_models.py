from sqlalchemy import Column, Integer, String, Date, ForeignKey, Numeric, Text, Enum, Index, CheckConstraint
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin
from app.models.enums.expense_category import ExpenseCategory
from app.models.enums.invoice_status import CurrencyCode


class Expense(Base, TimestampMixin, AuditMixin):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True, index=True)
    # "import" is a keyword, so member names and stored values differ
    category = Column(
        Enum(ExpenseCategory, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    subcategory = Column(String(100), nullable=True)
    description = Column(String(500), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(Enum(CurrencyCode), nullable=False, default=CurrencyCode.AED)
    date = Column(Date, nullable=False, index=True)
    vendor = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_expense_vehicle_category", "vehicle_id", "category"),
        CheckConstraint("amount > 0", name="ck_expense_amount_positive"),
    )

    def __repr__(self):
        return f"<Expense id={self.id} category={self.category} amount={self.amount} {self.currency}>"
