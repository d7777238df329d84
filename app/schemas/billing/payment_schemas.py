from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List

from app.models.enums.invoice_status import PaymentMethod, CurrencyCode


# =========================
# CREATE / UPDATE
# =========================
class PaymentCreate(BaseModel):
    invoice_id: int
    amount: Decimal = Field(gt=0)
    # Defaults to the invoice currency
    currency: Optional[CurrencyCode] = None
    payment_date: Optional[date] = None
    payment_method: PaymentMethod
    transaction_id: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None

    @field_validator("amount", "payment_date", "payment_method")
    @classmethod
    def reject_null(cls, v):
        # omit the field to keep the stored value
        if v is None:
            raise ValueError("may not be null")
        return v


class FullPaymentCreate(BaseModel):
    payment_method: PaymentMethod
    transaction_id: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None


class RefundCreate(BaseModel):
    amount: Decimal = Field(gt=0)
    reason: str = Field(min_length=1)


class PaymentFilters(BaseModel):
    search: Optional[str] = None
    invoice_id: Optional[int] = None
    customer_id: Optional[int] = None
    payment_method: Optional[PaymentMethod] = None
    currency: Optional[CurrencyCode] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    amount_from: Optional[Decimal] = None
    amount_to: Optional[Decimal] = None


# =========================
# OUT
# =========================
class PaymentOut(BaseModel):
    id: int
    invoice_id: int
    amount: Decimal
    currency: CurrencyCode
    payment_date: date
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    refund_of_id: Optional[int] = None
    notes: Optional[str] = None
    created_by_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentListItem(PaymentOut):
    invoice_number: str
    customer_name: str


class PaymentListData(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int
    items: List[PaymentListItem]


class InvoicePaymentSummary(BaseModel):
    invoice_id: int
    invoice_amount: Decimal
    total_paid: Decimal
    balance_due: Decimal
    payment_percentage: Decimal
    payment_count: int
    payments: List[PaymentOut]


class MethodBreakdown(BaseModel):
    counts: dict[str, int]
    totals: dict[str, Decimal]


class PaymentStats(BaseModel):
    total: int
    total_value: dict[str, Decimal]
    by_method: MethodBreakdown


class PaymentTrendPoint(BaseModel):
    day: date
    totals: dict[str, Decimal]
    total_aed: Decimal
    count: int
