from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List

from app.core.config import DEFAULT_CURRENCY
from app.models.enums.invoice_status import InvoiceStatus, CurrencyCode, PaymentMethod


# =========================
# ITEMS
# =========================
class InvoiceItemCreate(BaseModel):
    description: str = Field(min_length=1, max_length=500)
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    unit_price: Decimal = Field(ge=0)


class InvoiceItemOut(BaseModel):
    id: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


# =========================
# CREATE / UPDATE
# =========================
class InvoiceCreate(BaseModel):
    customer_id: int
    vehicle_id: Optional[int] = None
    currency: CurrencyCode = CurrencyCode(DEFAULT_CURRENCY)
    # Defaults to the configured VAT for AED invoices and 0 otherwise
    vat_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    due_date: Optional[date] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    items: List[InvoiceItemCreate] = Field(min_length=1)


class InvoiceFromVehicleSale(BaseModel):
    vehicle_id: int
    customer_id: int
    sale_price: Decimal = Field(gt=0)
    currency: CurrencyCode = CurrencyCode(DEFAULT_CURRENCY)
    additional_items: List[InvoiceItemCreate] = []


class InvoiceUpdate(BaseModel):
    due_date: Optional[date] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    vat_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    items: Optional[List[InvoiceItemCreate]] = Field(default=None, min_length=1)

    version: int


class InvoiceFilters(BaseModel):
    search: Optional[str] = None
    status: Optional[InvoiceStatus] = None
    customer_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    currency: Optional[CurrencyCode] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    due_from: Optional[date] = None
    due_to: Optional[date] = None
    overdue_only: bool = False


# =========================
# OUT
# =========================
class InvoicePaymentOut(BaseModel):
    id: int
    amount: Decimal
    currency: CurrencyCode
    payment_date: date
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class InvoiceOut(BaseModel):
    id: int
    invoice_number: str
    customer_id: int
    vehicle_id: Optional[int] = None
    status: InvoiceStatus
    currency: CurrencyCode

    subtotal: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    total_amount: Decimal
    total_paid: Decimal
    balance_due: Decimal

    due_date: Optional[date] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    version: int

    created_by_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    items: List[InvoiceItemOut] = []
    payments: List[InvoicePaymentOut] = []

    model_config = ConfigDict(from_attributes=True)


class InvoiceListItem(BaseModel):
    id: int
    invoice_number: str
    customer_id: int
    customer_name: str
    vehicle_id: Optional[int] = None
    status: InvoiceStatus
    currency: CurrencyCode
    total_amount: Decimal
    total_paid: Decimal
    balance_due: Decimal
    due_date: Optional[date] = None
    created_at: datetime


class InvoiceListData(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int
    items: List[InvoiceListItem]


class StatusBreakdown(BaseModel):
    counts: dict[str, int]
    totals: dict[str, Decimal]


class OverdueSummary(BaseModel):
    count: int
    amount: Decimal


class InvoiceStats(BaseModel):
    total: int
    total_value: dict[str, Decimal]
    by_status: StatusBreakdown
    overdue: OverdueSummary
