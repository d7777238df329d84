# app/schemas/crm/customer_schemas.py

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.enums.crm import InquiryStatus, InquiryPriority
from app.models.enums.invoice_status import InvoiceStatus, CurrencyCode


class CustomerBase(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: str = "UAE"
    date_of_birth: Optional[date] = None
    preferred_language: str = "en"
    marketing_consent: bool = False


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    date_of_birth: Optional[date] = None
    preferred_language: Optional[str] = None
    marketing_consent: Optional[bool] = None

    version: int


class CustomerFilters(BaseModel):
    search: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    marketing_consent: Optional[bool] = None
    is_active: Optional[bool] = True
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None


class CustomerOut(CustomerBase):
    id: int
    is_active: bool
    version: int

    created_by_id: Optional[str] = None
    updated_by_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CustomerListItem(CustomerOut):
    inquiry_count: int = 0
    last_inquiry_date: Optional[datetime] = None
    total_purchases: int = 0
    total_spent: Decimal = Decimal("0.00")


class CustomerListData(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int
    items: List[CustomerListItem]


class CustomerInquirySummary(BaseModel):
    id: int
    subject: Optional[str] = None
    status: InquiryStatus
    priority: InquiryPriority
    vehicle_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerInvoiceSummary(BaseModel):
    id: int
    invoice_number: str
    status: InvoiceStatus
    total_amount: Decimal
    currency: CurrencyCode
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerDetail(CustomerOut):
    inquiries: List[CustomerInquirySummary] = []
    invoices: List[CustomerInvoiceSummary] = []


class CustomerSearchResult(BaseModel):
    id: int
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CustomerStats(BaseModel):
    total: int
    recent: int
    active: int


class MarketingConsentStats(BaseModel):
    total: int
    consented: int
    declined: int


class FindOrCreateResult(BaseModel):
    customer: CustomerOut
    created: bool


class TimelineEntry(BaseModel):
    type: str
    id: int
    title: str
    status: Optional[str] = None
    created_at: datetime
