import datetime as dt
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums.expense_category import ExpenseCategory
from app.models.enums.invoice_status import CurrencyCode


class ExpenseCreate(BaseModel):
    vehicle_id: Optional[int] = None
    category: ExpenseCategory
    subcategory: Optional[str] = Field(default=None, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    amount: Decimal = Field(gt=0)
    currency: CurrencyCode = CurrencyCode.AED
    date: dt.date
    vendor: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None


class ExpenseUpdate(BaseModel):
    vehicle_id: Optional[int] = None
    category: Optional[ExpenseCategory] = None
    subcategory: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    amount: Optional[Decimal] = Field(default=None, gt=0)
    currency: Optional[CurrencyCode] = None
    date: Optional[dt.date] = None
    vendor: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None


class ExpenseFilters(BaseModel):
    search: Optional[str] = None
    vehicle_id: Optional[int] = None
    category: Optional[ExpenseCategory] = None
    currency: Optional[CurrencyCode] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    vendor: Optional[str] = None


class ExpenseOut(BaseModel):
    id: int
    vehicle_id: Optional[int] = None
    category: ExpenseCategory
    subcategory: Optional[str] = None
    description: str
    amount: Decimal
    currency: CurrencyCode
    date: dt.date
    vendor: Optional[str] = None
    notes: Optional[str] = None
    created_by_id: Optional[str] = None
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class ExpenseListData(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int
    items: List[ExpenseOut]


class ExpenseStats(BaseModel):
    total_count: int
    total_aed: Decimal
    by_category_aed: dict[str, Decimal]
    by_currency: dict[str, Decimal]


class MonthlyExpenseTotal(BaseModel):
    month: str
    total_aed: Decimal
    count: int
    by_category_aed: dict[str, Decimal]
