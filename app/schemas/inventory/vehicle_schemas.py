from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List

from fastapi import Query
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.enums.invoice_status import CurrencyCode
from app.models.enums.vehicle_status import VehicleStatus, DamageSeverity, SaleType


def _check_year(value: Optional[int]) -> Optional[int]:
    if value is None:
        return value
    latest = date.today().year + 1
    if not 1900 <= value <= latest:
        raise ValueError(f"year must be between 1900 and {latest}")
    return value


def _check_sale_terms(model):
    if model.sale_type == SaleType.local_only and model.sale_currency not in (None, CurrencyCode.AED):
        raise ValueError("Local-only sales must be priced in AED")
    if model.sale_price is not None and model.sale_price > 0 and model.sale_currency is None:
        raise ValueError("sale_currency is required when a sale price is set")
    return model


# =========================
# CREATE / UPDATE
# =========================
class VehicleBase(BaseModel):
    trim: Optional[str] = None
    engine: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    transmission: Optional[str] = None
    fuel_type: Optional[str] = None
    body_style: Optional[str] = None
    drivetrain: Optional[str] = None

    auction_location: Optional[str] = None
    sale_date: Optional[date] = None
    lot_number: Optional[str] = None

    primary_damage: Optional[str] = None
    secondary_damage: Optional[str] = None
    damage_description: Optional[str] = None
    damage_severity: Optional[DamageSeverity] = None
    repair_estimate: Optional[Decimal] = Field(default=None, ge=0)
    title_status: Optional[str] = None
    keys_available: bool = False
    run_and_drive: bool = False

    current_location: Optional[str] = None
    estimated_total_cost: Optional[Decimal] = Field(default=None, ge=0)
    sale_price: Optional[Decimal] = Field(default=None, ge=0)
    sale_currency: Optional[CurrencyCode] = None
    sale_price_includes_vat: bool = False
    sale_type: SaleType = SaleType.local_and_export

    expected_arrival_date: Optional[date] = None
    actual_arrival_date: Optional[date] = None
    is_public: bool = True


class VehicleCreate(VehicleBase):
    vin: str = Field(min_length=17, max_length=17)
    year: int
    make: str = Field(min_length=1, max_length=100)
    model: str = Field(min_length=1, max_length=100)
    auction_house: str = Field(min_length=1, max_length=100)
    purchase_price: Decimal = Field(gt=0)
    purchase_currency: CurrencyCode = CurrencyCode.USD

    @field_validator("vin")
    @classmethod
    def normalize_vin(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: int) -> int:
        return _check_year(v)

    @model_validator(mode="after")
    def validate_sale_terms(self):
        return _check_sale_terms(self)


class VehicleUpdate(BaseModel):
    """Partial update. Status changes go through the status endpoint."""

    year: Optional[int] = None
    make: Optional[str] = Field(default=None, min_length=1, max_length=100)
    model: Optional[str] = Field(default=None, min_length=1, max_length=100)
    trim: Optional[str] = None
    engine: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    transmission: Optional[str] = None
    fuel_type: Optional[str] = None
    body_style: Optional[str] = None
    drivetrain: Optional[str] = None

    auction_house: Optional[str] = Field(default=None, min_length=1, max_length=100)
    auction_location: Optional[str] = None
    sale_date: Optional[date] = None
    lot_number: Optional[str] = None

    primary_damage: Optional[str] = None
    secondary_damage: Optional[str] = None
    damage_description: Optional[str] = None
    damage_severity: Optional[DamageSeverity] = None
    repair_estimate: Optional[Decimal] = Field(default=None, ge=0)
    title_status: Optional[str] = None
    keys_available: Optional[bool] = None
    run_and_drive: Optional[bool] = None

    current_location: Optional[str] = None
    purchase_price: Optional[Decimal] = Field(default=None, gt=0)
    purchase_currency: Optional[CurrencyCode] = None
    estimated_total_cost: Optional[Decimal] = Field(default=None, ge=0)
    sale_price: Optional[Decimal] = Field(default=None, ge=0)
    sale_currency: Optional[CurrencyCode] = None
    sale_price_includes_vat: Optional[bool] = None
    sale_type: Optional[SaleType] = None

    expected_arrival_date: Optional[date] = None
    actual_arrival_date: Optional[date] = None
    is_public: Optional[bool] = None

    version: int

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: Optional[int]) -> Optional[int]:
        return _check_year(v)

    @model_validator(mode="after")
    def validate_sale_terms(self):
        return _check_sale_terms(self)


class VehicleStatusUpdate(BaseModel):
    status: VehicleStatus
    location: Optional[str] = None
    notes: Optional[str] = None


# =========================
# FILTERS
# =========================
class VehicleFilters(BaseModel):
    search: Optional[str] = None
    status: Optional[List[str]] = Query(None)
    status_group: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year_min: Optional[int] = None
    year_max: Optional[int] = None
    price_min: Optional[Decimal] = None
    price_max: Optional[Decimal] = None
    auction_house: Optional[str] = None
    is_public: Optional[bool] = None


# =========================
# OUT
# =========================
class VehicleStatusHistoryOut(BaseModel):
    id: int
    vehicle_id: int
    status: str
    location: Optional[str] = None
    notes: Optional[str] = None
    changed_by_id: Optional[str] = None
    changed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VehicleListItem(BaseModel):
    id: int
    vin: str
    year: int
    make: str
    model: str
    trim: Optional[str] = None
    mileage: Optional[int] = None
    auction_house: str
    current_status: str
    status_label: str
    current_location: Optional[str] = None
    purchase_price: Decimal
    purchase_currency: CurrencyCode
    sale_price: Optional[Decimal] = None
    sale_currency: Optional[CurrencyCode] = None
    is_public: bool
    expected_arrival_date: Optional[date] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VehicleOut(VehicleBase):
    id: int
    vin: str
    year: int
    make: str
    model: str
    auction_house: str
    purchase_price: Decimal
    purchase_currency: CurrencyCode
    current_status: str
    status_label: str
    version: int

    created_by_id: Optional[str] = None
    updated_by_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    status_history: List[VehicleStatusHistoryOut] = []
    expense_total_aed: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class VehicleSearchResult(BaseModel):
    id: int
    vin: str
    year: int
    make: str
    model: str
    current_status: str

    model_config = ConfigDict(from_attributes=True)


class VehicleListData(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int
    items: List[VehicleListItem]


class StatusGroupCounts(BaseModel):
    all: int
    arrived: int
    arriving_soon: int


class VehicleStats(BaseModel):
    total: int
    by_status: dict[str, int]
    recent_additions: int
    by_group: StatusGroupCounts


class VehicleProfitSummary(BaseModel):
    vehicle_id: int
    currency: str = "AED"
    purchase_price_aed: Decimal
    total_expenses_aed: Decimal
    total_cost: Decimal
    sale_price_aed: Optional[Decimal] = None
    profit: Optional[Decimal] = None
    profit_margin: Optional[Decimal] = None
    roi: Optional[Decimal] = None


class StatusDescriptor(BaseModel):
    value: str
    admin_label: str
    public_label: Optional[str] = None
    is_publicly_visible: bool
    badge_category: str
    badge_color: str
    group: str
