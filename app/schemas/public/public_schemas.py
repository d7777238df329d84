from datetime import date
from decimal import Decimal
from typing import Literal, Optional, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.enums.invoice_status import CurrencyCode


class PublicVehicleOut(BaseModel):
    """Vehicle as shown on the public site. Never carries cost data."""

    id: int
    vin: str
    year: int
    make: str
    model: str
    trim: Optional[str] = None
    engine: Optional[str] = None
    mileage: Optional[int] = None
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    transmission: Optional[str] = None
    fuel_type: Optional[str] = None
    body_style: Optional[str] = None
    drivetrain: Optional[str] = None
    primary_damage: Optional[str] = None
    run_and_drive: bool
    sale_price: Optional[Decimal] = None
    sale_currency: Optional[CurrencyCode] = None
    sale_price_includes_vat: bool
    expected_arrival_date: Optional[date] = None

    status: str
    status_label: Optional[str] = None
    badge_category: str
    badge_classes: str
    badge_color: str
    status_group: str

    model_config = ConfigDict(from_attributes=True)


class PublicVehicleListData(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int
    items: List[PublicVehicleOut]


class HomepageVehicles(BaseModel):
    arrived: List[PublicVehicleOut]
    arriving_soon: List[PublicVehicleOut]


class ContactRequest(BaseModel):
    customer_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=30)
    subject: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    inquiry_type: Literal["general", "vehicle_specific", "service", "financing"] = "general"
    preferred_contact_method: Literal["phone", "email", "whatsapp"] = "email"
    vehicle_id: Optional[int] = None
    marketing_consent: bool = False


class ContactResult(BaseModel):
    inquiry_id: int
    customer_id: int
