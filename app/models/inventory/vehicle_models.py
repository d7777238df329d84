from sqlalchemy import (
    Column, Integer, String, Boolean, Date, DateTime, ForeignKey, Numeric, Text, Enum, Index, CheckConstraint,
)
from sqlalchemy.sql import func
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin, VersionMixin
from app.models.enums.vehicle_status import VehicleStatus, DamageSeverity, SaleType
from app.models.enums.invoice_status import CurrencyCode


class Vehicle(Base, TimestampMixin, AuditMixin, VersionMixin):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True)
    vin = Column(String(17), nullable=False, unique=True, index=True)
    year = Column(Integer, nullable=False, index=True)
    make = Column(String(100), nullable=False, index=True)
    model = Column(String(100), nullable=False, index=True)
    trim = Column(String(100), nullable=True)
    engine = Column(String(100), nullable=True)
    mileage = Column(Integer, nullable=True)
    exterior_color = Column(String(50), nullable=True)
    interior_color = Column(String(50), nullable=True)
    transmission = Column(String(50), nullable=True)
    fuel_type = Column(String(50), nullable=True)
    body_style = Column(String(50), nullable=True)
    drivetrain = Column(String(50), nullable=True)

    # Auction
    auction_house = Column(String(100), nullable=False, index=True)
    auction_location = Column(String(255), nullable=True)
    sale_date = Column(Date, nullable=True)
    lot_number = Column(String(50), nullable=True)

    # Condition
    primary_damage = Column(String(100), nullable=True)
    secondary_damage = Column(String(100), nullable=True)
    damage_description = Column(Text, nullable=True)
    damage_severity = Column(Enum(DamageSeverity), nullable=True)
    repair_estimate = Column(Numeric(14, 2), nullable=True)
    title_status = Column(String(50), nullable=True)
    keys_available = Column(Boolean, nullable=False, default=False)
    run_and_drive = Column(Boolean, nullable=False, default=False)

    # Stored as text so rows written with retired statuses still load
    current_status = Column(String(40), nullable=False, default=VehicleStatus.auction_won.value, index=True)
    current_location = Column(String(255), nullable=True)

    # Money
    purchase_price = Column(Numeric(14, 2), nullable=False)
    purchase_currency = Column(Enum(CurrencyCode), nullable=False, default=CurrencyCode.USD)
    estimated_total_cost = Column(Numeric(14, 2), nullable=True)
    sale_price = Column(Numeric(14, 2), nullable=True)
    sale_currency = Column(Enum(CurrencyCode), nullable=True)
    sale_price_includes_vat = Column(Boolean, nullable=False, default=False)
    sale_type = Column(Enum(SaleType), nullable=False, default=SaleType.local_and_export)

    expected_arrival_date = Column(Date, nullable=True)
    actual_arrival_date = Column(Date, nullable=True)
    is_public = Column(Boolean, nullable=False, default=True, index=True)

    __table_args__ = (
        Index("ix_vehicle_public_status", "is_public", "current_status"),
        CheckConstraint("purchase_price > 0", name="ck_vehicle_purchase_price_positive"),
        CheckConstraint("mileage IS NULL OR mileage >= 0", name="ck_vehicle_mileage_non_negative"),
    )

    def __repr__(self):
        return f"<Vehicle id={self.id} vin={self.vin} status={self.current_status}>"


class VehicleStatusHistory(Base):
    """Append-only. One row per status transition."""

    __tablename__ = "vehicle_status_history"

    id = Column(Integer, primary_key=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(40), nullable=False)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    changed_by_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    changed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (Index("ix_status_history_vehicle_changed", "vehicle_id", "changed_at"),)

    def __repr__(self):
        return f"<VehicleStatusHistory vehicle_id={self.vehicle_id} status={self.status}>"
