# app/services/public/public_vehicle_service.py
"""
Read-only inventory for the public site.

Only vehicles flagged ``is_public`` whose status is publicly visible are ever
returned. Purchase and cost figures never leave this module.
"""

from sqlalchemy import Select, select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.enums.vehicle_status import StatusGroup
from app.models.inventory.vehicle_models import Vehicle
from app.schemas.inventory.vehicle_schemas import VehicleFilters, StatusGroupCounts
from app.schemas.public.public_schemas import PublicVehicleOut, HomepageVehicles
from app.services.inventory.vehicle_service import apply_vehicle_filters, count_by_group
from app.utils.logger import get_logger
from app.utils.pagination import paginate
from app.utils.vehicle_status import (
    badge_style_category,
    badge_style_classes,
    classify_for_public,
    group_of,
    hidden_statuses,
    is_publicly_visible,
    status_color_info,
)

logger = get_logger(__name__)

HOMEPAGE_POOL_SIZE = 20
HOMEPAGE_SECTION_SIZE = 6


def _public_base() -> Select:
    return select(Vehicle).where(
        Vehicle.is_public.is_(True),
        Vehicle.current_status.not_in([s.value for s in hidden_statuses()]),
    )


def map_public_vehicle(vehicle: Vehicle) -> PublicVehicleOut:
    status = vehicle.current_status
    return PublicVehicleOut(
        id=vehicle.id,
        vin=vehicle.vin,
        year=vehicle.year,
        make=vehicle.make,
        model=vehicle.model,
        trim=vehicle.trim,
        engine=vehicle.engine,
        mileage=vehicle.mileage,
        exterior_color=vehicle.exterior_color,
        interior_color=vehicle.interior_color,
        transmission=vehicle.transmission,
        fuel_type=vehicle.fuel_type,
        body_style=vehicle.body_style,
        drivetrain=vehicle.drivetrain,
        primary_damage=vehicle.primary_damage,
        run_and_drive=vehicle.run_and_drive,
        sale_price=vehicle.sale_price,
        sale_currency=vehicle.sale_currency,
        sale_price_includes_vat=vehicle.sale_price_includes_vat,
        expected_arrival_date=vehicle.expected_arrival_date,
        status=status,
        status_label=classify_for_public(status),
        badge_category=badge_style_category(status),
        badge_classes=badge_style_classes(status),
        badge_color=status_color_info(status)["color"],
        status_group=group_of(status).value,
    )


async def list_public_vehicles(
    db: AsyncSession,
    filters: VehicleFilters,
    *,
    page: int = 1,
    page_size: int = 12,
) -> dict:
    # Visibility is fixed here; callers cannot widen it
    filters = filters.model_copy(update={
        "is_public": None,
        "status_group": filters.status_group or StatusGroup.all.value,
    })

    query = apply_vehicle_filters(_public_base(), filters).order_by(
        desc(Vehicle.created_at), desc(Vehicle.id)
    )
    data = await paginate(db, query, page=page, page_size=page_size)
    data["items"] = [map_public_vehicle(v) for v in data["items"]]

    logger.info(
        "Public vehicles listed",
        extra={"status_group": filters.status_group, "total": data["total"]},
    )
    return data


async def public_status_counts(db: AsyncSession) -> StatusGroupCounts:
    return await count_by_group(db, public_only=True)


async def homepage_vehicles(db: AsyncSession) -> HomepageVehicles:
    result = await db.execute(
        _public_base()
        .order_by(desc(Vehicle.created_at), desc(Vehicle.id))
        .limit(HOMEPAGE_POOL_SIZE)
    )
    vehicles = result.scalars().all()

    arrived, arriving = [], []
    for vehicle in vehicles:
        group = group_of(vehicle.current_status)
        if group is StatusGroup.arrived and len(arrived) < HOMEPAGE_SECTION_SIZE:
            arrived.append(map_public_vehicle(vehicle))
        elif group is StatusGroup.arriving_soon and len(arriving) < HOMEPAGE_SECTION_SIZE:
            arriving.append(map_public_vehicle(vehicle))

    return HomepageVehicles(arrived=arrived, arriving_soon=arriving)


async def get_public_vehicle(db: AsyncSession, vehicle_id: int) -> PublicVehicleOut:
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle or not vehicle.is_public or not is_publicly_visible(vehicle.current_status):
        raise AppException(404, "Vehicle not found", ErrorCode.VEHICLE_NOT_FOUND)
    return map_public_vehicle(vehicle)
