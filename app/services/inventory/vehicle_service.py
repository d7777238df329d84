# app/services/inventory/vehicle_service.py

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import Select, select, func, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.activity_codes import ActivityCode
from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException, ensure_version
from app.models.enums.invoice_status import CurrencyCode
from app.models.enums.vehicle_status import VehicleStatus, StatusGroup, SaleType
from app.models.inventory.expense_models import Expense
from app.models.inventory.vehicle_models import Vehicle, VehicleStatusHistory
from app.schemas.inventory.vehicle_schemas import (
    VehicleCreate,
    VehicleUpdate,
    VehicleStatusUpdate,
    VehicleFilters,
    VehicleOut,
    VehicleListItem,
    VehicleStatusHistoryOut,
    VehicleSearchResult,
    VehicleStats,
    StatusGroupCounts,
    VehicleProfitSummary,
    StatusDescriptor,
)
from app.utils.activity_helpers import emit_user_activity
from app.utils.decimal_utils import to_decimal, to_aed, percent_of, ZERO
from app.utils.logger import get_logger
from app.utils.pagination import paginate
from app.utils.vehicle_status import (
    describe_status,
    format_admin_status,
    statuses_for_group,
)

logger = get_logger(__name__)

RECENT_ADDITION_DAYS = 7
VIN_SEARCH_LIMIT = 10


# =====================================================
# HELPERS
# =====================================================
async def _get_vehicle(db: AsyncSession, vehicle_id: int, *, for_update: bool = False) -> Vehicle:
    query = select(Vehicle).where(Vehicle.id == vehicle_id)
    if for_update:
        query = query.with_for_update()

    vehicle = (await db.execute(query)).scalar_one_or_none()
    if not vehicle:
        raise AppException(404, "Vehicle not found", ErrorCode.VEHICLE_NOT_FOUND)
    return vehicle


def _map_list_item(vehicle: Vehicle) -> VehicleListItem:
    return VehicleListItem(
        id=vehicle.id,
        vin=vehicle.vin,
        year=vehicle.year,
        make=vehicle.make,
        model=vehicle.model,
        trim=vehicle.trim,
        mileage=vehicle.mileage,
        auction_house=vehicle.auction_house,
        current_status=vehicle.current_status,
        status_label=format_admin_status(vehicle.current_status),
        current_location=vehicle.current_location,
        purchase_price=vehicle.purchase_price,
        purchase_currency=vehicle.purchase_currency,
        sale_price=vehicle.sale_price,
        sale_currency=vehicle.sale_currency,
        is_public=vehicle.is_public,
        expected_arrival_date=vehicle.expected_arrival_date,
        created_at=vehicle.created_at,
    )


def _map_vehicle(
    vehicle: Vehicle,
    history: Optional[list[VehicleStatusHistory]] = None,
    expense_total_aed: Optional[Decimal] = None,
) -> VehicleOut:
    data = {c.key: getattr(vehicle, c.key) for c in Vehicle.__table__.columns}
    return VehicleOut(
        **data,
        status_label=format_admin_status(vehicle.current_status),
        status_history=[VehicleStatusHistoryOut.model_validate(h) for h in history or []],
        expense_total_aed=expense_total_aed,
    )


def _check_sale_terms(vehicle: Vehicle) -> None:
    # Re-checked on the merged row; a partial update only sees its own fields
    if vehicle.sale_type == SaleType.local_only and vehicle.sale_currency not in (None, CurrencyCode.AED):
        raise AppException(
            422,
            "Local-only sales must be priced in AED",
            ErrorCode.VALIDATION_ERROR,
        )
    if vehicle.sale_price is not None and vehicle.sale_price > 0 and vehicle.sale_currency is None:
        raise AppException(
            422,
            "sale_currency is required when a sale price is set",
            ErrorCode.VEHICLE_SALE_PRICE_MISSING,
        )


def apply_vehicle_filters(query: Select, filters: VehicleFilters) -> Select:
    """Shared by the admin and public listings."""
    if filters.search:
        term = f"%{filters.search}%"
        query = query.where(
            or_(
                Vehicle.vin.ilike(term),
                Vehicle.make.ilike(term),
                Vehicle.model.ilike(term),
            )
        )

    if filters.status:
        query = query.where(Vehicle.current_status.in_(filters.status))

    if filters.status_group:
        statuses = [s.value for s in statuses_for_group(filters.status_group)]
        query = query.where(Vehicle.current_status.in_(statuses))

    if filters.make:
        query = query.where(Vehicle.make.ilike(f"%{filters.make}%"))

    if filters.model:
        query = query.where(Vehicle.model.ilike(f"%{filters.model}%"))

    if filters.year_min is not None:
        query = query.where(Vehicle.year >= filters.year_min)

    if filters.year_max is not None:
        query = query.where(Vehicle.year <= filters.year_max)

    if filters.price_min is not None:
        query = query.where(Vehicle.purchase_price >= filters.price_min)

    if filters.price_max is not None:
        query = query.where(Vehicle.purchase_price <= filters.price_max)

    if filters.auction_house:
        query = query.where(Vehicle.auction_house.ilike(f"%{filters.auction_house}%"))

    if filters.is_public is not None:
        query = query.where(Vehicle.is_public.is_(filters.is_public))

    return query


async def _add_status_history(
    db: AsyncSession,
    vehicle_id: int,
    status: str,
    *,
    location: Optional[str] = None,
    notes: Optional[str] = None,
    user_id: Optional[str] = None,
) -> None:
    db.add(
        VehicleStatusHistory(
            vehicle_id=vehicle_id,
            status=status,
            location=location,
            notes=notes,
            changed_by_id=user_id,
        )
    )


async def _expense_total_aed(db: AsyncSession, vehicle_id: int) -> Decimal:
    rows = (
        await db.execute(
            select(Expense.currency, func.sum(Expense.amount))
            .where(Expense.vehicle_id == vehicle_id)
            .group_by(Expense.currency)
        )
    ).all()
    return sum((to_aed(total, currency) for currency, total in rows), ZERO)


# =====================================================
# CREATE
# =====================================================
async def create_vehicle(db: AsyncSession, payload: VehicleCreate, user) -> VehicleOut:
    exists = await db.scalar(select(Vehicle.id).where(Vehicle.vin == payload.vin))
    if exists:
        raise AppException(
            409,
            "A vehicle with this VIN already exists",
            ErrorCode.VEHICLE_VIN_EXISTS,
            details={"vin": payload.vin},
        )

    vehicle = Vehicle(
        **payload.model_dump(),
        current_status=VehicleStatus.auction_won.value,
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    db.add(vehicle)
    await db.flush()

    await _add_status_history(
        db,
        vehicle.id,
        VehicleStatus.auction_won.value,
        notes="Vehicle added to system",
        user_id=user.id,
    )

    await emit_user_activity(
        db,
        user,
        ActivityCode.CREATE_VEHICLE,
        target_id=vehicle.id,
        target_name=f"{vehicle.year} {vehicle.make} {vehicle.model}",
        vin=vehicle.vin,
    )

    await db.commit()
    await db.refresh(vehicle)

    logger.info("Vehicle created", extra={"vehicle_id": vehicle.id, "vin": vehicle.vin})
    return await get_vehicle(db, vehicle.id)


# =====================================================
# LIST / GET
# =====================================================
async def list_vehicles(
    db: AsyncSession,
    filters: VehicleFilters,
    *,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    query = apply_vehicle_filters(select(Vehicle), filters).order_by(
        desc(Vehicle.created_at), desc(Vehicle.id)
    )
    data = await paginate(db, query, page=page, page_size=page_size)
    data["items"] = [_map_list_item(v) for v in data["items"]]
    return data


async def get_vehicle(db: AsyncSession, vehicle_id: int) -> VehicleOut:
    vehicle = await _get_vehicle(db, vehicle_id)
    history = await _status_history_rows(db, vehicle_id)
    expense_total = await _expense_total_aed(db, vehicle_id)
    return _map_vehicle(vehicle, history, expense_total)


# =====================================================
# UPDATE (OPTIMISTIC)
# =====================================================
async def update_vehicle(
    db: AsyncSession,
    vehicle_id: int,
    payload: VehicleUpdate,
    user,
) -> VehicleOut:
    vehicle = await _get_vehicle(db, vehicle_id, for_update=True)

    ensure_version(vehicle, payload.version, "Vehicle", ErrorCode.VEHICLE_VERSION_CONFLICT)

    changes: list[str] = []
    for field, value in payload.model_dump(exclude_unset=True, exclude={"version"}).items():
        if getattr(vehicle, field) != value:
            setattr(vehicle, field, value)
            changes.append(field)

    if not changes:
        raise AppException(400, "No changes detected", ErrorCode.VALIDATION_ERROR)

    _check_sale_terms(vehicle)

    vehicle.version += 1
    vehicle.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        ActivityCode.UPDATE_VEHICLE,
        target_id=vehicle.id,
        target_name=f"{vehicle.year} {vehicle.make} {vehicle.model}",
        changes=", ".join(changes),
    )

    await db.commit()
    await db.refresh(vehicle)

    logger.info("Vehicle updated", extra={"vehicle_id": vehicle.id, "fields": changes})
    return await get_vehicle(db, vehicle.id)


# =====================================================
# DELETE
# =====================================================
async def delete_vehicle(db: AsyncSession, vehicle_id: int, user) -> dict:
    vehicle = await _get_vehicle(db, vehicle_id, for_update=True)

    await emit_user_activity(
        db,
        user,
        ActivityCode.DELETE_VEHICLE,
        target_id=vehicle.id,
        target_name=f"{vehicle.year} {vehicle.make} {vehicle.model}",
        vin=vehicle.vin,
    )

    await db.delete(vehicle)
    await db.commit()

    logger.info("Vehicle deleted", extra={"vehicle_id": vehicle_id})
    return {"id": vehicle_id}


# =====================================================
# STATUS
# =====================================================
async def update_vehicle_status(
    db: AsyncSession,
    vehicle_id: int,
    payload: VehicleStatusUpdate,
    user,
) -> VehicleOut:
    vehicle = await _get_vehicle(db, vehicle_id, for_update=True)
    old_status = vehicle.current_status

    vehicle.current_status = payload.status.value
    if payload.location is not None:
        vehicle.current_location = payload.location
    vehicle.version += 1
    vehicle.updated_by_id = user.id

    notes = payload.notes or (f"Location: {payload.location}" if payload.location else None)
    await _add_status_history(
        db,
        vehicle.id,
        payload.status.value,
        location=payload.location,
        notes=notes,
        user_id=user.id,
    )

    await emit_user_activity(
        db,
        user,
        ActivityCode.UPDATE_VEHICLE_STATUS,
        target_id=vehicle.id,
        target_name=f"{vehicle.year} {vehicle.make} {vehicle.model}",
        old_status=format_admin_status(old_status),
        new_status=format_admin_status(payload.status),
    )

    await db.commit()
    await db.refresh(vehicle)

    logger.info(
        "Vehicle status changed",
        extra={"vehicle_id": vehicle.id, "from": old_status, "to": vehicle.current_status},
    )
    return await get_vehicle(db, vehicle.id)


async def _status_history_rows(db: AsyncSession, vehicle_id: int) -> list[VehicleStatusHistory]:
    result = await db.execute(
        select(VehicleStatusHistory)
        .where(VehicleStatusHistory.vehicle_id == vehicle_id)
        .order_by(desc(VehicleStatusHistory.changed_at), desc(VehicleStatusHistory.id))
    )
    return list(result.scalars().all())


async def list_status_history(db: AsyncSession, vehicle_id: int) -> list[VehicleStatusHistoryOut]:
    await _get_vehicle(db, vehicle_id)
    rows = await _status_history_rows(db, vehicle_id)
    return [VehicleStatusHistoryOut.model_validate(r) for r in rows]


def list_status_descriptors() -> list[StatusDescriptor]:
    return [StatusDescriptor(**describe_status(s)) for s in VehicleStatus]


# =====================================================
# SEARCH / STATS
# =====================================================
async def search_by_vin(db: AsyncSession, vin: str) -> list[VehicleSearchResult]:
    result = await db.execute(
        select(Vehicle)
        .where(Vehicle.vin.ilike(f"%{vin.strip()}%"))
        .order_by(Vehicle.vin)
        .limit(VIN_SEARCH_LIMIT)
    )
    return [VehicleSearchResult.model_validate(v) for v in result.scalars().all()]


async def count_by_group(db: AsyncSession, *, public_only: bool = False) -> StatusGroupCounts:
    query = select(Vehicle.current_status, func.count(Vehicle.id)).group_by(Vehicle.current_status)
    if public_only:
        query = query.where(Vehicle.is_public.is_(True))

    by_status = dict((await db.execute(query)).all())

    def _total(group: StatusGroup) -> int:
        return sum(by_status.get(s.value, 0) for s in statuses_for_group(group))

    return StatusGroupCounts(
        all=_total(StatusGroup.all),
        arrived=_total(StatusGroup.arrived),
        arriving_soon=_total(StatusGroup.arriving_soon),
    )


async def vehicle_stats(db: AsyncSession) -> VehicleStats:
    total = await db.scalar(select(func.count(Vehicle.id))) or 0

    rows = (
        await db.execute(
            select(Vehicle.current_status, func.count(Vehicle.id)).group_by(Vehicle.current_status)
        )
    ).all()
    by_status = {status or "unknown": count for status, count in rows}

    since = datetime.now(timezone.utc) - timedelta(days=RECENT_ADDITION_DAYS)
    recent = await db.scalar(
        select(func.count(Vehicle.id)).where(Vehicle.created_at >= since)
    ) or 0

    return VehicleStats(
        total=total,
        by_status=by_status,
        recent_additions=recent,
        by_group=await count_by_group(db),
    )


async def vehicle_profit(db: AsyncSession, vehicle_id: int) -> VehicleProfitSummary:
    """Cost basis and margin in AED using the fixed reporting rates."""
    vehicle = await _get_vehicle(db, vehicle_id)

    purchase_aed = to_aed(vehicle.purchase_price, vehicle.purchase_currency)
    expenses_aed = await _expense_total_aed(db, vehicle_id)
    total_cost = to_decimal(purchase_aed + expenses_aed)

    summary = VehicleProfitSummary(
        vehicle_id=vehicle.id,
        purchase_price_aed=purchase_aed,
        total_expenses_aed=expenses_aed,
        total_cost=total_cost,
    )

    if vehicle.sale_price and vehicle.sale_currency:
        sale_aed = to_aed(vehicle.sale_price, vehicle.sale_currency)
        profit = to_decimal(sale_aed - total_cost)
        summary.sale_price_aed = sale_aed
        summary.profit = profit
        summary.profit_margin = percent_of(profit, sale_aed)
        summary.roi = percent_of(profit, total_cost)

    return summary
