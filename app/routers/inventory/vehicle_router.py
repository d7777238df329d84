# app/routers/inventory/vehicle_router.py

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.permissions import Permission
from app.core.db import get_db
from app.schemas.inventory.vehicle_schemas import (
    VehicleCreate,
    VehicleUpdate,
    VehicleStatusUpdate,
    VehicleFilters,
    VehicleOut,
    VehicleListData,
    VehicleStatusHistoryOut,
    VehicleSearchResult,
    VehicleStats,
    VehicleProfitSummary,
    StatusDescriptor,
)
from app.services.inventory.vehicle_service import (
    create_vehicle,
    list_vehicles,
    get_vehicle,
    update_vehicle,
    delete_vehicle,
    update_vehicle_status,
    list_status_history,
    list_status_descriptors,
    search_by_vin,
    vehicle_stats,
    vehicle_profit,
)
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.post("", response_model=APIResponse[VehicleOut], status_code=201)
async def create_vehicle_api(
    payload: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission(Permission.create_vehicles)),
):
    vehicle = await create_vehicle(db, payload, user)
    return success_response("Vehicle created successfully", vehicle)


@router.get("", response_model=APIResponse[VehicleListData])
async def list_vehicles_api(
    filters: VehicleFilters = Depends(),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission(Permission.view_vehicles)),
):
    data = await list_vehicles(db, filters, page=page, page_size=page_size)
    return success_response("Vehicles retrieved successfully", data)


@router.get("/statuses", response_model=APIResponse[List[StatusDescriptor]])
async def list_statuses_api(
    user=Depends(require_permission(Permission.view_vehicles)),
):
    return success_response("Vehicle statuses retrieved successfully", list_status_descriptors())


@router.get("/stats", response_model=APIResponse[VehicleStats])
async def vehicle_stats_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission(Permission.view_vehicles)),
):
    return success_response("Vehicle statistics retrieved successfully", await vehicle_stats(db))


@router.get("/search", response_model=APIResponse[List[VehicleSearchResult]])
async def search_vehicles_api(
    vin: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission(Permission.view_vehicles)),
):
    return success_response("Vehicles retrieved successfully", await search_by_vin(db, vin))


@router.get("/{vehicle_id}", response_model=APIResponse[VehicleOut])
async def get_vehicle_api(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission(Permission.view_vehicles)),
):
    return success_response("Vehicle retrieved successfully", await get_vehicle(db, vehicle_id))


@router.patch("/{vehicle_id}", response_model=APIResponse[VehicleOut])
async def update_vehicle_api(
    vehicle_id: int,
    payload: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission(Permission.edit_vehicles)),
):
    vehicle = await update_vehicle(db, vehicle_id, payload, user)
    return success_response("Vehicle updated successfully", vehicle)


@router.delete("/{vehicle_id}", response_model=APIResponse[dict])
async def delete_vehicle_api(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission(Permission.delete_vehicles)),
):
    return success_response("Vehicle deleted successfully", await delete_vehicle(db, vehicle_id, user))


@router.post("/{vehicle_id}/status", response_model=APIResponse[VehicleOut])
async def update_vehicle_status_api(
    vehicle_id: int,
    payload: VehicleStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission(Permission.edit_vehicles)),
):
    vehicle = await update_vehicle_status(db, vehicle_id, payload, user)
    return success_response("Vehicle status updated successfully", vehicle)


@router.get("/{vehicle_id}/status-history", response_model=APIResponse[List[VehicleStatusHistoryOut]])
async def status_history_api(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission(Permission.view_vehicles)),
):
    history = await list_status_history(db, vehicle_id)
    return success_response("Status history retrieved successfully", history)


@router.get("/{vehicle_id}/profit", response_model=APIResponse[VehicleProfitSummary])
async def vehicle_profit_api(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission(Permission.view_finances)),
):
    return success_response("Profit summary retrieved successfully", await vehicle_profit(db, vehicle_id))
