# app/routers/public/public_router.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.inventory.vehicle_schemas import VehicleFilters, StatusGroupCounts
from app.schemas.public.public_schemas import (
    PublicVehicleOut,
    PublicVehicleListData,
    HomepageVehicles,
    ContactRequest,
    ContactResult,
)
from app.services.crm.inquiry_service import submit_contact_form
from app.services.public.public_vehicle_service import (
    list_public_vehicles,
    public_status_counts,
    homepage_vehicles,
    get_public_vehicle,
)
from app.utils.logger import get_logger
from app.utils.response import success_response, APIResponse

router = APIRouter(prefix="/public", tags=["Public"])
logger = get_logger(__name__)


@router.get("/vehicles", response_model=APIResponse[PublicVehicleListData])
async def list_public_vehicles_api(
    filters: VehicleFilters = Depends(),
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=48),
    db: AsyncSession = Depends(get_db),
):
    data = await list_public_vehicles(db, filters, page=page, page_size=page_size)
    return success_response("Vehicles retrieved successfully", data)


@router.get("/vehicles/status-counts", response_model=APIResponse[StatusGroupCounts])
async def public_status_counts_api(db: AsyncSession = Depends(get_db)):
    return success_response("Status counts retrieved successfully", await public_status_counts(db))


@router.get("/vehicles/homepage", response_model=APIResponse[HomepageVehicles])
async def homepage_vehicles_api(db: AsyncSession = Depends(get_db)):
    return success_response("Homepage vehicles retrieved successfully", await homepage_vehicles(db))


@router.get("/vehicles/{vehicle_id}", response_model=APIResponse[PublicVehicleOut])
async def get_public_vehicle_api(vehicle_id: int, db: AsyncSession = Depends(get_db)):
    return success_response("Vehicle retrieved successfully", await get_public_vehicle(db, vehicle_id))


@router.post("/contact", response_model=APIResponse[ContactResult], status_code=201)
async def contact_api(payload: ContactRequest, db: AsyncSession = Depends(get_db)):
    logger.info("Contact form submitted", extra={"inquiry_type": payload.inquiry_type})
    result = await submit_contact_form(db, payload)
    return success_response("Thank you for contacting us. We will get back to you shortly.", result)
