# app/routers/crm/customer_router.py

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.permissions import Permission
from app.core.db import get_db
from app.schemas.crm.customer_schemas import (
    CustomerCreate,
    CustomerUpdate,
    CustomerFilters,
    CustomerOut,
    CustomerListData,
    CustomerDetail,
    CustomerSearchResult,
    CustomerStats,
    MarketingConsentStats,
    FindOrCreateResult,
    TimelineEntry,
)
from app.services.crm.customer_service import (
    create_customer,
    find_or_create_customer,
    list_customers,
    get_customer,
    update_customer,
    deactivate_customer,
    search_customers,
    customer_stats,
    customers_by_country,
    marketing_consent_stats,
    customer_timeline,
)
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse

router = APIRouter(prefix="/customers", tags=["Customers"])

can_view = require_permission(Permission.view_customers, Permission.manage_customers)
can_manage = require_permission(Permission.manage_customers)


@router.post("", response_model=APIResponse[CustomerOut], status_code=201)
async def create_customer_api(
    payload: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    return success_response("Customer created successfully", await create_customer(db, payload, user))


@router.post("/find-or-create", response_model=APIResponse[FindOrCreateResult])
async def find_or_create_customer_api(
    payload: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    result = await find_or_create_customer(db, payload, user)
    message = "Customer created successfully" if result.created else "Existing customer found"
    return success_response(message, result)


@router.get("", response_model=APIResponse[CustomerListData])
async def list_customers_api(
    filters: CustomerFilters = Depends(),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    data = await list_customers(db, filters, page=page, page_size=page_size)
    return success_response("Customers retrieved successfully", data)


@router.get("/search", response_model=APIResponse[List[CustomerSearchResult]])
async def search_customers_api(
    q: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Customers retrieved successfully", await search_customers(db, q))


@router.get("/stats", response_model=APIResponse[CustomerStats])
async def customer_stats_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Customer statistics retrieved successfully", await customer_stats(db))


@router.get("/by-country", response_model=APIResponse[dict[str, int]])
async def customers_by_country_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Customer counts retrieved successfully", await customers_by_country(db))


@router.get("/marketing-consent", response_model=APIResponse[MarketingConsentStats])
async def marketing_consent_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Marketing consent statistics retrieved successfully", await marketing_consent_stats(db))


@router.get("/{customer_id}", response_model=APIResponse[CustomerDetail])
async def get_customer_api(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Customer retrieved successfully", await get_customer(db, customer_id))


@router.get("/{customer_id}/timeline", response_model=APIResponse[List[TimelineEntry]])
async def customer_timeline_api(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Customer timeline retrieved successfully", await customer_timeline(db, customer_id))


@router.patch("/{customer_id}", response_model=APIResponse[CustomerOut])
async def update_customer_api(
    customer_id: int,
    payload: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    customer = await update_customer(db, customer_id, payload, user)
    return success_response("Customer updated successfully", customer)


@router.delete("/{customer_id}", response_model=APIResponse[CustomerOut])
async def deactivate_customer_api(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    customer = await deactivate_customer(db, customer_id, user)
    return success_response("Customer deactivated successfully", customer)
