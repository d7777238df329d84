# app/routers/billing/payment_router.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.permissions import Permission
from app.core.db import get_db
from app.schemas.billing.payment_schemas import (
    PaymentCreate,
    PaymentUpdate,
    FullPaymentCreate,
    RefundCreate,
    PaymentFilters,
    PaymentOut,
    PaymentListItem,
    PaymentListData,
    InvoicePaymentSummary,
    PaymentStats,
    PaymentTrendPoint,
)
from app.services.billing.payment_service import (
    create_payment,
    create_full_payment,
    refund_payment,
    list_payments,
    get_payment,
    update_payment,
    delete_payment,
    invoice_payment_summary,
    payment_stats,
    recent_payments,
    payment_trends,
)
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse

router = APIRouter(
    prefix="/payments",
    tags=["Payments"],
)

can_view = require_permission(Permission.view_finances)
can_manage = require_permission(Permission.manage_finances)


@router.post("", response_model=APIResponse[PaymentOut], status_code=201)
async def create_payment_api(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    payment = await create_payment(db, payload, user)
    return success_response("Payment recorded successfully", payment)


@router.post("/invoice/{invoice_id}/full", response_model=APIResponse[PaymentOut], status_code=201)
async def full_payment_api(
    invoice_id: int,
    payload: FullPaymentCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    payment = await create_full_payment(db, invoice_id, payload, user)
    return success_response("Invoice paid in full", payment)


@router.get("/invoice/{invoice_id}/summary", response_model=APIResponse[InvoicePaymentSummary])
async def invoice_payment_summary_api(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    summary = await invoice_payment_summary(db, invoice_id)
    return success_response("Payment summary retrieved successfully", summary)


@router.get("", response_model=APIResponse[PaymentListData])
async def list_payments_api(
    filters: PaymentFilters = Depends(),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    data = await list_payments(db, filters, page=page, page_size=page_size)
    return success_response("Payments retrieved successfully", data)


@router.get("/stats", response_model=APIResponse[PaymentStats])
async def payment_stats_api(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    stats = await payment_stats(db, date_from=date_from, date_to=date_to)
    return success_response("Payment statistics retrieved successfully", stats)


@router.get("/recent", response_model=APIResponse[List[PaymentListItem]])
async def recent_payments_api(
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Recent payments retrieved successfully", await recent_payments(db, limit))


@router.get("/trends", response_model=APIResponse[List[PaymentTrendPoint]])
async def payment_trends_api(
    days: int = Query(30, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Payment trends retrieved successfully", await payment_trends(db, days))


@router.get("/{payment_id}", response_model=APIResponse[PaymentOut])
async def get_payment_api(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Payment retrieved successfully", await get_payment(db, payment_id))


@router.patch("/{payment_id}", response_model=APIResponse[PaymentOut])
async def update_payment_api(
    payment_id: int,
    payload: PaymentUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    payment = await update_payment(db, payment_id, payload, user)
    return success_response("Payment updated successfully", payment)


@router.delete("/{payment_id}", response_model=APIResponse[dict])
async def delete_payment_api(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    return success_response("Payment deleted successfully", await delete_payment(db, payment_id, user))


@router.post("/{payment_id}/refund", response_model=APIResponse[PaymentOut], status_code=201)
async def refund_payment_api(
    payment_id: int,
    payload: RefundCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    refund = await refund_payment(db, payment_id, payload, user)
    return success_response("Refund recorded successfully", refund)
