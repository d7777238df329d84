# app/routers/billing/invoice_router.py

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.permissions import Permission
from app.core.db import get_db
from app.schemas.billing.invoice_schemas import (
    InvoiceCreate,
    InvoiceFromVehicleSale,
    InvoiceUpdate,
    InvoiceFilters,
    InvoiceOut,
    InvoiceListItem,
    InvoiceListData,
    InvoiceStats,
)
from app.services.billing.invoice_service import (
    create_invoice,
    create_invoice_from_vehicle_sale,
    list_invoices,
    get_invoice,
    update_invoice,
    send_invoice,
    cancel_invoice,
    delete_invoice,
    invoice_stats,
    overdue_invoices,
    invoice_pdf,
)
from app.utils.check_roles import require_permission
from app.utils.response import success_response, file_response, APIResponse

router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"],
)

can_view = require_permission(Permission.view_finances, Permission.create_invoices)
can_create = require_permission(Permission.create_invoices)
can_manage = require_permission(Permission.manage_finances)


@router.post(
    "",
    response_model=APIResponse[InvoiceOut],
    status_code=201,
)
async def create_invoice_api(
    payload: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_create),
):
    invoice = await create_invoice(db, payload, user)
    return success_response(
        "Invoice created successfully",
        invoice,
    )


@router.post(
    "/from-vehicle-sale",
    response_model=APIResponse[InvoiceOut],
    status_code=201,
)
async def create_invoice_from_sale_api(
    payload: InvoiceFromVehicleSale,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_create),
):
    invoice = await create_invoice_from_vehicle_sale(db, payload, user)
    return success_response(
        "Invoice created successfully",
        invoice,
    )


@router.get(
    "",
    response_model=APIResponse[InvoiceListData],
)
async def list_invoices_api(
    filters: InvoiceFilters = Depends(),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    data = await list_invoices(db, filters, page=page, page_size=page_size)
    return success_response(
        "Invoices retrieved successfully",
        data,
    )


@router.get(
    "/stats",
    response_model=APIResponse[InvoiceStats],
)
async def invoice_stats_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response(
        "Invoice statistics retrieved successfully",
        await invoice_stats(db),
    )


@router.get(
    "/overdue",
    response_model=APIResponse[List[InvoiceListItem]],
)
async def overdue_invoices_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response(
        "Overdue invoices retrieved successfully",
        await overdue_invoices(db),
    )


@router.get(
    "/{invoice_id}",
    response_model=APIResponse[InvoiceOut],
)
async def get_invoice_api(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    invoice = await get_invoice(db, invoice_id)
    return success_response(
        "Invoice retrieved successfully",
        invoice,
    )


@router.get("/{invoice_id}/pdf")
async def invoice_pdf_api(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    filename, content = await invoice_pdf(db, invoice_id)
    return file_response(filename, content)


@router.patch(
    "/{invoice_id}",
    response_model=APIResponse[InvoiceOut],
)
async def update_invoice_api(
    invoice_id: int,
    payload: InvoiceUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_create),
):
    invoice = await update_invoice(db, invoice_id, payload, user)
    return success_response(
        "Invoice updated successfully",
        invoice,
    )


@router.post(
    "/{invoice_id}/send",
    response_model=APIResponse[InvoiceOut],
)
async def send_invoice_api(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_create),
):
    invoice = await send_invoice(db, invoice_id, user)
    return success_response(
        "Invoice sent successfully",
        invoice,
    )


@router.post(
    "/{invoice_id}/cancel",
    response_model=APIResponse[InvoiceOut],
)
async def cancel_invoice_api(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    invoice = await cancel_invoice(db, invoice_id, user)
    return success_response(
        "Invoice cancelled successfully",
        invoice,
    )


@router.delete(
    "/{invoice_id}",
    response_model=APIResponse[dict],
)
async def delete_invoice_api(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    result = await delete_invoice(db, invoice_id, user)
    return success_response(
        "Invoice deleted successfully",
        result,
    )
