# app/routers/crm/inquiry_router.py

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.permissions import Permission
from app.core.db import get_db
from app.schemas.crm.inquiry_schemas import (
    InquiryCreate,
    InquiryUpdate,
    InquiryAssign,
    InquiryResolve,
    InquiryBulkStatusUpdate,
    InquiryFilters,
    InquiryOut,
    InquiryListItem,
    InquiryListData,
    InquiryStats,
    BulkUpdateResult,
)
from app.services.crm.inquiry_service import (
    create_inquiry,
    list_inquiries,
    list_my_inquiries,
    get_inquiry,
    update_inquiry,
    delete_inquiry,
    assign_inquiry,
    mark_resolved,
    bulk_update_status,
    inquiry_stats,
    urgent_inquiries,
)
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse

router = APIRouter(prefix="/inquiries", tags=["Inquiries"])

can_view = require_permission(Permission.view_inquiries, Permission.manage_inquiries)
can_manage = require_permission(Permission.manage_inquiries)


@router.post("", response_model=APIResponse[InquiryOut], status_code=201)
async def create_inquiry_api(
    payload: InquiryCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    return success_response("Inquiry created successfully", await create_inquiry(db, payload, user))


@router.get("", response_model=APIResponse[InquiryListData])
async def list_inquiries_api(
    filters: InquiryFilters = Depends(),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    data = await list_inquiries(db, filters, page=page, page_size=page_size)
    return success_response("Inquiries retrieved successfully", data)


@router.get("/mine", response_model=APIResponse[InquiryListData])
async def my_inquiries_api(
    filters: InquiryFilters = Depends(),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    data = await list_my_inquiries(db, filters, user, page=page, page_size=page_size)
    return success_response("Inquiries retrieved successfully", data)


@router.get("/stats", response_model=APIResponse[InquiryStats])
async def inquiry_stats_api(
    created_from: Optional[datetime] = Query(None),
    created_to: Optional[datetime] = Query(None),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    stats = await inquiry_stats(db, created_from, created_to)
    return success_response("Inquiry statistics retrieved successfully", stats)


@router.get("/urgent", response_model=APIResponse[List[InquiryListItem]])
async def urgent_inquiries_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Urgent inquiries retrieved successfully", await urgent_inquiries(db))


@router.post("/bulk-status", response_model=APIResponse[BulkUpdateResult])
async def bulk_status_api(
    payload: InquiryBulkStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    return success_response("Inquiries updated successfully", await bulk_update_status(db, payload, user))


@router.get("/{inquiry_id}", response_model=APIResponse[InquiryListItem])
async def get_inquiry_api(
    inquiry_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Inquiry retrieved successfully", await get_inquiry(db, inquiry_id))


@router.patch("/{inquiry_id}", response_model=APIResponse[InquiryOut])
async def update_inquiry_api(
    inquiry_id: int,
    payload: InquiryUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    return success_response("Inquiry updated successfully", await update_inquiry(db, inquiry_id, payload, user))


@router.delete("/{inquiry_id}", response_model=APIResponse[dict])
async def delete_inquiry_api(
    inquiry_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    return success_response("Inquiry deleted successfully", await delete_inquiry(db, inquiry_id, user))


@router.post("/{inquiry_id}/assign", response_model=APIResponse[InquiryOut])
async def assign_inquiry_api(
    inquiry_id: int,
    payload: InquiryAssign,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    inquiry = await assign_inquiry(db, inquiry_id, payload.assigned_to_id, user)
    return success_response("Inquiry assigned successfully", inquiry)


@router.post("/{inquiry_id}/resolve", response_model=APIResponse[InquiryOut])
async def resolve_inquiry_api(
    inquiry_id: int,
    payload: InquiryResolve,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    inquiry = await mark_resolved(db, inquiry_id, payload.response, user)
    return success_response("Inquiry resolved successfully", inquiry)
