# app/routers/crm/communication_router.py

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.permissions import Permission
from app.core.db import get_db
from app.schemas.crm.communication_schemas import (
    CommunicationCreate,
    CommunicationUpdate,
    CommunicationFilters,
    CommunicationOut,
    CommunicationListData,
    CommunicationStats,
)
from app.services.crm.communication_service import (
    create_communication,
    list_communications,
    get_communication,
    update_communication,
    delete_communication,
    mark_completed,
    communication_stats,
)
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse

router = APIRouter(prefix="/communications", tags=["Communications"])

can_view = require_permission(Permission.view_customers, Permission.view_inquiries)
can_manage = require_permission(Permission.manage_customers, Permission.manage_inquiries)


@router.post("", response_model=APIResponse[CommunicationOut], status_code=201)
async def create_communication_api(
    payload: CommunicationCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    communication = await create_communication(db, payload, user)
    return success_response("Communication logged successfully", communication)


@router.get("", response_model=APIResponse[CommunicationListData])
async def list_communications_api(
    filters: CommunicationFilters = Depends(),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    data = await list_communications(db, filters, page=page, page_size=page_size)
    return success_response("Communications retrieved successfully", data)


@router.get("/stats", response_model=APIResponse[CommunicationStats])
async def communication_stats_api(
    customer_id: Optional[int] = Query(None),
    handled_by_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    stats = await communication_stats(db, customer_id, handled_by_id)
    return success_response("Communication statistics retrieved successfully", stats)


@router.get("/{communication_id}", response_model=APIResponse[CommunicationOut])
async def get_communication_api(
    communication_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    communication = await get_communication(db, communication_id)
    return success_response("Communication retrieved successfully", communication)


@router.patch("/{communication_id}", response_model=APIResponse[CommunicationOut])
async def update_communication_api(
    communication_id: int,
    payload: CommunicationUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    communication = await update_communication(db, communication_id, payload)
    return success_response("Communication updated successfully", communication)


@router.post("/{communication_id}/complete", response_model=APIResponse[CommunicationOut])
async def complete_communication_api(
    communication_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    communication = await mark_completed(db, communication_id)
    return success_response("Communication marked as completed", communication)


@router.delete("/{communication_id}", response_model=APIResponse[dict])
async def delete_communication_api(
    communication_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    result = await delete_communication(db, communication_id, user)
    return success_response("Communication deleted successfully", result)
