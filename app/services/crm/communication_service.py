# app/services/crm/communication_service.py

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, func, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.activity_codes import ActivityCode
from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.crm.communication_models import Communication
from app.models.crm.customer_models import Customer
from app.models.crm.inquiry_models import Inquiry
from app.schemas.crm.communication_schemas import (
    CommunicationCreate,
    CommunicationUpdate,
    CommunicationFilters,
    CommunicationOut,
    CommunicationStats,
)
from app.utils.activity_helpers import emit_user_activity
from app.utils.logger import get_logger
from app.utils.pagination import paginate

logger = get_logger(__name__)


async def _get_communication(db: AsyncSession, communication_id: int) -> Communication:
    communication = await db.get(Communication, communication_id)
    if not communication:
        raise AppException(404, "Communication not found", ErrorCode.COMMUNICATION_NOT_FOUND)
    return communication


async def create_communication(db: AsyncSession, payload: CommunicationCreate, user) -> CommunicationOut:
    customer = await db.get(Customer, payload.customer_id)
    if not customer:
        raise AppException(404, "Customer not found", ErrorCode.CUSTOMER_NOT_FOUND)

    if payload.inquiry_id is not None:
        inquiry = await db.get(Inquiry, payload.inquiry_id)
        if not inquiry or inquiry.customer_id != customer.id:
            raise AppException(404, "Inquiry not found", ErrorCode.INQUIRY_NOT_FOUND)

    communication = Communication(**payload.model_dump(), handled_by_id=user.id)
    db.add(communication)
    await db.flush()

    await emit_user_activity(
        db,
        user,
        ActivityCode.LOG_COMMUNICATION,
        target_id=communication.id,
        direction=payload.direction.value,
        type=payload.type.value,
        target_name=customer.full_name,
    )

    await db.commit()
    await db.refresh(communication)
    return CommunicationOut.model_validate(communication)


async def list_communications(
    db: AsyncSession,
    filters: CommunicationFilters,
    *,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    query = select(Communication)

    if filters.search:
        term = f"%{filters.search}%"
        query = query.where(or_(Communication.subject.ilike(term), Communication.content.ilike(term)))
    if filters.customer_id is not None:
        query = query.where(Communication.customer_id == filters.customer_id)
    if filters.inquiry_id is not None:
        query = query.where(Communication.inquiry_id == filters.inquiry_id)
    if filters.type:
        query = query.where(Communication.type == filters.type)
    if filters.direction:
        query = query.where(Communication.direction == filters.direction)
    if filters.handled_by_id:
        query = query.where(Communication.handled_by_id == filters.handled_by_id)
    if filters.created_from:
        query = query.where(Communication.created_at >= filters.created_from)
    if filters.created_to:
        query = query.where(Communication.created_at <= filters.created_to)

    query = query.order_by(desc(Communication.created_at), desc(Communication.id))
    data = await paginate(db, query, page=page, page_size=page_size)
    data["items"] = [CommunicationOut.model_validate(c) for c in data["items"]]
    return data


async def get_communication(db: AsyncSession, communication_id: int) -> CommunicationOut:
    return CommunicationOut.model_validate(await _get_communication(db, communication_id))


async def update_communication(
    db: AsyncSession,
    communication_id: int,
    payload: CommunicationUpdate,
) -> CommunicationOut:
    communication = await _get_communication(db, communication_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(communication, field, value)

    await db.commit()
    await db.refresh(communication)
    return CommunicationOut.model_validate(communication)


async def delete_communication(db: AsyncSession, communication_id: int, user) -> dict:
    communication = await _get_communication(db, communication_id)

    await emit_user_activity(db, user, ActivityCode.DELETE_COMMUNICATION, target_id=communication.id)

    await db.delete(communication)
    await db.commit()
    return {"id": communication_id}


async def mark_completed(db: AsyncSession, communication_id: int) -> CommunicationOut:
    communication = await _get_communication(db, communication_id)
    communication.completed_at = datetime.now(timezone.utc)

    await db.commit()
    await db.refresh(communication)
    return CommunicationOut.model_validate(communication)


async def communication_stats(
    db: AsyncSession,
    customer_id: Optional[int] = None,
    handled_by_id: Optional[str] = None,
) -> CommunicationStats:
    def _scoped(query):
        if customer_id is not None:
            query = query.where(Communication.customer_id == customer_id)
        if handled_by_id:
            query = query.where(Communication.handled_by_id == handled_by_id)
        return query

    by_type = dict(
        (t.value, n)
        for t, n in (
            await db.execute(
                _scoped(select(Communication.type, func.count(Communication.id)).group_by(Communication.type))
            )
        ).all()
    )
    by_direction = dict(
        (d.value, n)
        for d, n in (
            await db.execute(
                _scoped(
                    select(Communication.direction, func.count(Communication.id)).group_by(Communication.direction)
                )
            )
        ).all()
    )

    return CommunicationStats(total=sum(by_type.values()), by_type=by_type, by_direction=by_direction)
