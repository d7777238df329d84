# app/services/crm/inquiry_service.py

from datetime import datetime
from typing import Optional

from sqlalchemy import select, func, desc, asc, update, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.activity_codes import ActivityCode
from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.crm.communication_models import Communication
from app.models.crm.customer_models import Customer
from app.models.crm.inquiry_models import Inquiry
from app.models.enums.crm import (
    InquiryPriority,
    InquirySource,
    InquiryStatus,
    OPEN_INQUIRY_STATUSES,
)
from app.models.inventory.vehicle_models import Vehicle
from app.models.users.user_models import Profile
from app.schemas.crm.customer_schemas import CustomerCreate
from app.schemas.crm.inquiry_schemas import (
    InquiryCreate,
    InquiryUpdate,
    InquiryFilters,
    InquiryBulkStatusUpdate,
    InquiryOut,
    InquiryListItem,
    InquiryStats,
    BulkUpdateResult,
)
from app.schemas.public.public_schemas import ContactRequest, ContactResult
from app.services.crm.customer_service import find_or_create_customer
from app.utils.activity_helpers import emit_user_activity
from app.utils.logger import get_logger
from app.utils.pagination import paginate

logger = get_logger(__name__)


async def _get_inquiry(db: AsyncSession, inquiry_id: int, *, for_update: bool = False) -> Inquiry:
    query = select(Inquiry).where(Inquiry.id == inquiry_id)
    if for_update:
        query = query.with_for_update()

    inquiry = (await db.execute(query)).scalar_one_or_none()
    if not inquiry:
        raise AppException(404, "Inquiry not found", ErrorCode.INQUIRY_NOT_FOUND)
    return inquiry


async def _ensure_refs(
    db: AsyncSession,
    *,
    customer_id: Optional[int] = None,
    vehicle_id: Optional[int] = None,
    assigned_to_id: Optional[str] = None,
) -> Optional[Customer]:
    customer = None
    if customer_id is not None:
        customer = await db.get(Customer, customer_id)
        if not customer or not customer.is_active:
            raise AppException(404, "Customer not found", ErrorCode.CUSTOMER_NOT_FOUND)
    if vehicle_id is not None and not await db.get(Vehicle, vehicle_id):
        raise AppException(404, "Vehicle not found", ErrorCode.VEHICLE_NOT_FOUND)
    if assigned_to_id is not None and not await db.get(Profile, assigned_to_id):
        raise AppException(404, "Assignee not found", ErrorCode.PROFILE_NOT_FOUND)
    return customer


def _list_query():
    comm_count = (
        select(func.count(Communication.id))
        .where(Communication.inquiry_id == Inquiry.id)
        .correlate(Inquiry)
        .scalar_subquery()
    )
    return (
        select(
            Inquiry,
            Customer.full_name.label("customer_name"),
            comm_count.label("communication_count"),
        )
        .join(Customer, Customer.id == Inquiry.customer_id)
    )


def _map_row(row) -> InquiryListItem:
    inquiry, customer_name, communication_count = row
    return InquiryListItem(
        **InquiryOut.model_validate(inquiry).model_dump(),
        customer_name=customer_name,
        communication_count=communication_count or 0,
    )


# =========================
# CREATE
# =========================
async def create_inquiry(db: AsyncSession, payload: InquiryCreate, user) -> InquiryOut:
    customer = await _ensure_refs(
        db,
        customer_id=payload.customer_id,
        vehicle_id=payload.vehicle_id,
        assigned_to_id=payload.assigned_to_id,
    )

    inquiry = Inquiry(
        **payload.model_dump(),
        status=InquiryStatus.new,
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    db.add(inquiry)
    await db.flush()

    await emit_user_activity(
        db,
        user,
        ActivityCode.CREATE_INQUIRY,
        target_id=inquiry.id,
        target_name=customer.full_name,
    )

    await db.commit()
    await db.refresh(inquiry)

    logger.info("Inquiry created", extra={"inquiry_id": inquiry.id, "customer_id": inquiry.customer_id})
    return InquiryOut.model_validate(inquiry)


async def submit_contact_form(db: AsyncSession, payload: ContactRequest) -> ContactResult:
    """Public contact form: upsert the customer by email and open a website inquiry."""
    found = await find_or_create_customer(
        db,
        CustomerCreate(
            full_name=payload.customer_name,
            email=payload.email,
            phone=payload.phone,
            marketing_consent=payload.marketing_consent,
        ),
    )
    customer_id = found.customer.id

    if not found.created and payload.phone and payload.phone != found.customer.phone:
        customer = await db.get(Customer, customer_id)
        customer.phone = payload.phone
        customer.marketing_consent = payload.marketing_consent or customer.marketing_consent
        customer.version += 1

    vehicle_id = payload.vehicle_id
    if vehicle_id is not None and not await db.get(Vehicle, vehicle_id):
        vehicle_id = None

    inquiry = Inquiry(
        customer_id=customer_id,
        vehicle_id=vehicle_id,
        source=InquirySource.website,
        subject=payload.subject,
        message=payload.message,
        priority=(
            InquiryPriority.high
            if payload.inquiry_type == "vehicle_specific"
            else InquiryPriority.medium
        ),
        status=InquiryStatus.new,
    )
    db.add(inquiry)
    await db.flush()
    await db.commit()

    logger.info(
        "Contact form submitted",
        extra={"inquiry_id": inquiry.id, "customer_id": customer_id, "new_customer": found.created},
    )
    return ContactResult(inquiry_id=inquiry.id, customer_id=customer_id)


# =========================
# LIST / GET
# =========================
async def list_inquiries(
    db: AsyncSession,
    filters: InquiryFilters,
    *,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    query = _list_query()

    if filters.search:
        term = f"%{filters.search}%"
        query = query.where(
            or_(
                Inquiry.subject.ilike(term),
                Inquiry.message.ilike(term),
                Customer.full_name.ilike(term),
            )
        )
    if filters.status:
        query = query.where(Inquiry.status == filters.status)
    if filters.priority:
        query = query.where(Inquiry.priority == filters.priority)
    if filters.source:
        query = query.where(Inquiry.source == filters.source)
    if filters.customer_id is not None:
        query = query.where(Inquiry.customer_id == filters.customer_id)
    if filters.vehicle_id is not None:
        query = query.where(Inquiry.vehicle_id == filters.vehicle_id)
    if filters.assigned_to_id:
        query = query.where(Inquiry.assigned_to_id == filters.assigned_to_id)
    if filters.created_from:
        query = query.where(Inquiry.created_at >= filters.created_from)
    if filters.created_to:
        query = query.where(Inquiry.created_at <= filters.created_to)

    query = query.order_by(desc(Inquiry.created_at), desc(Inquiry.id))
    data = await paginate(db, query, page=page, page_size=page_size, scalars=False)
    data["items"] = [_map_row(r) for r in data["items"]]
    return data


async def list_my_inquiries(
    db: AsyncSession,
    filters: InquiryFilters,
    user,
    *,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    filters = filters.model_copy(update={"assigned_to_id": user.id})
    return await list_inquiries(db, filters, page=page, page_size=page_size)


async def get_inquiry(db: AsyncSession, inquiry_id: int) -> InquiryListItem:
    row = (await db.execute(_list_query().where(Inquiry.id == inquiry_id))).first()
    if not row:
        raise AppException(404, "Inquiry not found", ErrorCode.INQUIRY_NOT_FOUND)
    return _map_row(row)


# =========================
# UPDATE / DELETE
# =========================
async def update_inquiry(db: AsyncSession, inquiry_id: int, payload: InquiryUpdate, user) -> InquiryOut:
    inquiry = await _get_inquiry(db, inquiry_id, for_update=True)
    values = payload.model_dump(exclude_unset=True)

    await _ensure_refs(
        db,
        vehicle_id=values.get("vehicle_id"),
        assigned_to_id=values.get("assigned_to_id"),
    )

    changes = [f for f, v in values.items() if getattr(inquiry, f) != v]
    if not changes:
        raise AppException(400, "No changes detected", ErrorCode.VALIDATION_ERROR)

    for field in changes:
        setattr(inquiry, field, values[field])
    inquiry.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        ActivityCode.UPDATE_INQUIRY,
        target_id=inquiry.id,
        changes=", ".join(changes),
    )

    await db.commit()
    await db.refresh(inquiry)
    return InquiryOut.model_validate(inquiry)


async def delete_inquiry(db: AsyncSession, inquiry_id: int, user) -> dict:
    inquiry = await _get_inquiry(db, inquiry_id, for_update=True)

    await emit_user_activity(db, user, ActivityCode.DELETE_INQUIRY, target_id=inquiry.id)

    await db.delete(inquiry)
    await db.commit()
    return {"id": inquiry_id}


async def assign_inquiry(db: AsyncSession, inquiry_id: int, assigned_to_id: str, user) -> InquiryOut:
    inquiry = await _get_inquiry(db, inquiry_id, for_update=True)
    assignee = await db.get(Profile, assigned_to_id)
    if not assignee or not assignee.is_active:
        raise AppException(404, "Assignee not found", ErrorCode.PROFILE_NOT_FOUND)

    inquiry.assigned_to_id = assignee.id
    inquiry.status = InquiryStatus.in_progress
    inquiry.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        ActivityCode.ASSIGN_INQUIRY,
        target_id=inquiry.id,
        assignee=assignee.full_name or assignee.email,
    )

    await db.commit()
    await db.refresh(inquiry)
    return InquiryOut.model_validate(inquiry)


async def mark_resolved(db: AsyncSession, inquiry_id: int, response: Optional[str], user) -> InquiryOut:
    inquiry = await _get_inquiry(db, inquiry_id, for_update=True)

    inquiry.status = InquiryStatus.resolved
    if response:
        inquiry.response = response
    inquiry.updated_by_id = user.id

    await emit_user_activity(db, user, ActivityCode.RESOLVE_INQUIRY, target_id=inquiry.id)

    await db.commit()
    await db.refresh(inquiry)
    return InquiryOut.model_validate(inquiry)


async def bulk_update_status(db: AsyncSession, payload: InquiryBulkStatusUpdate, user) -> BulkUpdateResult:
    result = await db.execute(
        update(Inquiry)
        .where(Inquiry.id.in_(payload.inquiry_ids))
        .values(status=payload.status, updated_by_id=user.id)
        .execution_options(synchronize_session=False)
    )

    await emit_user_activity(
        db,
        user,
        ActivityCode.BULK_UPDATE_INQUIRIES,
        count=result.rowcount,
        new_status=payload.status.value,
    )

    await db.commit()
    return BulkUpdateResult(updated=result.rowcount)


# =========================
# STATS
# =========================
async def _count_by(db: AsyncSession, column, created_from, created_to) -> dict[str, int]:
    query = select(column, func.count(Inquiry.id)).group_by(column)
    if created_from:
        query = query.where(Inquiry.created_at >= created_from)
    if created_to:
        query = query.where(Inquiry.created_at <= created_to)
    rows = (await db.execute(query)).all()
    return {key.value: count for key, count in rows}


async def inquiry_stats(
    db: AsyncSession,
    created_from: Optional[datetime] = None,
    created_to: Optional[datetime] = None,
) -> InquiryStats:
    by_status = await _count_by(db, Inquiry.status, created_from, created_to)
    return InquiryStats(
        total=sum(by_status.values()),
        by_status=by_status,
        by_priority=await _count_by(db, Inquiry.priority, created_from, created_to),
        by_source=await _count_by(db, Inquiry.source, created_from, created_to),
    )


async def urgent_inquiries(db: AsyncSession) -> list[InquiryListItem]:
    """Open urgent inquiries, oldest first."""
    result = await db.execute(
        _list_query()
        .where(
            Inquiry.priority == InquiryPriority.urgent,
            Inquiry.status.in_(list(OPEN_INQUIRY_STATUSES)),
        )
        .order_by(asc(Inquiry.created_at), asc(Inquiry.id))
    )
    return [_map_row(r) for r in result.all()]
