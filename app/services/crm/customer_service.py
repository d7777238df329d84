# app/services/crm/customer_service.py

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, func, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.activity_codes import ActivityCode
from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException, ensure_version
from app.models.billing.invoice_models import Invoice
from app.models.crm.communication_models import Communication
from app.models.crm.customer_models import Customer
from app.models.crm.inquiry_models import Inquiry
from app.models.enums.invoice_status import InvoiceStatus
from app.schemas.crm.customer_schemas import (
    CustomerCreate,
    CustomerUpdate,
    CustomerFilters,
    CustomerOut,
    CustomerListItem,
    CustomerDetail,
    CustomerInquirySummary,
    CustomerInvoiceSummary,
    CustomerSearchResult,
    CustomerStats,
    MarketingConsentStats,
    FindOrCreateResult,
    TimelineEntry,
)
from app.utils.activity_helpers import emit_user_activity
from app.utils.logger import get_logger
from app.utils.pagination import paginate

logger = get_logger(__name__)

NEW_CUSTOMER_DAYS = 30
ACTIVE_CUSTOMER_DAYS = 90
QUICK_SEARCH_LIMIT = 10


def _normalize_email(email: Optional[str]) -> Optional[str]:
    return email.strip().lower() if email else None


async def _get_active_customer(db: AsyncSession, customer_id: int, *, for_update: bool = False) -> Customer:
    query = select(Customer).where(Customer.id == customer_id)
    if for_update:
        query = query.with_for_update()

    customer = (await db.execute(query)).scalar_one_or_none()
    if not customer or not customer.is_active:
        raise AppException(404, "Customer not found", ErrorCode.CUSTOMER_NOT_FOUND)
    return customer


async def _ensure_email_free(db: AsyncSession, email: Optional[str], exclude_id: Optional[int] = None) -> None:
    if not email:
        return
    query = select(Customer.id).where(Customer.email == email)
    if exclude_id is not None:
        query = query.where(Customer.id != exclude_id)
    if await db.scalar(query):
        raise AppException(
            409,
            "A customer with this email already exists",
            ErrorCode.CUSTOMER_EMAIL_EXISTS,
        )


# =========================
# CREATE
# =========================
async def create_customer(db: AsyncSession, payload: CustomerCreate, user) -> CustomerOut:
    email = _normalize_email(payload.email)
    await _ensure_email_free(db, email)

    customer = Customer(
        **payload.model_dump(exclude={"email"}),
        email=email,
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    db.add(customer)
    await db.flush()

    await emit_user_activity(
        db,
        user,
        ActivityCode.CREATE_CUSTOMER,
        target_id=customer.id,
        target_name=customer.full_name,
    )

    await db.commit()
    await db.refresh(customer)

    logger.info("Customer created", extra={"customer_id": customer.id})
    return CustomerOut.model_validate(customer)


async def find_or_create_customer(
    db: AsyncSession,
    payload: CustomerCreate,
    user=None,
) -> FindOrCreateResult:
    """Match on lower-cased email. Does not commit when ``user`` is None."""
    email = _normalize_email(payload.email)
    if email:
        existing = await db.scalar(select(Customer).where(Customer.email == email))
        if existing:
            return FindOrCreateResult(customer=CustomerOut.model_validate(existing), created=False)

    if user is not None:
        return FindOrCreateResult(customer=await create_customer(db, payload, user), created=True)

    customer = Customer(**payload.model_dump(exclude={"email"}), email=email)
    db.add(customer)
    await db.flush()
    await db.refresh(customer)
    return FindOrCreateResult(customer=CustomerOut.model_validate(customer), created=True)


# =========================
# LIST
# =========================
async def list_customers(
    db: AsyncSession,
    filters: CustomerFilters,
    *,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    query = select(Customer)

    if filters.search:
        term = f"%{filters.search}%"
        query = query.where(
            or_(
                Customer.full_name.ilike(term),
                Customer.email.ilike(term),
                Customer.phone.ilike(term),
            )
        )
    if filters.city:
        query = query.where(Customer.city.ilike(f"%{filters.city}%"))
    if filters.country:
        query = query.where(Customer.country == filters.country)
    if filters.marketing_consent is not None:
        query = query.where(Customer.marketing_consent.is_(filters.marketing_consent))
    if filters.is_active is not None:
        query = query.where(Customer.is_active.is_(filters.is_active))
    if filters.created_from:
        query = query.where(Customer.created_at >= filters.created_from)
    if filters.created_to:
        query = query.where(Customer.created_at <= filters.created_to)

    query = query.order_by(desc(Customer.created_at), desc(Customer.id))
    data = await paginate(db, query, page=page, page_size=page_size)

    customers = data["items"]
    ids = [c.id for c in customers]

    inquiry_stats = {}
    purchase_stats = {}
    if ids:
        rows = await db.execute(
            select(Inquiry.customer_id, func.count(Inquiry.id), func.max(Inquiry.created_at))
            .where(Inquiry.customer_id.in_(ids))
            .group_by(Inquiry.customer_id)
        )
        inquiry_stats = {cid: (count, last) for cid, count, last in rows.all()}

        rows = await db.execute(
            select(Invoice.customer_id, func.count(Invoice.id), func.sum(Invoice.total_amount))
            .where(
                Invoice.customer_id.in_(ids),
                Invoice.status == InvoiceStatus.fully_paid,
                Invoice.is_deleted.is_(False),
            )
            .group_by(Invoice.customer_id)
        )
        purchase_stats = {cid: (count, spent) for cid, count, spent in rows.all()}

    items = []
    for customer in customers:
        inquiry_count, last_inquiry = inquiry_stats.get(customer.id, (0, None))
        purchases, spent = purchase_stats.get(customer.id, (0, None))
        items.append(
            CustomerListItem(
                **CustomerOut.model_validate(customer).model_dump(),
                inquiry_count=inquiry_count,
                last_inquiry_date=last_inquiry,
                total_purchases=purchases,
                total_spent=spent or Decimal("0.00"),
            )
        )

    data["items"] = items
    return data


# =========================
# GET
# =========================
async def get_customer(db: AsyncSession, customer_id: int) -> CustomerDetail:
    customer = await _get_active_customer(db, customer_id)

    inquiries = (
        await db.execute(
            select(Inquiry)
            .where(Inquiry.customer_id == customer_id)
            .order_by(desc(Inquiry.created_at), desc(Inquiry.id))
        )
    ).scalars().all()

    invoices = (
        await db.execute(
            select(Invoice)
            .where(Invoice.customer_id == customer_id, Invoice.is_deleted.is_(False))
            .order_by(desc(Invoice.created_at), desc(Invoice.id))
        )
    ).scalars().all()

    return CustomerDetail(
        **CustomerOut.model_validate(customer).model_dump(),
        inquiries=[CustomerInquirySummary.model_validate(i) for i in inquiries],
        invoices=[CustomerInvoiceSummary.model_validate(i) for i in invoices],
    )


# =========================
# UPDATE (OPTIMISTIC)
# =========================
async def update_customer(
    db: AsyncSession,
    customer_id: int,
    payload: CustomerUpdate,
    user,
) -> CustomerOut:
    current = await _get_active_customer(db, customer_id, for_update=True)

    ensure_version(current, payload.version, "Customer", ErrorCode.CUSTOMER_VERSION_CONFLICT)

    values = payload.model_dump(exclude_unset=True, exclude={"version"})
    if "email" in values:
        values["email"] = _normalize_email(values["email"])
        await _ensure_email_free(db, values["email"], exclude_id=customer_id)

    changes: list[str] = []
    for field, value in values.items():
        old = getattr(current, field)
        if old == value:
            continue
        if field == "phone":
            old_phone = old[-4:] if old else "None"
            new_phone = value[-4:] if value else "None"
            changes.append(f"phone: ****{old_phone} → ****{new_phone}")
        else:
            changes.append(f"{field}: '{old}' → '{value}'")
        setattr(current, field, value)

    if not changes:
        raise AppException(400, "No changes detected", ErrorCode.VALIDATION_ERROR)

    current.version += 1
    current.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        ActivityCode.UPDATE_CUSTOMER,
        target_id=current.id,
        target_name=current.full_name,
        changes=", ".join(changes),
    )

    await db.commit()
    await db.refresh(current)
    return CustomerOut.model_validate(current)


# =========================
# DEACTIVATE
# =========================
async def deactivate_customer(db: AsyncSession, customer_id: int, user) -> CustomerOut:
    customer = await _get_active_customer(db, customer_id, for_update=True)

    customer.is_active = False
    customer.updated_by_id = user.id
    customer.version += 1

    await emit_user_activity(
        db,
        user,
        ActivityCode.DEACTIVATE_CUSTOMER,
        target_id=customer.id,
        target_name=customer.full_name,
    )

    await db.commit()
    await db.refresh(customer)
    return CustomerOut.model_validate(customer)


# =========================
# SEARCH / STATS
# =========================
async def search_customers(db: AsyncSession, q: str) -> list[CustomerSearchResult]:
    term = f"%{q.strip()}%"
    result = await db.execute(
        select(Customer)
        .where(
            Customer.is_active.is_(True),
            or_(
                Customer.full_name.ilike(term),
                Customer.email.ilike(term),
                Customer.phone.ilike(term),
            ),
        )
        .order_by(Customer.full_name)
        .limit(QUICK_SEARCH_LIMIT)
    )
    return [CustomerSearchResult.model_validate(c) for c in result.scalars().all()]


async def customer_stats(db: AsyncSession) -> CustomerStats:
    now = datetime.now(timezone.utc)

    total = await db.scalar(select(func.count(Customer.id))) or 0

    recent = await db.scalar(
        select(func.count(Customer.id)).where(
            Customer.created_at >= now - timedelta(days=NEW_CUSTOMER_DAYS)
        )
    ) or 0

    active = await db.scalar(
        select(func.count(func.distinct(Inquiry.customer_id))).where(
            Inquiry.created_at >= now - timedelta(days=ACTIVE_CUSTOMER_DAYS)
        )
    ) or 0

    return CustomerStats(total=total, recent=recent, active=active)


async def customers_by_country(db: AsyncSession) -> dict[str, int]:
    rows = await db.execute(
        select(Customer.country, func.count(Customer.id)).group_by(Customer.country)
    )
    return {country or "Unknown": count for country, count in rows.all()}


async def marketing_consent_stats(db: AsyncSession) -> MarketingConsentStats:
    total = await db.scalar(select(func.count(Customer.id))) or 0
    consented = await db.scalar(
        select(func.count(Customer.id)).where(Customer.marketing_consent.is_(True))
    ) or 0
    return MarketingConsentStats(total=total, consented=consented, declined=total - consented)


# =========================
# TIMELINE
# =========================
async def customer_timeline(db: AsyncSession, customer_id: int) -> list[TimelineEntry]:
    """Inquiries, communications and invoices merged newest first."""
    await _get_active_customer(db, customer_id)

    inquiries = (
        await db.execute(select(Inquiry).where(Inquiry.customer_id == customer_id))
    ).scalars().all()
    communications = (
        await db.execute(select(Communication).where(Communication.customer_id == customer_id))
    ).scalars().all()
    invoices = (
        await db.execute(
            select(Invoice).where(Invoice.customer_id == customer_id, Invoice.is_deleted.is_(False))
        )
    ).scalars().all()

    entries = [
        TimelineEntry(
            type="inquiry",
            id=i.id,
            title=i.subject or "Inquiry",
            status=i.status.value,
            created_at=i.created_at,
        )
        for i in inquiries
    ]
    entries += [
        TimelineEntry(
            type="communication",
            id=c.id,
            title=c.subject or f"{c.direction.value.title()} {c.type.value}",
            status="completed" if c.completed_at else None,
            created_at=c.created_at,
        )
        for c in communications
    ]
    entries += [
        TimelineEntry(
            type="invoice",
            id=inv.id,
            title=inv.invoice_number,
            status=inv.status.value,
            created_at=inv.created_at,
        )
        for inv in invoices
    ]

    entries.sort(key=lambda e: (e.created_at, e.type, e.id), reverse=True)
    return entries
