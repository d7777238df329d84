# app/services/billing/invoice_service.py

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Iterable

from sqlalchemy import select, func, desc, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.constants.activity_codes import ActivityCode
from app.constants.error_codes import ErrorCode
from app.core.config import VAT_RATE, INVOICE_DUE_DAYS
from app.core.exceptions import AppException, ensure_version
from app.models.billing.invoice_models import Invoice, InvoiceItem
from app.models.billing.payment_models import Payment
from app.models.crm.customer_models import Customer
from app.models.enums.invoice_status import InvoiceStatus, CurrencyCode, SETTLED_INVOICE_STATUSES
from app.models.inventory.vehicle_models import Vehicle
from app.schemas.billing.invoice_schemas import (
    InvoiceCreate,
    InvoiceFromVehicleSale,
    InvoiceUpdate,
    InvoiceItemCreate,
    InvoiceFilters,
    InvoiceOut,
    InvoiceListItem,
    InvoiceStats,
    StatusBreakdown,
    OverdueSummary,
)
from app.utils.activity_helpers import emit_activity, emit_user_activity
from app.utils.decimal_utils import to_decimal, TWOPLACES, ZERO
from app.utils.logger import get_logger
from app.utils.pagination import paginate
from app.utils.pdf_generators.invoice_pdf import render_invoice_pdf

logger = get_logger(__name__)

INVOICE_PREFIX = "INV"
SALE_TERMS = "Net 30 days"

# statuses the daily job is allowed to flip to overdue
_OVERDUE_CANDIDATES = (InvoiceStatus.sent, InvoiceStatus.viewed, InvoiceStatus.partially_paid)


# =====================================================
# CALCULATIONS
# =====================================================
def default_vat_rate(currency: CurrencyCode) -> Decimal:
    return VAT_RATE if currency == CurrencyCode.AED else ZERO


def calculate_vat(subtotal: Decimal, rate: Decimal) -> Decimal:
    return (Decimal(subtotal) * Decimal(rate) / Decimal("100")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def derive_invoice_status(
    current: InvoiceStatus,
    total_amount: Decimal,
    total_paid: Decimal,
    due_date: Optional[date],
    today: Optional[date] = None,
) -> InvoiceStatus:
    """
    Status implied by the amount paid so far.

    Nothing paid keeps a draft a draft and turns anything else into sent;
    paying the total settles it; anything in between is partial. A past due
    date then overrides every state except fully paid. Cancelled invoices
    keep their status.
    """
    if current == InvoiceStatus.cancelled:
        return current

    today = today or date.today()

    if total_paid <= 0:
        status = InvoiceStatus.draft if current == InvoiceStatus.draft else InvoiceStatus.sent
    elif total_paid >= total_amount:
        status = InvoiceStatus.fully_paid
    else:
        status = InvoiceStatus.partially_paid

    if due_date and due_date < today and status != InvoiceStatus.fully_paid:
        status = InvoiceStatus.overdue

    return status


def _build_items(items: Iterable[InvoiceItemCreate]) -> tuple[list[InvoiceItem], Decimal]:
    subtotal = ZERO
    rows: list[InvoiceItem] = []
    for item in items:
        line_total = to_decimal(item.quantity * item.unit_price)
        subtotal += line_total
        rows.append(
            InvoiceItem(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=line_total,
            )
        )
    return rows, subtotal


def _apply_amounts(invoice: Invoice, subtotal: Decimal, vat_rate: Decimal) -> None:
    invoice.subtotal = subtotal
    invoice.vat_rate = vat_rate
    invoice.vat_amount = calculate_vat(subtotal, vat_rate)
    invoice.total_amount = subtotal + invoice.vat_amount
    invoice.balance_due = invoice.total_amount - to_decimal(invoice.total_paid)


async def next_invoice_number(db: AsyncSession, today: Optional[date] = None) -> str:
    """INV-<year>-<seq>, one past the latest number issued this year."""
    year = (today or date.today()).year
    prefix = f"{INVOICE_PREFIX}-{year}-"

    latest = await db.scalar(
        select(Invoice.invoice_number)
        .where(Invoice.invoice_number.like(f"{prefix}%"))
        .order_by(desc(Invoice.id))
        .limit(1)
    )

    seq = 0
    if latest:
        tail = latest[len(prefix):]
        if tail.isdigit():
            seq = int(tail)

    return f"{prefix}{seq + 1:04d}"


async def recalculate_invoice(db: AsyncSession, invoice: Invoice) -> None:
    """Re-read the payment total from the database and re-derive the status."""
    total_paid = await db.scalar(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.invoice_id == invoice.id)
    )
    invoice.total_paid = to_decimal(total_paid)
    invoice.balance_due = to_decimal(invoice.total_amount) - invoice.total_paid
    invoice.status = derive_invoice_status(
        invoice.status,
        to_decimal(invoice.total_amount),
        invoice.total_paid,
        invoice.due_date,
    )


# =====================================================
# HELPERS
# =====================================================
async def load_invoice(db: AsyncSession, invoice_id: int, *, for_update: bool = False) -> Invoice:
    query = (
        select(Invoice)
        .options(selectinload(Invoice.items), selectinload(Invoice.payments))
        .where(Invoice.id == invoice_id, Invoice.is_deleted.is_(False))
        .execution_options(populate_existing=True)
    )
    if for_update:
        query = query.with_for_update(of=Invoice)

    invoice = (await db.execute(query)).scalar_one_or_none()
    if not invoice:
        raise AppException(404, "Invoice not found", ErrorCode.INVOICE_NOT_FOUND)
    return invoice


async def _get_active_customer(db: AsyncSession, customer_id: int) -> Customer:
    customer = await db.get(Customer, customer_id)
    if not customer or not customer.is_active:
        raise AppException(404, "Customer not found", ErrorCode.CUSTOMER_NOT_FOUND)
    return customer


async def _ensure_vehicle(db: AsyncSession, vehicle_id: Optional[int]) -> Optional[Vehicle]:
    if vehicle_id is None:
        return None
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise AppException(404, "Vehicle not found", ErrorCode.VEHICLE_NOT_FOUND)
    return vehicle


async def _insert_invoice(
    db: AsyncSession,
    *,
    customer: Customer,
    vehicle_id: Optional[int],
    currency: CurrencyCode,
    vat_rate: Decimal,
    items: Iterable[InvoiceItemCreate],
    due_date: Optional[date],
    terms: Optional[str],
    notes: Optional[str],
    user,
) -> InvoiceOut:
    rows, subtotal = _build_items(items)

    invoice = Invoice(
        invoice_number=await next_invoice_number(db),
        customer_id=customer.id,
        vehicle_id=vehicle_id,
        status=InvoiceStatus.draft,
        currency=currency,
        total_paid=ZERO,
        due_date=due_date,
        terms=terms,
        notes=notes,
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    invoice.items.extend(rows)
    _apply_amounts(invoice, subtotal, vat_rate)

    db.add(invoice)
    await db.flush()

    await emit_user_activity(db, user, ActivityCode.CREATE_INVOICE, target_id=invoice.id, target_name=invoice.invoice_number)

    await db.commit()

    logger.info(
        "Invoice created",
        extra={"invoice_number": invoice.invoice_number, "total": str(invoice.total_amount)},
    )
    return await get_invoice(db, invoice.id)


# =====================================================
# CREATE
# =====================================================
async def create_invoice(db: AsyncSession, payload: InvoiceCreate, user) -> InvoiceOut:
    customer = await _get_active_customer(db, payload.customer_id)
    await _ensure_vehicle(db, payload.vehicle_id)

    vat_rate = payload.vat_rate if payload.vat_rate is not None else default_vat_rate(payload.currency)

    return await _insert_invoice(
        db,
        customer=customer,
        vehicle_id=payload.vehicle_id,
        currency=payload.currency,
        vat_rate=vat_rate,
        items=payload.items,
        due_date=payload.due_date,
        terms=payload.terms,
        notes=payload.notes,
        user=user,
    )


async def create_invoice_from_vehicle_sale(db: AsyncSession, payload: InvoiceFromVehicleSale, user) -> InvoiceOut:
    customer = await _get_active_customer(db, payload.customer_id)
    vehicle = await _ensure_vehicle(db, payload.vehicle_id)

    sale_line = InvoiceItemCreate(
        description=f"{vehicle.year} {vehicle.make} {vehicle.model} - VIN: {vehicle.vin}",
        quantity=Decimal("1"),
        unit_price=payload.sale_price,
    )

    return await _insert_invoice(
        db,
        customer=customer,
        vehicle_id=vehicle.id,
        currency=payload.currency,
        vat_rate=default_vat_rate(payload.currency),
        items=[sale_line, *payload.additional_items],
        due_date=date.today() + timedelta(days=INVOICE_DUE_DAYS),
        terms=SALE_TERMS,
        notes=None,
        user=user,
    )


# =====================================================
# LIST / GET
# =====================================================
async def list_invoices(
    db: AsyncSession,
    filters: InvoiceFilters,
    *,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    query = (
        select(Invoice, Customer.full_name.label("customer_name"))
        .join(Customer, Customer.id == Invoice.customer_id)
        .where(Invoice.is_deleted.is_(False))
    )

    if filters.search:
        term = f"%{filters.search}%"
        query = query.where(
            or_(
                Invoice.invoice_number.ilike(term),
                Invoice.notes.ilike(term),
                Customer.full_name.ilike(term),
            )
        )
    if filters.status:
        query = query.where(Invoice.status == filters.status)
    if filters.customer_id is not None:
        query = query.where(Invoice.customer_id == filters.customer_id)
    if filters.vehicle_id is not None:
        query = query.where(Invoice.vehicle_id == filters.vehicle_id)
    if filters.currency:
        query = query.where(Invoice.currency == filters.currency)
    if filters.created_from:
        query = query.where(Invoice.created_at >= filters.created_from)
    if filters.created_to:
        query = query.where(Invoice.created_at <= filters.created_to)
    if filters.due_from:
        query = query.where(Invoice.due_date >= filters.due_from)
    if filters.due_to:
        query = query.where(Invoice.due_date <= filters.due_to)
    if filters.overdue_only:
        query = query.where(
            Invoice.due_date < date.today(),
            Invoice.status.not_in(SETTLED_INVOICE_STATUSES),
        )

    query = query.order_by(desc(Invoice.created_at), desc(Invoice.id))
    data = await paginate(db, query, page=page, page_size=page_size, scalars=False)
    data["items"] = [_map_list_item(inv, name) for inv, name in data["items"]]
    return data


def _map_list_item(invoice: Invoice, customer_name: str) -> InvoiceListItem:
    return InvoiceListItem(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        customer_id=invoice.customer_id,
        customer_name=customer_name,
        vehicle_id=invoice.vehicle_id,
        status=invoice.status,
        currency=invoice.currency,
        total_amount=invoice.total_amount,
        total_paid=invoice.total_paid,
        balance_due=invoice.balance_due,
        due_date=invoice.due_date,
        created_at=invoice.created_at,
    )


async def get_invoice(db: AsyncSession, invoice_id: int) -> InvoiceOut:
    return InvoiceOut.model_validate(await load_invoice(db, invoice_id))


# =====================================================
# UPDATE / LIFECYCLE
# =====================================================
async def update_invoice(db: AsyncSession, invoice_id: int, payload: InvoiceUpdate, user) -> InvoiceOut:
    invoice = await load_invoice(db, invoice_id, for_update=True)

    if invoice.status != InvoiceStatus.draft:
        raise AppException(400, "Only draft invoices can be edited", ErrorCode.INVOICE_INVALID_STATE)

    ensure_version(invoice, payload.version, "Invoice", ErrorCode.INVOICE_VERSION_CONFLICT)

    data = payload.model_dump(exclude_unset=True, exclude={"version", "items", "vat_rate"})
    changes: list[str] = []
    for field, value in data.items():
        if getattr(invoice, field) != value:
            setattr(invoice, field, value)
            changes.append(field)

    subtotal = to_decimal(invoice.subtotal)
    if payload.items is not None:
        rows, subtotal = _build_items(payload.items)
        invoice.items = rows
        changes.append("items")

    vat_rate = to_decimal(invoice.vat_rate)
    if payload.vat_rate is not None and payload.vat_rate != vat_rate:
        vat_rate = payload.vat_rate
        changes.append("vat_rate")

    if not changes:
        raise AppException(400, "No changes detected", ErrorCode.VALIDATION_ERROR)

    _apply_amounts(invoice, subtotal, vat_rate)
    invoice.version += 1
    invoice.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        ActivityCode.UPDATE_INVOICE,
        target_id=invoice.id,
        target_name=invoice.invoice_number,
        changes=", ".join(changes),
    )

    await db.commit()
    return await get_invoice(db, invoice.id)


async def send_invoice(db: AsyncSession, invoice_id: int, user) -> InvoiceOut:
    invoice = await load_invoice(db, invoice_id, for_update=True)

    if invoice.status != InvoiceStatus.draft:
        raise AppException(400, "Only draft invoices can be sent", ErrorCode.INVOICE_INVALID_STATE)

    invoice.status = InvoiceStatus.sent
    invoice.version += 1
    invoice.updated_by_id = user.id

    await emit_user_activity(db, user, ActivityCode.SEND_INVOICE, target_id=invoice.id, target_name=invoice.invoice_number)

    await db.commit()
    return await get_invoice(db, invoice.id)


async def cancel_invoice(db: AsyncSession, invoice_id: int, user) -> InvoiceOut:
    invoice = await load_invoice(db, invoice_id, for_update=True)

    if invoice.status == InvoiceStatus.cancelled:
        raise AppException(400, "Invoice already cancelled", ErrorCode.INVOICE_INVALID_STATE)
    if invoice.status == InvoiceStatus.fully_paid:
        raise AppException(400, "Fully paid invoices cannot be cancelled", ErrorCode.INVOICE_INVALID_STATE)

    invoice.status = InvoiceStatus.cancelled
    invoice.version += 1
    invoice.updated_by_id = user.id

    await emit_user_activity(db, user, ActivityCode.CANCEL_INVOICE, target_id=invoice.id, target_name=invoice.invoice_number)

    await db.commit()
    logger.info("Invoice cancelled", extra={"invoice_number": invoice.invoice_number})
    return await get_invoice(db, invoice.id)


async def delete_invoice(db: AsyncSession, invoice_id: int, user) -> dict:
    invoice = await load_invoice(db, invoice_id, for_update=True)

    if invoice.payments:
        raise AppException(
            400,
            "Invoices with recorded payments cannot be deleted",
            ErrorCode.INVOICE_HAS_PAYMENTS,
        )

    invoice.is_deleted = True
    invoice.updated_by_id = user.id

    await emit_user_activity(db, user, ActivityCode.DELETE_INVOICE, target_id=invoice.id, target_name=invoice.invoice_number)

    await db.commit()
    return {"id": invoice_id}


# =====================================================
# REPORTING
# =====================================================
async def invoice_stats(db: AsyncSession) -> InvoiceStats:
    live = Invoice.is_deleted.is_(False)

    by_currency = (
        await db.execute(
            select(Invoice.currency, func.sum(Invoice.total_amount)).where(live).group_by(Invoice.currency)
        )
    ).all()

    by_status = (
        await db.execute(
            select(Invoice.status, func.count(Invoice.id), func.sum(Invoice.total_amount))
            .where(live)
            .group_by(Invoice.status)
        )
    ).all()

    overdue_count, overdue_amount = (
        await db.execute(
            select(func.count(Invoice.id), func.coalesce(func.sum(Invoice.balance_due), 0)).where(
                live,
                Invoice.due_date < date.today(),
                Invoice.status.not_in(SETTLED_INVOICE_STATUSES),
            )
        )
    ).one()

    counts = {s.value: n for s, n, _ in by_status}
    return InvoiceStats(
        total=sum(counts.values()),
        total_value={c.value: to_decimal(v) for c, v in by_currency},
        by_status=StatusBreakdown(
            counts=counts,
            totals={s.value: to_decimal(v) for s, _, v in by_status},
        ),
        overdue=OverdueSummary(count=overdue_count, amount=to_decimal(overdue_amount)),
    )


async def overdue_invoices(db: AsyncSession) -> list[InvoiceListItem]:
    rows = (
        await db.execute(
            select(Invoice, Customer.full_name)
            .join(Customer, Customer.id == Invoice.customer_id)
            .where(
                Invoice.is_deleted.is_(False),
                Invoice.due_date < date.today(),
                Invoice.status.not_in(SETTLED_INVOICE_STATUSES),
            )
            .order_by(Invoice.due_date, Invoice.id)
        )
    ).all()
    return [_map_list_item(inv, name) for inv, name in rows]


async def mark_overdue_invoices(db: AsyncSession, today: Optional[date] = None) -> int:
    """Flip issued, unsettled invoices past their due date to overdue. System action."""
    today = today or date.today()

    result = await db.execute(
        update(Invoice)
        .where(
            Invoice.is_deleted.is_(False),
            Invoice.due_date.isnot(None),
            Invoice.due_date < today,
            Invoice.status.in_(_OVERDUE_CANDIDATES),
        )
        .values(
            status=InvoiceStatus.overdue,
            version=Invoice.version + 1,
            updated_by_id=None,
            updated_at=datetime.now(timezone.utc),
        )
        .returning(Invoice.id, Invoice.invoice_number, Invoice.due_date)
        .execution_options(synchronize_session=False)
    )
    flipped = result.all()

    if not flipped:
        return 0

    for invoice_id, number, due in flipped:
        await emit_activity(
            db,
            user_id=None,
            username="system",
            code=ActivityCode.MARK_INVOICE_OVERDUE,
            target_id=invoice_id,
            actor_role="System",
            target_name=number,
            due_date=due.isoformat(),
        )

    await db.commit()
    logger.info("Invoices marked overdue", extra={"count": len(flipped)})
    return len(flipped)


async def invoice_pdf(db: AsyncSession, invoice_id: int) -> tuple[str, bytes]:
    invoice = await get_invoice(db, invoice_id)
    customer = await db.get(Customer, invoice.customer_id)
    vehicle = await db.get(Vehicle, invoice.vehicle_id) if invoice.vehicle_id else None

    return f"{invoice.invoice_number}.pdf", render_invoice_pdf(invoice, customer, vehicle)
