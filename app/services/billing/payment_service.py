# app/services/billing/payment_service.py

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, func, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.activity_codes import ActivityCode
from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.billing.invoice_models import Invoice
from app.models.billing.payment_models import Payment
from app.models.crm.customer_models import Customer
from app.models.enums.invoice_status import InvoiceStatus
from app.schemas.billing.payment_schemas import (
    PaymentCreate,
    PaymentUpdate,
    FullPaymentCreate,
    RefundCreate,
    PaymentFilters,
    PaymentOut,
    PaymentListItem,
    InvoicePaymentSummary,
    PaymentStats,
    MethodBreakdown,
    PaymentTrendPoint,
)
from app.services.billing.invoice_service import load_invoice, recalculate_invoice
from app.utils.activity_helpers import emit_user_activity
from app.utils.decimal_utils import to_decimal, to_aed, percent_of, ZERO
from app.utils.logger import get_logger
from app.utils.pagination import paginate

logger = get_logger(__name__)

RECENT_DAYS = 30
RECENT_LIMIT = 10
TREND_DAYS = 30


# =====================================================
# HELPERS
# =====================================================
async def _get_payment(db: AsyncSession, payment_id: int) -> Payment:
    payment = await db.get(Payment, payment_id)
    if not payment:
        raise AppException(404, "Payment not found", ErrorCode.PAYMENT_NOT_FOUND)
    return payment


async def _refunded_total(db: AsyncSession, payment_id: int) -> Decimal:
    """Sum already refunded against a payment, as a positive amount."""
    total = await db.scalar(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.refund_of_id == payment_id)
    )
    return -to_decimal(total)


async def _payable_invoice(db: AsyncSession, invoice_id: int) -> Invoice:
    invoice = await load_invoice(db, invoice_id, for_update=True)
    if invoice.status == InvoiceStatus.cancelled:
        raise AppException(
            400,
            "Payments cannot be recorded on a cancelled invoice",
            ErrorCode.INVOICE_INVALID_STATE,
        )
    return invoice


def _list_query():
    return (
        select(Payment, Invoice.invoice_number, Customer.full_name.label("customer_name"))
        .join(Invoice, Invoice.id == Payment.invoice_id)
        .join(Customer, Customer.id == Invoice.customer_id)
        .where(Invoice.is_deleted.is_(False))
    )


def _map_row(payment: Payment, invoice_number: str, customer_name: str) -> PaymentListItem:
    return PaymentListItem(
        **PaymentOut.model_validate(payment).model_dump(),
        invoice_number=invoice_number,
        customer_name=customer_name,
    )


async def _record(
    db: AsyncSession,
    invoice: Invoice,
    payment: Payment,
    user,
    code: ActivityCode,
    **context,
) -> PaymentOut:
    db.add(payment)
    await db.flush()

    await recalculate_invoice(db, invoice)
    invoice.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        code,
        target_name=invoice.invoice_number,
        target_id=payment.id,
        amount=str(abs(payment.amount)),
        currency=payment.currency.value,
        **context,
    )

    await db.commit()
    await db.refresh(payment)

    logger.info(
        "Payment recorded",
        extra={
            "invoice_number": invoice.invoice_number,
            "amount": str(payment.amount),
            "invoice_status": invoice.status.value,
        },
    )
    return PaymentOut.model_validate(payment)


# =====================================================
# CREATE
# =====================================================
async def create_payment(db: AsyncSession, payload: PaymentCreate, user) -> PaymentOut:
    invoice = await _payable_invoice(db, payload.invoice_id)

    currency = payload.currency or invoice.currency
    if currency != invoice.currency:
        raise AppException(
            400,
            f"Payment currency must match invoice currency ({invoice.currency.value})",
            ErrorCode.PAYMENT_CURRENCY_MISMATCH,
        )

    if payload.amount > to_decimal(invoice.balance_due):
        raise AppException(
            400,
            "Payment exceeds the outstanding balance",
            ErrorCode.PAYMENT_OVERPAYMENT,
            {"balance_due": str(invoice.balance_due)},
        )

    payment = Payment(
        invoice_id=invoice.id,
        amount=payload.amount,
        currency=currency,
        payment_date=payload.payment_date or date.today(),
        payment_method=payload.payment_method,
        transaction_id=payload.transaction_id,
        notes=payload.notes,
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    return await _record(db, invoice, payment, user, ActivityCode.ADD_PAYMENT)


async def create_full_payment(db: AsyncSession, invoice_id: int, payload: FullPaymentCreate, user) -> PaymentOut:
    invoice = await _payable_invoice(db, invoice_id)

    balance = to_decimal(invoice.balance_due)
    if balance <= 0:
        raise AppException(400, "Invoice has no outstanding balance", ErrorCode.INVOICE_INVALID_STATE)

    payment = Payment(
        invoice_id=invoice.id,
        amount=balance,
        currency=invoice.currency,
        payment_date=date.today(),
        payment_method=payload.payment_method,
        transaction_id=payload.transaction_id,
        notes=payload.notes or "Full payment",
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    return await _record(db, invoice, payment, user, ActivityCode.ADD_PAYMENT)


async def refund_payment(db: AsyncSession, payment_id: int, payload: RefundCreate, user) -> PaymentOut:
    original = await _get_payment(db, payment_id)
    if original.amount <= 0:
        raise AppException(400, "Refunds can only be issued against payments", ErrorCode.VALIDATION_ERROR)

    # lock before summing so concurrent refunds serialise on the invoice row
    invoice = await load_invoice(db, original.invoice_id, for_update=True)

    refunded = await _refunded_total(db, original.id)
    if refunded + payload.amount > original.amount:
        raise AppException(
            400,
            "Refund exceeds the original payment",
            ErrorCode.PAYMENT_REFUND_EXCEEDS_ORIGINAL,
            {"original_amount": str(original.amount), "refunded_amount": str(refunded)},
        )

    refund = Payment(
        invoice_id=invoice.id,
        amount=-abs(payload.amount),
        currency=original.currency,
        payment_date=date.today(),
        payment_method=original.payment_method,
        transaction_id=f"REFUND-{original.id}",
        refund_of_id=original.id,
        notes=f"Refund for payment {original.id}: {payload.reason}",
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    db.add(refund)
    await db.flush()
    await recalculate_invoice(db, invoice)
    invoice.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        ActivityCode.REFUND_PAYMENT,
        target_name=invoice.invoice_number,
        target_id=original.id,  # the refunded payment, not the refund row
        amount=str(payload.amount),
        currency=original.currency.value,
    )

    await db.commit()
    await db.refresh(refund)

    logger.info(
        "Payment refunded",
        extra={"payment_id": original.id, "amount": str(payload.amount), "reason": payload.reason},
    )
    return PaymentOut.model_validate(refund)


# =====================================================
# LIST / GET
# =====================================================
async def list_payments(
    db: AsyncSession,
    filters: PaymentFilters,
    *,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    query = _list_query()

    if filters.search:
        term = f"%{filters.search}%"
        query = query.where(or_(Payment.transaction_id.ilike(term), Payment.notes.ilike(term)))
    if filters.invoice_id is not None:
        query = query.where(Payment.invoice_id == filters.invoice_id)
    if filters.customer_id is not None:
        query = query.where(Invoice.customer_id == filters.customer_id)
    if filters.payment_method:
        query = query.where(Payment.payment_method == filters.payment_method)
    if filters.currency:
        query = query.where(Payment.currency == filters.currency)
    if filters.date_from:
        query = query.where(Payment.payment_date >= filters.date_from)
    if filters.date_to:
        query = query.where(Payment.payment_date <= filters.date_to)
    if filters.amount_from is not None:
        query = query.where(Payment.amount >= filters.amount_from)
    if filters.amount_to is not None:
        query = query.where(Payment.amount <= filters.amount_to)

    query = query.order_by(desc(Payment.payment_date), desc(Payment.id))
    data = await paginate(db, query, page=page, page_size=page_size, scalars=False)
    data["items"] = [_map_row(*row) for row in data["items"]]
    return data


async def get_payment(db: AsyncSession, payment_id: int) -> PaymentOut:
    return PaymentOut.model_validate(await _get_payment(db, payment_id))


# =====================================================
# UPDATE / DELETE
# =====================================================
async def update_payment(db: AsyncSession, payment_id: int, payload: PaymentUpdate, user) -> PaymentOut:
    payment = await _get_payment(db, payment_id)
    invoice = await _payable_invoice(db, payment.invoice_id)

    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise AppException(400, "No changes detected", ErrorCode.VALIDATION_ERROR)

    if payment.amount < 0 and "amount" in data:
        raise AppException(400, "Refund amounts cannot be edited", ErrorCode.VALIDATION_ERROR)

    new_amount = data.get("amount")
    if new_amount is not None:
        refunded = await _refunded_total(db, payment.id)
        if new_amount < refunded:
            raise AppException(
                400,
                "Payment cannot be reduced below the amount already refunded",
                ErrorCode.PAYMENT_REFUND_EXCEEDS_ORIGINAL,
                {"refunded_amount": str(refunded)},
            )

        headroom = to_decimal(invoice.balance_due) + to_decimal(payment.amount)
        if new_amount > headroom:
            raise AppException(
                400,
                "Payment exceeds the outstanding balance",
                ErrorCode.PAYMENT_OVERPAYMENT,
                {"balance_due": str(headroom)},
            )

    for field, value in data.items():
        setattr(payment, field, value)
    payment.updated_by_id = user.id

    await db.flush()
    await recalculate_invoice(db, invoice)
    invoice.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        ActivityCode.UPDATE_PAYMENT,
        target_id=payment.id,
        target_name=invoice.invoice_number,
    )

    await db.commit()
    await db.refresh(payment)
    return PaymentOut.model_validate(payment)


async def delete_payment(db: AsyncSession, payment_id: int, user) -> dict:
    payment = await _get_payment(db, payment_id)
    invoice = await load_invoice(db, payment.invoice_id, for_update=True)

    if await _refunded_total(db, payment.id) > 0:
        raise AppException(
            400,
            "Delete the refunds issued against this payment first",
            ErrorCode.PAYMENT_HAS_REFUNDS,
        )

    await db.delete(payment)
    await db.flush()

    await recalculate_invoice(db, invoice)
    invoice.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        ActivityCode.DELETE_PAYMENT,
        target_id=payment_id,
        target_name=invoice.invoice_number,
    )

    await db.commit()
    logger.info("Payment deleted", extra={"payment_id": payment_id, "invoice_status": invoice.status.value})
    return {"id": payment_id}


# =====================================================
# REPORTING
# =====================================================
async def invoice_payment_summary(db: AsyncSession, invoice_id: int) -> InvoicePaymentSummary:
    invoice = await load_invoice(db, invoice_id)
    payments = sorted(invoice.payments, key=lambda p: (p.payment_date, p.id), reverse=True)

    total_paid = sum((to_decimal(p.amount) for p in payments), ZERO)
    invoice_amount = to_decimal(invoice.total_amount)

    return InvoicePaymentSummary(
        invoice_id=invoice.id,
        invoice_amount=invoice_amount,
        total_paid=total_paid,
        balance_due=invoice_amount - total_paid,
        payment_percentage=percent_of(total_paid, invoice_amount),
        payment_count=len(payments),
        payments=[PaymentOut.model_validate(p) for p in payments],
    )


async def payment_stats(
    db: AsyncSession,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> PaymentStats:
    def _scoped(query):
        query = query.join(Invoice, Invoice.id == Payment.invoice_id).where(Invoice.is_deleted.is_(False))
        if date_from:
            query = query.where(Payment.payment_date >= date_from)
        if date_to:
            query = query.where(Payment.payment_date <= date_to)
        return query

    by_currency = (
        await db.execute(
            _scoped(select(Payment.currency, func.sum(Payment.amount))).group_by(Payment.currency)
        )
    ).all()
    by_method = (
        await db.execute(
            _scoped(
                select(Payment.payment_method, func.count(Payment.id), func.sum(Payment.amount))
            ).group_by(Payment.payment_method)
        )
    ).all()

    counts = {m.value: n for m, n, _ in by_method}
    return PaymentStats(
        total=sum(counts.values()),
        total_value={c.value: to_decimal(v) for c, v in by_currency},
        by_method=MethodBreakdown(
            counts=counts,
            totals={m.value: to_decimal(v) for m, _, v in by_method},
        ),
    )


async def recent_payments(db: AsyncSession, limit: int = RECENT_LIMIT) -> list[PaymentListItem]:
    since = date.today() - timedelta(days=RECENT_DAYS)
    rows = (
        await db.execute(
            _list_query()
            .where(Payment.payment_date >= since)
            .order_by(desc(Payment.payment_date), desc(Payment.id))
            .limit(limit)
        )
    ).all()
    return [_map_row(*row) for row in rows]


async def payment_trends(db: AsyncSession, days: int = TREND_DAYS) -> list[PaymentTrendPoint]:
    since = date.today() - timedelta(days=days)
    rows = (
        await db.execute(
            select(Payment.payment_date, Payment.currency, func.count(Payment.id), func.sum(Payment.amount))
            .join(Invoice, Invoice.id == Payment.invoice_id)
            .where(Invoice.is_deleted.is_(False), Payment.payment_date >= since)
            .group_by(Payment.payment_date, Payment.currency)
            .order_by(Payment.payment_date)
        )
    ).all()

    totals: dict[date, dict[str, Decimal]] = defaultdict(dict)
    counts: dict[date, int] = defaultdict(int)
    for day, currency, n, amount in rows:
        totals[day][currency.value] = to_decimal(amount)
        counts[day] += n

    return [
        PaymentTrendPoint(
            day=day,
            totals=per_currency,
            total_aed=sum((to_aed(v, c) for c, v in per_currency.items()), ZERO),
            count=counts[day],
        )
        for day, per_currency in sorted(totals.items())
    ]
