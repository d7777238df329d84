# app/services/inventory/expense_service.py

import datetime as dt
from collections import defaultdict
from typing import Optional

from sqlalchemy import select, func, desc, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.activity_codes import ActivityCode
from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.inventory.expense_models import Expense
from app.models.inventory.vehicle_models import Vehicle
from app.schemas.inventory.expense_schemas import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseFilters,
    ExpenseOut,
    ExpenseStats,
    MonthlyExpenseTotal,
)
from app.utils.activity_helpers import emit_user_activity
from app.utils.decimal_utils import to_aed, to_decimal, ZERO
from app.utils.logger import get_logger
from app.utils.pagination import paginate

logger = get_logger(__name__)


async def _get_expense(db: AsyncSession, expense_id: int) -> Expense:
    expense = await db.get(Expense, expense_id)
    if not expense:
        raise AppException(404, "Expense not found", ErrorCode.EXPENSE_NOT_FOUND)
    return expense


async def _ensure_vehicle(db: AsyncSession, vehicle_id: Optional[int]) -> None:
    if vehicle_id is not None and not await db.get(Vehicle, vehicle_id):
        raise AppException(404, "Vehicle not found", ErrorCode.VEHICLE_NOT_FOUND)


# =========================
# CRUD
# =========================
async def create_expense(db: AsyncSession, payload: ExpenseCreate, user) -> ExpenseOut:
    await _ensure_vehicle(db, payload.vehicle_id)

    expense = Expense(**payload.model_dump(), created_by_id=user.id, updated_by_id=user.id)
    db.add(expense)
    await db.flush()

    await emit_user_activity(
        db,
        user,
        ActivityCode.CREATE_EXPENSE,
        target_id=expense.id,
        category=expense.category.value,
        amount=expense.amount,
        currency=expense.currency.value,
    )

    await db.commit()
    await db.refresh(expense)

    logger.info("Expense recorded", extra={"expense_id": expense.id, "vehicle_id": expense.vehicle_id})
    return ExpenseOut.model_validate(expense)


async def list_expenses(
    db: AsyncSession,
    filters: ExpenseFilters,
    *,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    query = select(Expense)

    if filters.search:
        term = f"%{filters.search}%"
        query = query.where(
            or_(
                Expense.description.ilike(term),
                Expense.vendor.ilike(term),
                Expense.notes.ilike(term),
            )
        )
    if filters.vehicle_id is not None:
        query = query.where(Expense.vehicle_id == filters.vehicle_id)
    if filters.category:
        query = query.where(Expense.category == filters.category)
    if filters.currency:
        query = query.where(Expense.currency == filters.currency)
    if filters.date_from:
        query = query.where(Expense.date >= filters.date_from)
    if filters.date_to:
        query = query.where(Expense.date <= filters.date_to)
    if filters.vendor:
        query = query.where(Expense.vendor.ilike(f"%{filters.vendor}%"))

    query = query.order_by(desc(Expense.date), desc(Expense.id))
    data = await paginate(db, query, page=page, page_size=page_size)
    data["items"] = [ExpenseOut.model_validate(e) for e in data["items"]]
    return data


async def get_expense(db: AsyncSession, expense_id: int) -> ExpenseOut:
    return ExpenseOut.model_validate(await _get_expense(db, expense_id))


async def update_expense(db: AsyncSession, expense_id: int, payload: ExpenseUpdate, user) -> ExpenseOut:
    expense = await _get_expense(db, expense_id)
    values = payload.model_dump(exclude_unset=True)
    if "vehicle_id" in values:
        await _ensure_vehicle(db, values["vehicle_id"])

    changes = [f for f, v in values.items() if getattr(expense, f) != v]
    if not changes:
        raise AppException(400, "No changes detected", ErrorCode.VALIDATION_ERROR)

    for field in changes:
        setattr(expense, field, values[field])
    expense.updated_by_id = user.id

    await emit_user_activity(
        db,
        user,
        ActivityCode.UPDATE_EXPENSE,
        target_id=expense.id,
        changes=", ".join(changes),
    )

    await db.commit()
    await db.refresh(expense)
    return ExpenseOut.model_validate(expense)


async def delete_expense(db: AsyncSession, expense_id: int, user) -> dict:
    expense = await _get_expense(db, expense_id)

    await emit_user_activity(db, user, ActivityCode.DELETE_EXPENSE, target_id=expense.id)

    await db.delete(expense)
    await db.commit()
    return {"id": expense_id}


# =========================
# REPORTS
# =========================
async def expense_stats(
    db: AsyncSession,
    *,
    date_from: Optional[dt.date] = None,
    date_to: Optional[dt.date] = None,
    vehicle_id: Optional[int] = None,
) -> ExpenseStats:
    """Totals in AED at the fixed reporting rates; by_currency stays in native amounts."""
    query = select(
        Expense.category,
        Expense.currency,
        func.count(Expense.id),
        func.sum(Expense.amount),
    ).group_by(Expense.category, Expense.currency)

    if date_from:
        query = query.where(Expense.date >= date_from)
    if date_to:
        query = query.where(Expense.date <= date_to)
    if vehicle_id is not None:
        query = query.where(Expense.vehicle_id == vehicle_id)

    count = 0
    total_aed = ZERO
    by_category = defaultdict(lambda: ZERO)
    by_currency = defaultdict(lambda: ZERO)

    for category, currency, n, amount in (await db.execute(query)).all():
        amount_aed = to_aed(amount, currency)
        count += n
        total_aed += amount_aed
        by_category[category.value] += amount_aed
        by_currency[currency.value] += to_decimal(amount)

    return ExpenseStats(
        total_count=count,
        total_aed=to_decimal(total_aed),
        by_category_aed=dict(by_category),
        by_currency=dict(by_currency),
    )


async def monthly_trends(db: AsyncSession, months: int = 12) -> list[MonthlyExpenseTotal]:
    today = dt.date.today()
    start_month = today.month - months
    start = dt.date(today.year + (start_month - 1) // 12, (start_month - 1) % 12 + 1, 1)

    rows = (
        await db.execute(
            select(Expense.date, Expense.category, Expense.currency, Expense.amount)
            .where(Expense.date >= start)
            .order_by(Expense.date)
        )
    ).all()

    buckets: dict[str, dict] = {}
    for day, category, currency, amount in rows:
        key = day.strftime("%Y-%m")
        bucket = buckets.setdefault(key, {"total": ZERO, "count": 0, "by_category": defaultdict(lambda: ZERO)})
        amount_aed = to_aed(amount, currency)
        bucket["total"] += amount_aed
        bucket["count"] += 1
        bucket["by_category"][category.value] += amount_aed

    return [
        MonthlyExpenseTotal(
            month=key,
            total_aed=to_decimal(b["total"]),
            count=b["count"],
            by_category_aed=dict(b["by_category"]),
        )
        for key, b in buckets.items()
    ]
