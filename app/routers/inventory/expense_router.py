# app/routers/inventory/expense_router.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.permissions import Permission
from app.core.db import get_db
from app.schemas.inventory.expense_schemas import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseFilters,
    ExpenseOut,
    ExpenseListData,
    ExpenseStats,
    MonthlyExpenseTotal,
)
from app.services.inventory.expense_service import (
    create_expense,
    list_expenses,
    get_expense,
    update_expense,
    delete_expense,
    expense_stats,
    monthly_trends,
)
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse

router = APIRouter(prefix="/expenses", tags=["Expenses"])

can_view = require_permission(Permission.view_finances)
can_manage = require_permission(Permission.manage_finances, Permission.manage_vehicles)


@router.post("", response_model=APIResponse[ExpenseOut], status_code=201)
async def create_expense_api(
    payload: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    return success_response("Expense recorded successfully", await create_expense(db, payload, user))


@router.get("", response_model=APIResponse[ExpenseListData])
async def list_expenses_api(
    filters: ExpenseFilters = Depends(),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    data = await list_expenses(db, filters, page=page, page_size=page_size)
    return success_response("Expenses retrieved successfully", data)


@router.get("/stats", response_model=APIResponse[ExpenseStats])
async def expense_stats_api(
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    vehicle_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    stats = await expense_stats(db, date_from=date_from, date_to=date_to, vehicle_id=vehicle_id)
    return success_response("Expense statistics retrieved successfully", stats)


@router.get("/trends", response_model=APIResponse[List[MonthlyExpenseTotal]])
async def expense_trends_api(
    months: int = Query(12, ge=1, le=36),
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Expense trends retrieved successfully", await monthly_trends(db, months))


@router.get("/{expense_id}", response_model=APIResponse[ExpenseOut])
async def get_expense_api(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_view),
):
    return success_response("Expense retrieved successfully", await get_expense(db, expense_id))


@router.patch("/{expense_id}", response_model=APIResponse[ExpenseOut])
async def update_expense_api(
    expense_id: int,
    payload: ExpenseUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    return success_response("Expense updated successfully", await update_expense(db, expense_id, payload, user))


@router.delete("/{expense_id}", response_model=APIResponse[dict])
async def delete_expense_api(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(can_manage),
):
    return success_response("Expense deleted successfully", await delete_expense(db, expense_id, user))
