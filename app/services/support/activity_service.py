# app/services/support/activity_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc, asc

from app.models.support.activity_models import UserActivity
from app.schemas.support.activity_schemas import (
    UserActivityOut,
    UserActivityFilters,
)
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger
from app.utils.pagination import paginate

logger = get_logger(__name__)

ALLOWED_SORT_FIELDS = {
    "created_at": UserActivity.created_at,
    "username": UserActivity.username_snapshot,
    "code": UserActivity.code,
}


async def list_user_activities(
    *,
    db: AsyncSession,
    filters: UserActivityFilters,
) -> dict:
    query = select(UserActivity)

    # -------------------------
    # Filters
    # -------------------------
    if filters.user_id:
        query = query.where(UserActivity.user_id == filters.user_id)

    if filters.username:
        query = query.where(UserActivity.username_snapshot.ilike(f"%{filters.username}%"))

    if filters.code:
        query = query.where(UserActivity.code == filters.code.upper())

    if filters.target_id:
        query = query.where(UserActivity.target_id == filters.target_id)

    # -------------------------
    # Sorting (safe)
    # -------------------------
    sort_column = ALLOWED_SORT_FIELDS.get(filters.sort_by)
    if sort_column is None:
        raise AppException(400, "Invalid sort field", ErrorCode.VALIDATION_ERROR)

    order_fn = desc if filters.sort_order == "desc" else asc
    query = query.order_by(order_fn(sort_column), order_fn(UserActivity.id))

    data = await paginate(db, query, page=filters.page, page_size=filters.page_size)
    data["items"] = [UserActivityOut.model_validate(a) for a in data["items"]]

    logger.info(
        "User activities fetched",
        extra={"total": data["total"], "page": filters.page, "page_size": filters.page_size},
    )
    return data
