# app/utils/pagination.py
import math

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def paginate(
    db: AsyncSession,
    query: Select,
    *,
    page: int,
    page_size: int,
    scalars: bool = True,
) -> dict:
    """Count ``query`` through a subquery, then fetch one page of it.

    ``query`` must already carry its ordering. Returns total, page, page_size,
    pages and items, where items are ORM objects (or rows when ``scalars`` is
    False).
    """
    total = await db.scalar(
        select(func.count()).select_from(query.order_by(None).subquery())
    ) or 0

    result = await db.execute(
        query.offset((page - 1) * page_size).limit(page_size)
    )
    items = result.scalars().all() if scalars else result.all()

    return {
        "total": total,
        "page": page,
        "page_size": page_size,
        "pages": math.ceil(total / page_size) if page_size else 0,
        "items": list(items),
    }
