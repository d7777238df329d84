# app/schemas/support/activity_schemas.py

from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime
from fastapi import Query


class UserActivityFilters(BaseModel):
    user_id: Optional[str] = Query(None)
    username: Optional[str] = Query(None)
    code: Optional[str] = Query(None)
    target_id: Optional[str] = Query(None)

    page: int = Query(1, ge=1)
    page_size: int = Query(20, ge=1, le=100)

    sort_by: str = Query("created_at")
    sort_order: str = Query("desc")


class UserActivityOut(BaseModel):
    id: int
    user_id: Optional[str]
    username_snapshot: str
    code: str
    target_id: Optional[str] = None
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserActivityListData(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int
    items: List[UserActivityOut]
