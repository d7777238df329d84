from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from app.models.enums.user_role import UserRole


# =========================
# UPDATE
# =========================
class ProfileSelfUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=30)
    version: int


class ProfileAdminUpdate(BaseModel):
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    version: int


# =========================
# LIST FILTERS
# =========================
class ProfileListFilters(BaseModel):
    search: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


# =========================
# RESPONSE SCHEMAS
# =========================
class ProfileOut(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: UserRole
    role_display: str
    phone: Optional[str] = None
    is_active: bool
    version: int
    permissions: List[str] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileListData(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int
    items: List[ProfileOut]
