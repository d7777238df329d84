from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums.crm import InquirySource, InquiryPriority, InquiryStatus


class InquiryCreate(BaseModel):
    customer_id: int
    vehicle_id: Optional[int] = None
    source: InquirySource = InquirySource.website
    subject: Optional[str] = Field(default=None, max_length=255)
    message: str = Field(min_length=1)
    priority: InquiryPriority = InquiryPriority.medium
    assigned_to_id: Optional[str] = None


class InquiryUpdate(BaseModel):
    vehicle_id: Optional[int] = None
    source: Optional[InquirySource] = None
    subject: Optional[str] = Field(default=None, max_length=255)
    message: Optional[str] = Field(default=None, min_length=1)
    priority: Optional[InquiryPriority] = None
    status: Optional[InquiryStatus] = None
    assigned_to_id: Optional[str] = None
    response: Optional[str] = None


class InquiryAssign(BaseModel):
    assigned_to_id: str


class InquiryResolve(BaseModel):
    response: Optional[str] = None


class InquiryBulkStatusUpdate(BaseModel):
    inquiry_ids: List[int] = Field(min_length=1)
    status: InquiryStatus


class InquiryFilters(BaseModel):
    search: Optional[str] = None
    status: Optional[InquiryStatus] = None
    priority: Optional[InquiryPriority] = None
    source: Optional[InquirySource] = None
    customer_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    assigned_to_id: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None


class InquiryOut(BaseModel):
    id: int
    customer_id: int
    vehicle_id: Optional[int] = None
    source: InquirySource
    subject: Optional[str] = None
    message: str
    priority: InquiryPriority
    status: InquiryStatus
    assigned_to_id: Optional[str] = None
    response: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class InquiryListItem(InquiryOut):
    customer_name: Optional[str] = None
    communication_count: int = 0


class InquiryListData(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int
    items: List[InquiryListItem]


class InquiryStats(BaseModel):
    total: int
    by_status: dict[str, int]
    by_priority: dict[str, int]
    by_source: dict[str, int]


class BulkUpdateResult(BaseModel):
    updated: int
