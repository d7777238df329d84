from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums.crm import CommunicationType, CommunicationDirection


class CommunicationCreate(BaseModel):
    customer_id: int
    inquiry_id: Optional[int] = None
    type: CommunicationType
    direction: CommunicationDirection
    subject: Optional[str] = Field(default=None, max_length=255)
    content: str = Field(min_length=1)
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class CommunicationUpdate(BaseModel):
    type: Optional[CommunicationType] = None
    direction: Optional[CommunicationDirection] = None
    subject: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class CommunicationFilters(BaseModel):
    search: Optional[str] = None
    customer_id: Optional[int] = None
    inquiry_id: Optional[int] = None
    type: Optional[CommunicationType] = None
    direction: Optional[CommunicationDirection] = None
    handled_by_id: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None


class CommunicationOut(BaseModel):
    id: int
    customer_id: int
    inquiry_id: Optional[int] = None
    type: CommunicationType
    direction: CommunicationDirection
    subject: Optional[str] = None
    content: str
    handled_by_id: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommunicationListData(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int
    items: List[CommunicationOut]


class CommunicationStats(BaseModel):
    total: int
    by_type: dict[str, int]
    by_direction: dict[str, int]
