from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from enums.tenant_status import TenantStatus


class TenantResponse(BaseModel):
    id: int
    owner_id: int
    user_id: Optional[int] = None
    pg_id: Optional[int] = None
    room_id: Optional[int] = None
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    room_number: Optional[str] = None
    monthly_rent: Optional[float] = None
    status: TenantStatus

    model_config = ConfigDict(from_attributes=True)


class TenantFeedback(BaseModel):
    owner_feedback: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    behavior_tags: List[str] = []


class TenantHistoryResponse(BaseModel):
    id: int
    tenant_user_id: int
    tenant_id: Optional[int] = None
    pg_id: int
    pg_name: Optional[str] = None
    room_id: Optional[int] = None
    room_number: Optional[str] = None
    move_in_date: datetime
    move_out_date: datetime
    owner_feedback: Optional[str] = None
    rating: Optional[int] = None
    behavior_tags: List[str] = []
    recorded_by_owner_id: int

    model_config = ConfigDict(from_attributes=True)
