from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import date, datetime

from enums.visit_request_status import VisitRequestStatus
from enums.reschedule_actor import RescheduleActor


class VisitRequestResponse(BaseModel):
    id: int
    tenant_user_id: int
    pg_id: int
    owner_id: int
    room_id: Optional[int] = None
    requested_date: date
    requested_time: str
    status: VisitRequestStatus
    rescheduled_date: Optional[date] = None
    rescheduled_time: Optional[str] = None
    rescheduled_by: Optional[RescheduleActor] = None
    confirmed_date: Optional[date] = None
    confirmed_time: Optional[str] = None
    notes: Optional[str] = None
    owner_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VisitRequestListItem(VisitRequestResponse):
    """Visit request joined with its PG, room and tenant for listings."""

    pg_name: Optional[str] = None
    pg_address: Optional[str] = None
    room_number: Optional[str] = None
    tenant_name: Optional[str] = None
    tenant_email: Optional[str] = None
