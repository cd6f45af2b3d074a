from pydantic import BaseModel, Field
from datetime import date
from typing import Optional

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class VisitRequestCreate(BaseModel):
    pg_id: int
    room_id: Optional[int] = None
    requested_date: date
    requested_time: str = Field(pattern=TIME_PATTERN)
    notes: Optional[str] = None


class VisitReschedule(BaseModel):
    new_date: date
    new_time: str = Field(pattern=TIME_PATTERN)
    owner_notes: Optional[str] = None
