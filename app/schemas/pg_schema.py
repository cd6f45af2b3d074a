from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

from .room_schema import RoomResponse


class PgCreate(BaseModel):
    name: str
    address: str
    city: Optional[str] = None


class PgResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    address: str
    city: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    rooms: List[RoomResponse] = []

    model_config = ConfigDict(from_attributes=True)
