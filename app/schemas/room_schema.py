from pydantic import BaseModel, ConfigDict, Field
from typing import List

from enums.room_status import RoomStatus


class RoomCreate(BaseModel):
    room_number: str = Field(min_length=1, max_length=20)
    sharing: int = Field(default=1, ge=1)
    monthly_rent: float = Field(default=0, ge=0)


class RoomResponse(BaseModel):
    id: int
    pg_id: int
    owner_id: int
    room_number: str
    sharing: int
    monthly_rent: float
    tenant_ids: List[int] = []
    status: RoomStatus

    model_config = ConfigDict(from_attributes=True)
