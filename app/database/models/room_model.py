from sqlalchemy import Column, Integer, String, Float, JSON, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database.init import Base
from enums.room_status import RoomStatus


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("pg_id", "room_number", name="uq_rooms_pg_room_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    pg_id = Column(Integer, ForeignKey("pgs.id"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    room_number = Column(String(20), nullable=False)
    sharing = Column(Integer, default=1, nullable=False)
    monthly_rent = Column(Float, nullable=False, default=0)
    # canonical membership list, only the occupancy ledger writes it
    tenant_ids = Column(JSON, nullable=False, default=list)
    status = Column(String(30), default=RoomStatus.VACANT.value, nullable=False)
    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    pg = relationship("Pg", back_populates="rooms")

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def occupant_count(self) -> int:
        return len(self.tenant_ids or [])

    @property
    def is_full(self) -> bool:
        return self.occupant_count >= self.sharing
