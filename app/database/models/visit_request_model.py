from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database.init import Base
from enums.visit_request_status import VisitRequestStatus, ACTIVE_VISIT_STATUSES


def active_slot_key(tenant_user_id: int, pg_id: int) -> str:
    return f"{tenant_user_id}:{pg_id}"


class VisitRequest(Base):
    __tablename__ = "visit_requests"

    id = Column(Integer, primary_key=True, index=True)
    tenant_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    pg_id = Column(Integer, ForeignKey("pgs.id"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=True)

    requested_date = Column(Date, nullable=False)
    requested_time = Column(String(10), nullable=False)
    status = Column(String(20), default=VisitRequestStatus.PENDING.value, nullable=False)
    rescheduled_date = Column(Date, nullable=True)
    rescheduled_time = Column(String(10), nullable=True)
    rescheduled_by = Column(String(10), nullable=True)
    confirmed_date = Column(Date, nullable=True)
    confirmed_time = Column(String(10), nullable=True)
    notes = Column(Text, nullable=True)
    owner_notes = Column(Text, nullable=True)
    # "<tenant_user_id>:<pg_id>" while active, NULL otherwise; unique per pair
    active_slot = Column(String(64), unique=True, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    tenant = relationship("User", foreign_keys=[tenant_user_id])
    owner = relationship("User", foreign_keys=[owner_id])
    pg = relationship("Pg")
    room = relationship("Room")

    def set_status(self, status: VisitRequestStatus):
        self.status = status.value
        if status in ACTIVE_VISIT_STATUSES:
            self.active_slot = active_slot_key(self.tenant_user_id, self.pg_id)
        else:
            self.active_slot = None
