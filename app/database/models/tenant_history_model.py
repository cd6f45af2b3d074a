from sqlalchemy import Column, Integer, String, Text, JSON, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database.init import Base


class TenantHistory(Base):
    __tablename__ = "tenant_history"

    id = Column(Integer, primary_key=True, index=True)
    tenant_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True)
    pg_id = Column(Integer, ForeignKey("pgs.id"), nullable=False)
    # rooms can be deleted later, the number stays readable
    room_id = Column(Integer, nullable=True)
    room_number = Column(String(20), nullable=True)
    move_in_date = Column(DateTime(timezone=True), nullable=False)
    move_out_date = Column(DateTime(timezone=True), nullable=False)
    owner_feedback = Column(Text, nullable=True)
    rating = Column(Integer, nullable=True)
    behavior_tags = Column(JSON, nullable=False, default=list)
    recorded_by_owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    pg = relationship("Pg")
    recorded_by = relationship("User", foreign_keys=[recorded_by_owner_id])

    @property
    def pg_name(self):
        return self.pg.name if self.pg is not None else None
