from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database.init import Base
from enums.onboarding_request_status import OnboardingRequestStatus, ACTIVE_ONBOARDING_STATUSES
from .visit_request_model import active_slot_key


class OnboardingRequest(Base):
    __tablename__ = "onboarding_requests"

    id = Column(Integer, primary_key=True, index=True)
    tenant_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    visit_request_id = Column(Integer, ForeignKey("visit_requests.id"), nullable=True)
    pg_id = Column(Integer, ForeignKey("pgs.id"), nullable=False, index=True)
    # required on creation, cleared only when the room is deleted
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    monthly_rent = Column(Float, nullable=True)
    tenant_image = Column(String(255), nullable=True)
    id_document = Column(String(255), nullable=True)
    emergency_contact_name = Column(String(100), nullable=True)
    emergency_contact_phone = Column(String(20), nullable=True)
    emergency_contact_relationship = Column(String(50), nullable=True)

    status = Column(String(20), default=OnboardingRequestStatus.PENDING.value, nullable=False)
    rejection_reason = Column(Text, nullable=True)
    # "<tenant_user_id>:<pg_id>" while pending or while the approved tenancy lasts
    active_slot = Column(String(64), unique=True, nullable=True)
    version_id = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    approved_at = Column(DateTime(timezone=True), nullable=True)

    tenant = relationship("User", foreign_keys=[tenant_user_id])
    owner = relationship("User", foreign_keys=[owner_id])
    pg = relationship("Pg")
    room = relationship("Room")
    visit_request = relationship("VisitRequest")

    __mapper_args__ = {"version_id_col": version_id}

    def set_status(self, status: OnboardingRequestStatus):
        self.status = status.value
        if status in ACTIVE_ONBOARDING_STATUSES:
            self.active_slot = active_slot_key(self.tenant_user_id, self.pg_id)
        else:
            self.active_slot = None

    def release_slot(self):
        self.active_slot = None
