from database.init import Base

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from enums.user_type import UserType


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    phone = Column(String(15), nullable=True)
    # nullable for accounts created without credentials (OAuth, owner-added)
    hashed_password = Column(String(100), nullable=True)
    user_type = Column(String(20), default=UserType.APPLICANT.value, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    pgs = relationship("Pg", back_populates="owner")
    tenancies = relationship("Tenant", foreign_keys="Tenant.user_id", back_populates="user")
