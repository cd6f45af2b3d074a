from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class OnboardingProfile(BaseModel):
    """Profile snapshot the applicant submits with the request."""

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=5, max_length=20)
    monthly_rent: Optional[float] = Field(default=None, ge=0)
    tenant_image: Optional[str] = None
    id_document: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None


class OnboardingRequestCreate(BaseModel):
    pg_id: int
    room_id: int
    visit_request_id: Optional[int] = None
    profile: OnboardingProfile


class OnboardingReject(BaseModel):
    # left unconstrained so a blank reason is a 400 from the service, not a 422
    reason: str = ""
