from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from enums.onboarding_request_status import OnboardingRequestStatus
from schemas.tenant_schema import TenantResponse


class OnboardingRequestResponse(BaseModel):
    id: int
    tenant_user_id: int
    visit_request_id: Optional[int] = None
    pg_id: int
    room_id: Optional[int] = None
    owner_id: int
    name: str
    email: str
    phone: str
    monthly_rent: Optional[float] = None
    tenant_image: Optional[str] = None
    id_document: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    status: OnboardingRequestStatus
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OnboardingRequestListItem(OnboardingRequestResponse):
    pg_name: Optional[str] = None
    pg_address: Optional[str] = None
    room_number: Optional[str] = None


class OnboardingApprovalResponse(BaseModel):
    onboarding_request: OnboardingRequestResponse
    tenant: TenantResponse
