from pydantic import BaseModel
from typing import List

from .visit_request_response import VisitRequestListItem
from .onboarding_request_response import OnboardingRequestListItem


class WorkflowListing(BaseModel):
    visit_requests: List[VisitRequestListItem] = []
    onboarding_requests: List[OnboardingRequestListItem] = []
