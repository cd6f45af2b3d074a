from enum import Enum


class OnboardingRequestStatus(str, Enum):
    """Enum for the lifecycle of a room onboarding request"""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def __str__(self):
        return self.value


ACTIVE_ONBOARDING_STATUSES = (
    OnboardingRequestStatus.PENDING,
    OnboardingRequestStatus.APPROVED,
)
