from enum import Enum


class NotificationType(str, Enum):
    VISIT_APPROVED = "visit_approved"
    VISIT_RESCHEDULED = "visit_rescheduled"
    ONBOARDING_APPROVED = "onboarding_approved"
    ONBOARDING_REJECTED = "onboarding_rejected"

    def __str__(self):
        return self.value
