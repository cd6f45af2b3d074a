from enum import Enum


class VisitRequestStatus(str, Enum):
    """Enum for the lifecycle of a property visit request"""

    PENDING = "pending"
    APPROVED = "approved"
    RESCHEDULED = "rescheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self):
        return self.value


ACTIVE_VISIT_STATUSES = (
    VisitRequestStatus.PENDING,
    VisitRequestStatus.APPROVED,
    VisitRequestStatus.RESCHEDULED,
)
