from .user_model import User
from .pg_model import Pg
from .room_model import Room
from .tenant_model import Tenant
from .visit_request_model import VisitRequest
from .onboarding_request_model import OnboardingRequest
from .notification_model import Notification
from .tenant_history_model import TenantHistory

__all__ = ["User", "Pg", "Room", "Tenant", "VisitRequest", "OnboardingRequest", "Notification", "TenantHistory"]
