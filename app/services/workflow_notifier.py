"""
Post-commit side effects of the workflow: in-app notifications and the
welcome email. Routes schedule these as background tasks; every failure is
logged here and never reaches the caller.
"""
import asyncio
import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool

from config import WorkflowSettings, workflow_settings
from database.models import OnboardingRequest, VisitRequest
from enums.notification_type import NotificationType
from enums.welcome_template import WelcomeTemplate
from services.email_service import EmailService
from services.exceptions import NotificationDeliveryError
from services.notification_service import NotificationService
from services.tenant_conversion_service import ConversionResult

logger = logging.getLogger(__name__)


class WorkflowNotifier:
    def __init__(
        self,
        notification_service: Optional[NotificationService] = None,
        email_service: Optional[EmailService] = None,
        settings: WorkflowSettings = workflow_settings,
    ):
        self.notification_service = notification_service or NotificationService()
        self._email_service = email_service
        self.settings = settings

    @property
    def email_service(self) -> EmailService:
        # built lazily so a mail misconfiguration cannot break request handling
        if self._email_service is None:
            self._email_service = EmailService()
        return self._email_service

    @email_service.setter
    def email_service(self, value: EmailService):
        self._email_service = value

    def visit_approved(self, visit_id: int, tenant_user_id: int, confirmed: str):
        self.notification_service.notify(
            tenant_user_id,
            "Visit approved",
            f"Your visit has been confirmed for {confirmed}.",
            NotificationType.VISIT_APPROVED,
            visit_id,
        )

    def visit_rescheduled(self, visit_id: int, recipient_user_id: int, proposed: str):
        self.notification_service.notify(
            recipient_user_id,
            "Visit rescheduled",
            f"A new visit slot was proposed: {proposed}. Please accept it or cancel the visit.",
            NotificationType.VISIT_RESCHEDULED,
            visit_id,
        )

    def onboarding_rejected(self, request_id: int, tenant_user_id: int, reason: str):
        self.notification_service.notify(
            tenant_user_id,
            "Onboarding request rejected",
            f"Your onboarding request was not approved. Reason: {reason}",
            NotificationType.ONBOARDING_REJECTED,
            request_id,
        )

    async def onboarding_approved(self, details: dict):
        # notify writes through a blocking session, keep it off the event loop
        await run_in_threadpool(
            self.notification_service.notify,
            details["user_id"],
            "Onboarding approved",
            f"Welcome to {details['pg_name']}! You have been assigned room {details['room_number']}.",
            NotificationType.ONBOARDING_APPROVED,
            details["request_id"],
        )
        await self.send_welcome_email(details)

    async def send_welcome_email(self, details: dict) -> bool:
        try:
            await asyncio.wait_for(
                self._dispatch_welcome(details),
                timeout=self.settings.email_timeout_seconds,
            )
            return True
        except Exception as e:
            error = NotificationDeliveryError(
                f"Welcome email ({details['template']}) to {details['email']} failed: {e}"
            )
            logger.exception(error.message)
            return False

    async def _dispatch_welcome(self, details: dict):
        template = WelcomeTemplate(details["template"])
        common = dict(
            email=details["email"],
            name=details["name"],
            pg_name=details["pg_name"],
            room_number=details["room_number"],
            monthly_rent=details["monthly_rent"] or 0.0,
        )
        if template == WelcomeTemplate.WITH_PASSWORD:
            await self.email_service.send_tenant_onboarding_with_password_email(
                temporary_password=details["temporary_password"], **common
            )
        elif template == WelcomeTemplate.EXISTING_USER:
            await self.email_service.send_tenant_onboarding_existing_user_email(**common)
        else:
            await self.email_service.send_tenant_welcome_email(**common)


def visit_slot(visit: VisitRequest, rescheduled: bool = False) -> str:
    if rescheduled:
        return f"{visit.rescheduled_date.isoformat()} {visit.rescheduled_time}"
    return f"{visit.confirmed_date.isoformat()} {visit.confirmed_time}"


def welcome_details(result: ConversionResult) -> dict:
    """Plain values for the background task, the ORM objects die with the request session."""
    request: OnboardingRequest = result.request
    return {
        "request_id": request.id,
        "user_id": result.user.id,
        "email": result.user.email,
        "name": request.name,
        "pg_name": result.pg.name,
        "room_number": result.room.room_number,
        "monthly_rent": result.tenant.monthly_rent,
        "template": result.template.value,
        "temporary_password": result.temporary_password,
    }
