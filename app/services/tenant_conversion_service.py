"""
Tenant conversion: what happens when an owner approves an onboarding request.

The conversion runs inside the caller's transaction and never commits.
Either every write below lands together, or the caller rolls all of them back:

1. re-read and lock the room, refuse when it is full
2. reuse the owner's existing tenant record for this user, or create one;
   moving them out of another PG frees that PG's approved request
3. attach the tenant to the room through the occupancy ledger
4. flip the user to ``tenant``
5. mark the onboarding request approved

The welcome email is chosen here but sent after commit by the notifier.
"""
import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from config import WorkflowSettings, workflow_settings
from database.models import OnboardingRequest, Pg, Room, Tenant, User
from database.models.visit_request_model import active_slot_key
from enums.onboarding_request_status import OnboardingRequestStatus
from enums.tenant_status import TenantStatus
from enums.welcome_template import WelcomeTemplate
from services.exceptions import NotFoundError
from services.room_occupancy_service import RoomOccupancyLedger
from services.user_lifecycle import on_tenant_assigned
from utils.dependencies import hash_password

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_temporary_password(length: int = 10) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


@dataclass
class ConversionResult:
    request: OnboardingRequest
    tenant: Tenant
    room: Room
    user: User
    pg: Pg
    template: WelcomeTemplate
    temporary_password: Optional[str] = None


class TenantConversionService:
    def __init__(
        self,
        ledger: Optional[RoomOccupancyLedger] = None,
        settings: WorkflowSettings = workflow_settings,
    ):
        self.ledger = ledger or RoomOccupancyLedger()
        self.settings = settings

    def convert(
        self, db: Session, request: OnboardingRequest, pg: Pg, now: datetime
    ) -> ConversionResult:
        if request.room_id is None:
            raise NotFoundError("The requested room no longer exists.")

        room = self.ledger.lock_room(db, request.room_id)
        user = db.get(User, request.tenant_user_id)
        if user is None:
            raise NotFoundError(f"User with ID {request.tenant_user_id} not found.")

        tenant = self.find_existing_tenant(db, request.owner_id, user.id)
        self.ledger.ensure_capacity(room, tenant.id if tenant else None)

        temporary_password = None
        if tenant is not None:
            template = WelcomeTemplate.EXISTING_USER
            moving = tenant.room_id is not None and tenant.room_id != room.id
            if moving and tenant.status == TenantStatus.ACTIVE.value:
                self.ledger.release_tenant(db, tenant.room_id, tenant.id)
            if tenant.pg_id is not None and tenant.pg_id != request.pg_id:
                self.release_previous_slot(db, user.id, tenant.pg_id)
        else:
            if user.hashed_password:
                template = WelcomeTemplate.WELCOME
            else:
                temporary_password = generate_temporary_password(
                    self.settings.temporary_password_length
                )
                user.hashed_password = hash_password(temporary_password)
                template = WelcomeTemplate.WITH_PASSWORD
            tenant = Tenant(owner_id=request.owner_id)
            db.add(tenant)

        self.apply_snapshot(tenant, request, room)
        tenant.user_id = user.id
        db.flush()

        room = self.ledger.assign_tenant(db, room.id, tenant.id)
        on_tenant_assigned(user)

        request.set_status(OnboardingRequestStatus.APPROVED)
        request.approved_at = now

        logger.info(
            "Onboarding request %s converted user %s into tenant %s of room %s (%s email)",
            request.id, user.id, tenant.id, room.id, template.value,
        )
        return ConversionResult(
            request=request,
            tenant=tenant,
            room=room,
            user=user,
            pg=pg,
            template=template,
            temporary_password=temporary_password,
        )

    def find_existing_tenant(self, db: Session, owner_id: int, user_id: int) -> Optional[Tenant]:
        return (
            db.query(Tenant)
            .filter(Tenant.owner_id == owner_id, Tenant.user_id == user_id)
            .order_by(Tenant.id.desc())
            .first()
        )

    def release_previous_slot(self, db: Session, user_id: int, pg_id: int):
        """The tenancy in the old PG ends with the move, so its approved request stops being active."""
        previous = (
            db.query(OnboardingRequest)
            .filter(OnboardingRequest.active_slot == active_slot_key(user_id, pg_id))
            .first()
        )
        if previous is not None and previous.status == OnboardingRequestStatus.APPROVED.value:
            previous.release_slot()
            logger.info("Onboarding request %s released, user %s left PG %s", previous.id, user_id, pg_id)

    def apply_snapshot(self, tenant: Tenant, request: OnboardingRequest, room: Room):
        tenant.pg_id = request.pg_id
        tenant.room_id = room.id
        tenant.room_number = room.room_number
        tenant.name = request.name
        tenant.email = request.email
        tenant.phone = request.phone
        tenant.monthly_rent = (
            request.monthly_rent if request.monthly_rent is not None else room.monthly_rent
        )
        tenant.tenant_image = request.tenant_image
        tenant.id_document = request.id_document
        tenant.emergency_contact_name = request.emergency_contact_name
        tenant.emergency_contact_phone = request.emergency_contact_phone
        tenant.emergency_contact_relationship = request.emergency_contact_relationship
        tenant.status = TenantStatus.ACTIVE.value
