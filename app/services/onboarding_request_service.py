import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from config import WorkflowSettings, workflow_settings
from database.models import OnboardingRequest, Room, VisitRequest
from database.models.visit_request_model import active_slot_key
from enums.onboarding_request_status import OnboardingRequestStatus
from enums.visit_request_status import VisitRequestStatus
from schemas.actor_schema import ActorContext
from schemas.onboarding_request_schema import OnboardingRequestCreate
from services.base_service import BaseService
from services.exceptions import (
    AuthorizationError,
    ConcurrentUpdateError,
    DuplicateActiveRequestError,
    InvalidStateError,
    NotFoundError,
    RoomFullError,
    WorkflowValidationError,
)
from services.pg_service import PgService, ensure_pg_owner
from services.room_occupancy_service import is_lock_conflict
from services.tenant_conversion_service import ConversionResult, TenantConversionService
from services.visit_request_service import utc_now

logger = logging.getLogger(__name__)

DUPLICATE_ONBOARDING_MESSAGE = "You already have an active onboarding request for this property."
VISIT_STATUSES_FOR_ONBOARDING = (VisitRequestStatus.APPROVED.value, VisitRequestStatus.COMPLETED.value)


class OnboardingRequestService(BaseService):
    """pending -> approved (tenant conversion) | rejected"""

    label = "Onboarding request"

    def __init__(
        self,
        pg_service: Optional[PgService] = None,
        conversion_service: Optional[TenantConversionService] = None,
        settings: WorkflowSettings = workflow_settings,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(OnboardingRequest)
        self.pg_service = pg_service or PgService()
        self.conversion_service = conversion_service or TenantConversionService(settings=settings)
        self.settings = settings
        self.clock = clock

    def create(
        self, db: Session, actor: ActorContext, request_in: OnboardingRequestCreate
    ) -> OnboardingRequest:
        if not actor.is_tenant_side:
            raise AuthorizationError("Only tenants and applicants can request onboarding.")

        pg = self.pg_service.get_pg_by_id(db, request_in.pg_id)
        if pg.owner_id == actor.user_id:
            raise AuthorizationError("Owners cannot onboard into their own PG.")

        room = db.get(Room, request_in.room_id)
        if room is None or room.pg_id != pg.id:
            raise NotFoundError(f"Room with ID {request_in.room_id} not found in this PG.")
        if room.is_full:
            raise RoomFullError(f"Room {room.room_number} is full, please choose another room.")

        self._check_visit(db, actor, pg.id, request_in.visit_request_id)

        if self.get_active(db, actor.user_id, pg.id) is not None:
            raise DuplicateActiveRequestError(DUPLICATE_ONBOARDING_MESSAGE)

        profile = request_in.profile.model_dump()
        if profile.get("monthly_rent") is None:
            profile["monthly_rent"] = room.monthly_rent
        onboarding = OnboardingRequest(
            tenant_user_id=actor.user_id,
            visit_request_id=request_in.visit_request_id,
            pg_id=pg.id,
            room_id=room.id,
            owner_id=pg.owner_id,
            **profile,
        )
        onboarding.set_status(OnboardingRequestStatus.PENDING)

        db.add(onboarding)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if self.get_active(db, actor.user_id, pg.id) is not None:
                raise DuplicateActiveRequestError(DUPLICATE_ONBOARDING_MESSAGE) from e
            raise
        db.refresh(onboarding)
        logger.info(
            "Onboarding request %s created by user %s for room %s", onboarding.id, actor.user_id, room.id
        )
        return onboarding

    def get_active(self, db: Session, tenant_user_id: int, pg_id: int) -> Optional[OnboardingRequest]:
        return (
            db.query(OnboardingRequest)
            .filter(OnboardingRequest.active_slot == active_slot_key(tenant_user_id, pg_id))
            .first()
        )

    def approve(self, db: Session, actor: ActorContext, request_id: int) -> ConversionResult:
        attempts = max(1, self.settings.room_update_retries)
        for attempt in range(1, attempts + 1):
            try:
                result = self._approve_once(db, actor, request_id)
                db.commit()
            except ConcurrentUpdateError:
                db.rollback()
                if attempt == attempts:
                    raise
                logger.warning("Onboarding request %s lost a race, retry %s", request_id, attempt)
            except (StaleDataError, OperationalError) as e:
                db.rollback()
                if isinstance(e, OperationalError) and not is_lock_conflict(e):
                    raise
                if attempt == attempts:
                    raise ConcurrentUpdateError(
                        "This request was updated by someone else, please retry."
                    ) from e
                logger.warning("Onboarding request %s lost a race, retry %s", request_id, attempt)
            except Exception:
                # request stays pending, tenant and room writes are discarded
                db.rollback()
                raise
            else:
                for obj in (result.request, result.tenant, result.room, result.user):
                    db.refresh(obj)
                return result

    def _approve_once(self, db: Session, actor: ActorContext, request_id: int) -> ConversionResult:
        request = (
            db.query(OnboardingRequest)
            .filter(OnboardingRequest.id == request_id)
            .populate_existing()
            .first()
        )
        if request is None:
            raise NotFoundError(f"Onboarding request with ID {request_id} not found.")

        pg = self.pg_service.get_pg_by_id(db, request.pg_id)
        ensure_pg_owner(pg, actor, "approve this onboarding request")
        self._ensure_pending(request, "approved")

        return self.conversion_service.convert(db, request, pg, now=self.clock())

    def reject(self, db: Session, actor: ActorContext, request_id: int, reason: str) -> OnboardingRequest:
        if not reason or not reason.strip():
            raise WorkflowValidationError("A reason is required to reject an onboarding request.")

        request = self.get_or_raise(db, request_id)
        pg = self.pg_service.get_pg_by_id(db, request.pg_id)
        ensure_pg_owner(pg, actor, "reject this onboarding request")
        self._ensure_pending(request, "rejected")

        request.rejection_reason = reason.strip()
        request.set_status(OnboardingRequestStatus.REJECTED)
        try:
            db.commit()
        except StaleDataError as e:
            db.rollback()
            raise ConcurrentUpdateError("This request was updated by someone else, please retry.") from e
        db.refresh(request)
        logger.info("Onboarding request %s rejected: %s", request.id, request.rejection_reason)
        return request

    def reject_for_room(self, db: Session, room_id: int, reason: str) -> int:
        """Reject pending requests for a room that is being removed. Caller commits."""
        rejected = 0
        for request in db.query(OnboardingRequest).filter(OnboardingRequest.room_id == room_id).all():
            if request.status == OnboardingRequestStatus.PENDING.value:
                request.rejection_reason = reason
                request.set_status(OnboardingRequestStatus.REJECTED)
                rejected += 1
            request.room_id = None
        return rejected

    def release_slot(self, db: Session, tenant_user_id: int, pg_id: int):
        """Free the approved request's slot once that tenancy ends. Caller commits."""
        request = self.get_active(db, tenant_user_id, pg_id)
        if request is not None and request.status == OnboardingRequestStatus.APPROVED.value:
            request.release_slot()

    def _check_visit(self, db: Session, actor: ActorContext, pg_id: int, visit_request_id: Optional[int]):
        if visit_request_id is not None:
            visit = db.get(VisitRequest, visit_request_id)
            if visit is None:
                raise NotFoundError(f"Visit request with ID {visit_request_id} not found.")
            if visit.tenant_user_id != actor.user_id or visit.pg_id != pg_id:
                raise InvalidStateError("That visit request belongs to a different tenant or property.")
            if visit.status not in VISIT_STATUSES_FOR_ONBOARDING:
                raise InvalidStateError(
                    f"Your visit is {visit.status}; onboarding needs an approved or completed visit."
                )
            return

        if self.settings.require_visit_before_onboarding:
            visited = (
                db.query(VisitRequest)
                .filter(
                    VisitRequest.tenant_user_id == actor.user_id,
                    VisitRequest.pg_id == pg_id,
                    VisitRequest.status.in_(VISIT_STATUSES_FOR_ONBOARDING),
                )
                .first()
            )
            if visited is None:
                raise InvalidStateError("Please visit this property before requesting onboarding.")

    def _ensure_pending(self, request: OnboardingRequest, action: str):
        if request.status != OnboardingRequestStatus.PENDING.value:
            logger.warning(
                "Onboarding request %s cannot be %s from status %s", request.id, action, request.status
            )
            raise InvalidStateError(
                f"This onboarding request is already {request.status} and cannot be {action}."
            )
