import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import WorkflowSettings, workflow_settings
from database.models import Room, VisitRequest
from database.models.visit_request_model import active_slot_key
from enums.reschedule_actor import RescheduleActor
from enums.visit_request_status import VisitRequestStatus, ACTIVE_VISIT_STATUSES
from schemas.actor_schema import ActorContext
from schemas.visit_request_schema import VisitRequestCreate, VisitReschedule
from services.base_service import BaseService
from services.exceptions import (
    AuthorizationError,
    DuplicateActiveRequestError,
    InvalidStateError,
    NotFoundError,
)
from services.pg_service import PgService, ensure_pg_owner

logger = logging.getLogger(__name__)

DUPLICATE_VISIT_MESSAGE = "You already have a pending visit request for this property."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class VisitRequestService(BaseService):
    """
    State machine for visit requests.

    pending -> approved | rescheduled | cancelled
    approved -> rescheduled | completed | cancelled
    rescheduled -> approved (accepted) | cancelled
    completed -> cancelled (withdrawn; the row is kept)
    """

    label = "Visit request"

    def __init__(
        self,
        pg_service: Optional[PgService] = None,
        settings: WorkflowSettings = workflow_settings,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(VisitRequest)
        self.pg_service = pg_service or PgService()
        self.settings = settings
        self.clock = clock

    def create(self, db: Session, actor: ActorContext, request_in: VisitRequestCreate) -> VisitRequest:
        if not actor.is_tenant_side:
            raise AuthorizationError("Only tenants and applicants can request a visit.")

        pg = self.pg_service.get_pg_by_id(db, request_in.pg_id)
        if pg.owner_id == actor.user_id:
            raise AuthorizationError("Owners cannot request a visit to their own PG.")

        if request_in.room_id is not None:
            room = db.get(Room, request_in.room_id)
            if room is None or room.pg_id != pg.id:
                raise NotFoundError(f"Room with ID {request_in.room_id} not found in this PG.")

        if self.get_active(db, actor.user_id, pg.id) is not None:
            raise DuplicateActiveRequestError(DUPLICATE_VISIT_MESSAGE)

        visit = VisitRequest(
            tenant_user_id=actor.user_id,
            pg_id=pg.id,
            owner_id=pg.owner_id,
            room_id=request_in.room_id,
            requested_date=request_in.requested_date,
            requested_time=request_in.requested_time,
            notes=request_in.notes,
        )
        visit.set_status(VisitRequestStatus.PENDING)

        db.add(visit)
        try:
            db.commit()
        except IntegrityError as e:
            # a concurrent request claimed the same active slot
            db.rollback()
            if self.get_active(db, actor.user_id, pg.id) is not None:
                raise DuplicateActiveRequestError(DUPLICATE_VISIT_MESSAGE) from e
            raise
        db.refresh(visit)
        logger.info("Visit request %s created by user %s for PG %s", visit.id, actor.user_id, pg.id)
        return visit

    def get_active(self, db: Session, tenant_user_id: int, pg_id: int) -> Optional[VisitRequest]:
        return (
            db.query(VisitRequest)
            .filter(VisitRequest.active_slot == active_slot_key(tenant_user_id, pg_id))
            .first()
        )

    def approve(self, db: Session, actor: ActorContext, visit_id: int) -> VisitRequest:
        visit = self.get_or_raise(db, visit_id)
        self._ensure_owner(db, visit, actor, "approve this visit")
        self._ensure_status(visit, "approved", VisitRequestStatus.PENDING)

        visit.confirmed_date = visit.requested_date
        visit.confirmed_time = visit.requested_time
        return self._transition(db, visit, VisitRequestStatus.APPROVED)

    def reschedule(
        self, db: Session, actor: ActorContext, visit_id: int, reschedule_in: VisitReschedule
    ) -> VisitRequest:
        visit = self.get_or_raise(db, visit_id)
        if actor.is_owner:
            self._ensure_owner(db, visit, actor, "reschedule this visit")
            rescheduled_by = RescheduleActor.OWNER
        else:
            self._ensure_requester(visit, actor)
            rescheduled_by = RescheduleActor.TENANT
        self._ensure_status(
            visit, "rescheduled", VisitRequestStatus.PENDING, VisitRequestStatus.APPROVED
        )

        # confirmed slot stays untouched until the counter-party accepts
        visit.rescheduled_date = reschedule_in.new_date
        visit.rescheduled_time = reschedule_in.new_time
        visit.rescheduled_by = rescheduled_by.value
        if reschedule_in.owner_notes is not None and rescheduled_by == RescheduleActor.OWNER:
            visit.owner_notes = reschedule_in.owner_notes
        return self._transition(db, visit, VisitRequestStatus.RESCHEDULED)

    def accept_reschedule(self, db: Session, actor: ActorContext, visit_id: int) -> VisitRequest:
        visit = self.get_or_raise(db, visit_id)
        if visit.rescheduled_by == RescheduleActor.TENANT.value:
            self._ensure_owner(db, visit, actor, "accept this reschedule")
        else:
            self._ensure_requester(visit, actor)
        self._ensure_status(visit, "accepted", VisitRequestStatus.RESCHEDULED)
        if visit.rescheduled_date is None or visit.rescheduled_time is None:
            raise InvalidStateError("This visit has no proposed slot to accept.")

        visit.confirmed_date = visit.rescheduled_date
        visit.confirmed_time = visit.rescheduled_time
        return self._transition(db, visit, VisitRequestStatus.APPROVED)

    def complete(self, db: Session, actor: ActorContext, visit_id: int) -> VisitRequest:
        visit = self.get_or_raise(db, visit_id)
        self._ensure_requester(visit, actor)
        self._ensure_status(visit, "completed", VisitRequestStatus.APPROVED)

        visit_date = visit.confirmed_date or visit.requested_date
        if self.settings.enforce_visit_date_on_complete and visit_date > self.today():
            raise InvalidStateError(
                f"This visit is scheduled for {visit_date.isoformat()} and cannot be completed yet."
            )
        return self._transition(db, visit, VisitRequestStatus.COMPLETED)

    def cancel(self, db: Session, actor: ActorContext, visit_id: int) -> VisitRequest:
        visit = self.get_or_raise(db, visit_id)
        if actor.is_owner:
            self._ensure_owner(db, visit, actor, "cancel this visit")
        else:
            self._ensure_requester(visit, actor)
        self._ensure_status(
            visit,
            "cancelled",
            *ACTIVE_VISIT_STATUSES,
            VisitRequestStatus.COMPLETED,
        )
        return self._transition(db, visit, VisitRequestStatus.CANCELLED)

    def cancel_for_room(self, db: Session, room_id: int) -> int:
        """Cancel every active visit pointing at a room about to be removed. Caller commits."""
        cancelled = 0
        for visit in db.query(VisitRequest).filter(VisitRequest.room_id == room_id).all():
            if visit.status in [s.value for s in ACTIVE_VISIT_STATUSES]:
                visit.set_status(VisitRequestStatus.CANCELLED)
                cancelled += 1
            visit.room_id = None
        return cancelled

    def today(self) -> date:
        return self.clock().date()

    def _transition(self, db: Session, visit: VisitRequest, status: VisitRequestStatus) -> VisitRequest:
        previous = visit.status
        visit.set_status(status)
        db.commit()
        db.refresh(visit)
        logger.info("Visit request %s: %s -> %s", visit.id, previous, status.value)
        return visit

    def _ensure_status(self, visit: VisitRequest, action: str, *allowed: VisitRequestStatus):
        if visit.status not in [s.value for s in allowed]:
            logger.warning(
                "Visit request %s cannot be %s from status %s", visit.id, action, visit.status
            )
            raise InvalidStateError(
                f"This visit request is {visit.status} and cannot be {action}."
            )

    def _ensure_owner(self, db: Session, visit: VisitRequest, actor: ActorContext, action: str):
        pg = self.pg_service.get_pg_by_id(db, visit.pg_id)
        ensure_pg_owner(pg, actor, action)

    def _ensure_requester(self, visit: VisitRequest, actor: ActorContext):
        if not actor.is_tenant_side or visit.tenant_user_id != actor.user_id:
            raise AuthorizationError("Only the tenant who made this visit request can do that.")
