import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from database.models import Tenant, TenantHistory
from enums.tenant_status import TenantStatus
from schemas.actor_schema import ActorContext
from schemas.tenant_schema import TenantFeedback
from services.base_service import BaseService
from services.exceptions import AuthorizationError, InvalidStateError
from services.onboarding_request_service import OnboardingRequestService
from services.room_occupancy_service import RoomOccupancyLedger
from services.visit_request_service import utc_now

logger = logging.getLogger(__name__)


class TenantService(BaseService):
    label = "Tenant"

    def __init__(
        self,
        ledger: Optional[RoomOccupancyLedger] = None,
        onboarding_request_service: Optional[OnboardingRequestService] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(Tenant)
        self.ledger = ledger or RoomOccupancyLedger()
        self.onboarding_request_service = onboarding_request_service or OnboardingRequestService()
        self.clock = clock

    def get_by_owner(self, db: Session, owner_id: int, pg_id: Optional[int] = None) -> List[Tenant]:
        query = db.query(Tenant).filter(Tenant.owner_id == owner_id)
        if pg_id is not None:
            query = query.filter(Tenant.pg_id == pg_id)
        return query.order_by(Tenant.id).all()

    def get_history(self, db: Session, tenant_user_id: int) -> List[TenantHistory]:
        return (
            db.query(TenantHistory)
            .filter(TenantHistory.tenant_user_id == tenant_user_id)
            .order_by(TenantHistory.move_out_date.desc(), TenantHistory.id.desc())
            .all()
        )

    def remove_tenant(
        self,
        db: Session,
        actor: ActorContext,
        tenant_id: int,
        feedback: Optional[TenantFeedback] = None,
    ) -> Tenant:
        """
        Move a tenant out of their room.

        The stay is written to the tenant history in the same transaction.
        The record is kept as ``vacated``; the user account reverts to
        ``applicant`` unless it still holds another room.
        """
        tenant = self.get_or_raise(db, tenant_id)
        if not actor.is_owner or tenant.owner_id != actor.user_id:
            raise AuthorizationError("Only the owner of this tenant can remove them.")
        if tenant.status == TenantStatus.VACATED.value:
            raise InvalidStateError("This tenant has already vacated.")

        try:
            if tenant.user_id is not None and tenant.pg_id is not None:
                db.add(self._history_entry(db, tenant, actor, feedback))
            if tenant.room_id is not None:
                self.ledger.release_tenant(db, tenant.room_id, tenant.id)
            if tenant.user_id is not None and tenant.pg_id is not None:
                self.onboarding_request_service.release_slot(db, tenant.user_id, tenant.pg_id)
            tenant.status = TenantStatus.VACATED.value
            tenant.room_id = None
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(tenant)
        logger.info("Tenant %s vacated by owner %s", tenant.id, actor.user_id)
        return tenant

    def _history_entry(
        self, db: Session, tenant: Tenant, actor: ActorContext, feedback: Optional[TenantFeedback]
    ) -> TenantHistory:
        now = self.clock()
        feedback = feedback or TenantFeedback()
        # a reused tenant record is older than the current stay
        approved = self.onboarding_request_service.get_active(db, tenant.user_id, tenant.pg_id)
        move_in = approved.approved_at if approved is not None and approved.approved_at else tenant.created_at
        return TenantHistory(
            tenant_user_id=tenant.user_id,
            tenant_id=tenant.id,
            pg_id=tenant.pg_id,
            room_id=tenant.room_id,
            room_number=tenant.room_number,
            move_in_date=move_in or now,
            move_out_date=now,
            owner_feedback=feedback.owner_feedback,
            rating=feedback.rating,
            behavior_tags=list(feedback.behavior_tags),
            recorded_by_owner_id=actor.user_id,
        )
