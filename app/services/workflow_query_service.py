from typing import List, Optional

from sqlalchemy.orm import Session

from database.models import OnboardingRequest, Pg, Room, Tenant, User, VisitRequest
from database.models.visit_request_model import active_slot_key
from enums.tenant_status import TenantStatus
from schemas.onboarding_request_response import OnboardingRequestListItem
from schemas.visit_request_response import VisitRequestListItem
from schemas.workflow_schema import WorkflowListing
from services.exceptions import WorkflowValidationError

ORDER_RECENT = "recent"
ORDER_REQUESTED_DATE = "requested_date"
ORDERINGS = (ORDER_RECENT, ORDER_REQUESTED_DATE)


class WorkflowQueryService:
    """
    Read side of the workflow: what a tenant or an owner sees as pending work.

    Activeness is read from the same ``active_slot`` column the write path
    guards with a unique constraint, so both sides always agree.
    """

    def list_active_for_tenant(
        self, db: Session, tenant_user_id: int, order_by: str = ORDER_RECENT, include_inactive: bool = False
    ) -> WorkflowListing:
        self._check_order(order_by)

        visit_query = self._visit_rows(db).filter(VisitRequest.tenant_user_id == tenant_user_id)
        onboarding_query = self._onboarding_rows(db).filter(
            OnboardingRequest.tenant_user_id == tenant_user_id
        )
        if not include_inactive:
            visit_query = visit_query.filter(VisitRequest.active_slot.isnot(None))
            onboarding_query = onboarding_query.filter(OnboardingRequest.active_slot.isnot(None))

        if order_by == ORDER_REQUESTED_DATE:
            visit_query = visit_query.order_by(
                VisitRequest.requested_date.asc(), VisitRequest.requested_time.asc(), VisitRequest.id.asc()
            )
            onboarding_query = onboarding_query.order_by(OnboardingRequest.id.asc())
        else:
            visit_query = visit_query.order_by(VisitRequest.created_at.desc(), VisitRequest.id.desc())
            onboarding_query = onboarding_query.order_by(
                OnboardingRequest.created_at.desc(), OnboardingRequest.id.desc()
            )

        return WorkflowListing(
            visit_requests=[self._visit_item(row) for row in visit_query.all()],
            onboarding_requests=[self._onboarding_item(row) for row in onboarding_query.all()],
        )

    def list_for_owner(self, db: Session, owner_id: int, pg_id: Optional[int] = None) -> WorkflowListing:
        return WorkflowListing(
            visit_requests=self.visit_requests_for_owner(db, owner_id, pg_id),
            onboarding_requests=self.onboarding_requests_for_owner(db, owner_id, pg_id),
        )

    def visit_requests_for_owner(
        self, db: Session, owner_id: int, pg_id: Optional[int] = None
    ) -> List[VisitRequestListItem]:
        query = self._visit_rows(db).filter(VisitRequest.owner_id == owner_id)
        if pg_id is not None:
            query = query.filter(VisitRequest.pg_id == pg_id)
        query = query.order_by(VisitRequest.created_at.desc(), VisitRequest.id.desc())
        return [self._visit_item(row) for row in query.all()]

    def visit_requests_for_tenant(self, db: Session, tenant_user_id: int) -> List[VisitRequestListItem]:
        query = (
            self._visit_rows(db)
            .filter(VisitRequest.tenant_user_id == tenant_user_id)
            .order_by(VisitRequest.created_at.desc(), VisitRequest.id.desc())
        )
        return [self._visit_item(row) for row in query.all()]

    def onboarding_requests_for_owner(
        self, db: Session, owner_id: int, pg_id: Optional[int] = None
    ) -> List[OnboardingRequestListItem]:
        query = self._onboarding_rows(db).filter(OnboardingRequest.owner_id == owner_id)
        if pg_id is not None:
            query = query.filter(OnboardingRequest.pg_id == pg_id)
        query = query.order_by(OnboardingRequest.created_at.desc(), OnboardingRequest.id.desc())
        return [self._onboarding_item(row) for row in query.all()]

    def has_active_onboarding(self, db: Session, tenant_user_id: int, pg_id: int) -> Optional[OnboardingRequest]:
        return (
            db.query(OnboardingRequest)
            .filter(OnboardingRequest.active_slot == active_slot_key(tenant_user_id, pg_id))
            .first()
        )

    def has_active_visit(self, db: Session, tenant_user_id: int, pg_id: int) -> Optional[VisitRequest]:
        return (
            db.query(VisitRequest)
            .filter(VisitRequest.active_slot == active_slot_key(tenant_user_id, pg_id))
            .first()
        )

    def current_tenancy(self, db: Session, user_id: int) -> Optional[int]:
        """PG id the user currently lives in, if any."""
        tenant = (
            db.query(Tenant)
            .filter(
                Tenant.user_id == user_id,
                Tenant.status == TenantStatus.ACTIVE.value,
                Tenant.room_id.isnot(None),
            )
            .order_by(Tenant.id.desc())
            .first()
        )
        return tenant.pg_id if tenant else None

    def _visit_rows(self, db: Session):
        return (
            db.query(VisitRequest, Pg.name, Pg.address, Room.room_number, User.name, User.email)
            .outerjoin(Pg, VisitRequest.pg_id == Pg.id)
            .outerjoin(Room, VisitRequest.room_id == Room.id)
            .outerjoin(User, VisitRequest.tenant_user_id == User.id)
        )

    def _onboarding_rows(self, db: Session):
        return (
            db.query(OnboardingRequest, Pg.name, Pg.address, Room.room_number)
            .outerjoin(Pg, OnboardingRequest.pg_id == Pg.id)
            .outerjoin(Room, OnboardingRequest.room_id == Room.id)
        )

    def _visit_item(self, row) -> VisitRequestListItem:
        visit, pg_name, pg_address, room_number, tenant_name, tenant_email = row
        item = VisitRequestListItem.model_validate(visit)
        item.pg_name = pg_name
        item.pg_address = pg_address
        item.room_number = room_number
        item.tenant_name = tenant_name
        item.tenant_email = tenant_email
        return item

    def _onboarding_item(self, row) -> OnboardingRequestListItem:
        request, pg_name, pg_address, room_number = row
        item = OnboardingRequestListItem.model_validate(request)
        item.pg_name = pg_name
        item.pg_address = pg_address
        item.room_number = room_number
        return item

    def _check_order(self, order_by: str):
        if order_by not in ORDERINGS:
            raise WorkflowValidationError(
                f"order_by must be one of {', '.join(ORDERINGS)}."
            )
