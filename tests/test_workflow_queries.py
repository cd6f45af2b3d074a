from datetime import date

import pytest

from enums.onboarding_request_status import OnboardingRequestStatus
from enums.user_type import UserType
from enums.visit_request_status import VisitRequestStatus
from database.models import Pg
from services.exceptions import WorkflowValidationError
from services.onboarding_request_service import OnboardingRequestService
from services.workflow_query_service import WorkflowQueryService

from conftest import actor_for

queries = WorkflowQueryService()


@pytest.fixture
def second_pg(db, owner):
    pg = Pg(owner_id=owner.id, name="Lakeview PG", address="44 Lake Road")
    db.add(pg)
    db.commit()
    db.refresh(pg)
    return pg


def test_tenant_listing_shows_only_active_requests(
    db, applicant, pg, second_pg, room, make_visit, make_onboarding
):
    make_visit(applicant, pg, status=VisitRequestStatus.CANCELLED)
    active_visit = make_visit(applicant, second_pg, status=VisitRequestStatus.APPROVED)
    request = make_onboarding(applicant, pg, room)

    listing = queries.list_active_for_tenant(db, applicant.id)

    assert [v.id for v in listing.visit_requests] == [active_visit.id]
    assert listing.visit_requests[0].pg_name == "Lakeview PG"
    assert listing.visit_requests[0].pg_address == "44 Lake Road"
    assert [o.id for o in listing.onboarding_requests] == [request.id]
    assert listing.onboarding_requests[0].room_number == room.room_number

    everything = queries.list_active_for_tenant(db, applicant.id, include_inactive=True)
    assert len(everything.visit_requests) == 2


def test_tenant_listing_ordering(db, applicant, pg, second_pg, make_visit):
    later = make_visit(applicant, pg, requested_date=date(2026, 5, 2))
    sooner = make_visit(applicant, second_pg, requested_date=date(2026, 4, 20))

    recent = queries.list_active_for_tenant(db, applicant.id, order_by="recent")
    by_date = queries.list_active_for_tenant(db, applicant.id, order_by="requested_date")

    assert [v.id for v in recent.visit_requests] == [sooner.id, later.id]
    assert [v.id for v in by_date.visit_requests] == [sooner.id, later.id]

    with pytest.raises(WorkflowValidationError):
        queries.list_active_for_tenant(db, applicant.id, order_by="rent")


def test_owner_listing_is_scoped_to_owner_and_pg(
    db, owner, make_user, applicant, pg, second_pg, make_visit
):
    other_owner = make_user(UserType.OWNER)
    foreign_pg = Pg(owner_id=other_owner.id, name="Elsewhere", address="9 Far Lane")
    db.add(foreign_pg)
    db.commit()
    mine = make_visit(applicant, pg)
    mine_elsewhere = make_visit(applicant, second_pg)
    make_visit(applicant, foreign_pg)

    all_mine = queries.list_for_owner(db, owner.id)
    selected = queries.list_for_owner(db, owner.id, pg_id=pg.id)

    assert {v.id for v in all_mine.visit_requests} == {mine.id, mine_elsewhere.id}
    assert [v.id for v in selected.visit_requests] == [mine.id]
    assert selected.visit_requests[0].tenant_name == applicant.name
    assert selected.visit_requests[0].tenant_email == applicant.email


def test_has_active_matches_the_write_side(db, owner, applicant, pg, room, make_visit, make_onboarding):
    assert queries.has_active_visit(db, applicant.id, pg.id) is None
    assert queries.has_active_onboarding(db, applicant.id, pg.id) is None

    visit = make_visit(applicant, pg)
    request = make_onboarding(applicant, pg, room)
    assert queries.has_active_visit(db, applicant.id, pg.id).id == visit.id
    assert queries.has_active_onboarding(db, applicant.id, pg.id).id == request.id

    OnboardingRequestService().reject(db, actor_for(owner), request.id, "No vacancy for now")
    assert queries.has_active_onboarding(db, applicant.id, pg.id) is None


def test_approved_onboarding_stays_active(db, applicant, pg, room, make_onboarding):
    request = make_onboarding(applicant, pg, room, status=OnboardingRequestStatus.APPROVED)

    assert queries.has_active_onboarding(db, applicant.id, pg.id).id == request.id


def test_current_tenancy(db, owner, applicant, pg, room, make_onboarding):
    assert queries.current_tenancy(db, applicant.id) is None

    OnboardingRequestService().approve(db, actor_for(owner), make_onboarding(applicant, pg, room).id)

    assert queries.current_tenancy(db, applicant.id) == pg.id
