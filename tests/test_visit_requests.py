from datetime import date, datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from config import WorkflowSettings
from database.models import VisitRequest
from enums.reschedule_actor import RescheduleActor
from enums.user_type import UserType
from enums.visit_request_status import VisitRequestStatus
from schemas.visit_request_schema import VisitRequestCreate, VisitReschedule
from services.exceptions import (
    AuthorizationError,
    DuplicateActiveRequestError,
    InvalidStateError,
    NotFoundError,
)
from services.visit_request_service import VisitRequestService

from conftest import FixedClock, actor_for

TODAY = date(2026, 3, 15)
clock = FixedClock(datetime(2026, 3, 15, 9, 0, tzinfo=timezone.utc))
service = VisitRequestService(clock=clock)


def visit_payload(pg, **overrides):
    data = {"pg_id": pg.id, "requested_date": TODAY, "requested_time": "11:00"}
    data.update(overrides)
    return VisitRequestCreate(**data)


def test_create_denormalizes_owner_and_starts_pending(db, applicant, pg, room):
    visit = service.create(db, actor_for(applicant), visit_payload(pg, room_id=room.id, notes="Evening works too"))

    assert visit.status == VisitRequestStatus.PENDING.value
    assert visit.owner_id == pg.owner_id
    assert visit.room_id == room.id
    assert visit.confirmed_date is None
    assert service.get_active(db, applicant.id, pg.id).id == visit.id


def test_create_for_missing_pg(db, applicant):
    with pytest.raises(NotFoundError):
        service.create(
            db,
            actor_for(applicant),
            VisitRequestCreate(pg_id=404, requested_date=TODAY, requested_time="11:00"),
        )


def test_create_with_room_of_other_pg(db, applicant, owner, pg):
    from database.models import Pg, Room

    other_pg = Pg(owner_id=owner.id, name="Moonlight PG", address="7 Park Street")
    db.add(other_pg)
    db.commit()
    foreign_room = Room(
        pg_id=other_pg.id, owner_id=owner.id, room_number="1", sharing=1,
        monthly_rent=5000, tenant_ids=[], status="vacant",
    )
    db.add(foreign_room)
    db.commit()

    with pytest.raises(NotFoundError):
        service.create(db, actor_for(applicant), visit_payload(pg, room_id=foreign_room.id))


def test_owner_cannot_request_a_visit(db, owner, pg):
    with pytest.raises(AuthorizationError):
        service.create(db, actor_for(owner), visit_payload(pg))


def test_second_active_request_for_same_pg_is_refused(db, applicant, pg):
    service.create(db, actor_for(applicant), visit_payload(pg))

    with pytest.raises(DuplicateActiveRequestError) as exc_info:
        service.create(db, actor_for(applicant), visit_payload(pg, requested_time="15:00"))
    assert exc_info.value.message == "You already have a pending visit request for this property."


def test_new_request_allowed_after_cancel(db, applicant, pg):
    first = service.create(db, actor_for(applicant), visit_payload(pg))
    service.cancel(db, actor_for(applicant), first.id)

    second = service.create(db, actor_for(applicant), visit_payload(pg))

    assert second.id != first.id
    assert db.query(VisitRequest).count() == 2


def test_active_slot_is_unique_in_the_database(db, applicant, pg, make_visit):
    make_visit(applicant, pg)
    duplicate = VisitRequest(
        tenant_user_id=applicant.id,
        pg_id=pg.id,
        owner_id=pg.owner_id,
        requested_date=TODAY,
        requested_time="12:00",
    )
    duplicate.set_status(VisitRequestStatus.PENDING)
    db.add(duplicate)

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_completed_and_cancelled_do_not_hold_the_slot(db, applicant, pg, make_visit):
    make_visit(applicant, pg, status=VisitRequestStatus.COMPLETED)
    make_visit(applicant, pg, status=VisitRequestStatus.CANCELLED)

    assert service.get_active(db, applicant.id, pg.id) is None


def test_approve_copies_requested_slot(db, owner, applicant, pg, make_visit):
    visit = make_visit(applicant, pg, requested_date=TODAY)

    visit = service.approve(db, actor_for(owner), visit.id)

    assert visit.status == VisitRequestStatus.APPROVED.value
    assert visit.confirmed_date == visit.requested_date
    assert visit.confirmed_time == visit.requested_time


def test_only_the_pg_owner_can_approve(db, make_user, applicant, pg, make_visit):
    other_owner = make_user(UserType.OWNER)
    visit = make_visit(applicant, pg)

    with pytest.raises(AuthorizationError):
        service.approve(db, actor_for(other_owner), visit.id)
    with pytest.raises(AuthorizationError):
        service.approve(db, actor_for(applicant), visit.id)


def test_approve_missing_visit(db, owner):
    with pytest.raises(NotFoundError):
        service.approve(db, actor_for(owner), 12345)


def test_owner_reschedule_keeps_confirmed_slot_until_accepted(db, owner, applicant, pg, make_visit):
    visit = make_visit(applicant, pg, status=VisitRequestStatus.APPROVED, requested_date=TODAY)

    visit = service.reschedule(
        db,
        actor_for(owner),
        visit.id,
        VisitReschedule(new_date=date(2026, 3, 20), new_time="16:30", owner_notes="Warden is away"),
    )
    assert visit.status == VisitRequestStatus.RESCHEDULED.value
    assert visit.rescheduled_by == RescheduleActor.OWNER.value
    assert visit.confirmed_date == TODAY
    assert visit.owner_notes == "Warden is away"

    visit = service.accept_reschedule(db, actor_for(applicant), visit.id)
    assert visit.status == VisitRequestStatus.APPROVED.value
    assert visit.confirmed_date == date(2026, 3, 20)
    assert visit.confirmed_time == "16:30"


def test_tenant_reschedule_is_accepted_by_owner(db, owner, applicant, pg, make_visit):
    visit = make_visit(applicant, pg)

    visit = service.reschedule(
        db, actor_for(applicant), visit.id, VisitReschedule(new_date=date(2026, 3, 18), new_time="09:15")
    )
    assert visit.rescheduled_by == RescheduleActor.TENANT.value

    with pytest.raises(AuthorizationError):
        service.accept_reschedule(db, actor_for(applicant), visit.id)

    visit = service.accept_reschedule(db, actor_for(owner), visit.id)
    assert visit.status == VisitRequestStatus.APPROVED.value
    assert visit.confirmed_date == date(2026, 3, 18)


def test_complete_after_the_visit_date(db, applicant, pg, make_visit):
    visit = make_visit(applicant, pg, status=VisitRequestStatus.APPROVED, requested_date=date(2026, 3, 14))

    visit = service.complete(db, actor_for(applicant), visit.id)

    assert visit.status == VisitRequestStatus.COMPLETED.value
    assert service.get_active(db, applicant.id, pg.id) is None


def test_complete_on_the_visit_day(db, applicant, pg, make_visit):
    visit = make_visit(applicant, pg, status=VisitRequestStatus.APPROVED, requested_date=TODAY)

    assert service.complete(db, actor_for(applicant), visit.id).status == VisitRequestStatus.COMPLETED.value


def test_complete_before_the_visit_date_is_refused(db, applicant, pg, make_visit):
    visit = make_visit(applicant, pg, status=VisitRequestStatus.APPROVED, requested_date=date(2026, 3, 16))

    with pytest.raises(InvalidStateError):
        service.complete(db, actor_for(applicant), visit.id)

    db.refresh(visit)
    assert visit.status == VisitRequestStatus.APPROVED.value


def test_early_completion_allowed_when_not_enforced(db, applicant, pg, make_visit):
    lenient = VisitRequestService(
        settings=WorkflowSettings(enforce_visit_date_on_complete=False), clock=clock
    )
    visit = make_visit(applicant, pg, status=VisitRequestStatus.APPROVED, requested_date=date(2026, 4, 1))

    assert lenient.complete(db, actor_for(applicant), visit.id).status == VisitRequestStatus.COMPLETED.value


def test_only_the_requester_can_complete(db, make_user, applicant, pg, make_visit):
    other = make_user(UserType.APPLICANT)
    visit = make_visit(applicant, pg, status=VisitRequestStatus.APPROVED)

    with pytest.raises(AuthorizationError):
        service.complete(db, actor_for(other), visit.id)


def test_owner_can_cancel_a_visit_to_their_pg(db, owner, applicant, pg, make_visit):
    visit = make_visit(applicant, pg)

    visit = service.cancel(db, actor_for(owner), visit.id)

    assert visit.status == VisitRequestStatus.CANCELLED.value
    assert visit.active_slot is None


def _drive(db, owner, applicant, visit_id, action):
    if action == "approve":
        return service.approve(db, actor_for(owner), visit_id)
    if action == "reschedule":
        return service.reschedule(
            db, actor_for(owner), visit_id, VisitReschedule(new_date=TODAY, new_time="18:00")
        )
    if action == "accept_reschedule":
        return service.accept_reschedule(db, actor_for(applicant), visit_id)
    if action == "complete":
        return service.complete(db, actor_for(applicant), visit_id)
    return service.cancel(db, actor_for(applicant), visit_id)


ALLOWED = {
    VisitRequestStatus.PENDING: {
        "approve": VisitRequestStatus.APPROVED,
        "reschedule": VisitRequestStatus.RESCHEDULED,
        "cancel": VisitRequestStatus.CANCELLED,
    },
    VisitRequestStatus.APPROVED: {
        "reschedule": VisitRequestStatus.RESCHEDULED,
        "complete": VisitRequestStatus.COMPLETED,
        "cancel": VisitRequestStatus.CANCELLED,
    },
    VisitRequestStatus.RESCHEDULED: {
        "accept_reschedule": VisitRequestStatus.APPROVED,
        "cancel": VisitRequestStatus.CANCELLED,
    },
    VisitRequestStatus.COMPLETED: {
        "cancel": VisitRequestStatus.CANCELLED,
    },
    VisitRequestStatus.CANCELLED: {},
}
ACTIONS = ["approve", "reschedule", "accept_reschedule", "complete", "cancel"]


@pytest.mark.parametrize("start", list(ALLOWED))
@pytest.mark.parametrize("action", ACTIONS)
def test_transition_table(db, owner, applicant, pg, make_visit, start, action):
    visit = make_visit(applicant, pg, status=start, requested_date=TODAY)
    if start == VisitRequestStatus.RESCHEDULED:
        visit.rescheduled_date = TODAY
        visit.rescheduled_time = "17:00"
        visit.rescheduled_by = RescheduleActor.OWNER.value
        db.commit()

    expected = ALLOWED[start].get(action)
    if expected is None:
        with pytest.raises(InvalidStateError):
            _drive(db, owner, applicant, visit.id, action)
        db.refresh(visit)
        assert visit.status == start.value
    else:
        visit = _drive(db, owner, applicant, visit.id, action)
        assert visit.status == expected.value
