import os
import tempfile

TEST_DB_DIR = tempfile.mkdtemp(prefix="hostelmate-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(TEST_DB_DIR, "test.db")

import pytest
from datetime import date, datetime, timedelta, timezone
from fastapi.testclient import TestClient

from database.init import Base, SessionLocal, engine
from database.models import OnboardingRequest, Pg, Room, Tenant, User, VisitRequest
from enums.onboarding_request_status import OnboardingRequestStatus
from enums.room_status import RoomStatus
from enums.user_type import UserType
from enums.visit_request_status import VisitRequestStatus
from schemas.actor_schema import ActorContext
from utils.dependencies import create_access_token, hash_password

PASSWORD = "secret123"
# one bcrypt round per test run is plenty
HASHED_PASSWORD = hash_password(PASSWORD)


class FakeEmailService:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def _record(self, template, **kwargs):
        if self.fail:
            raise ConnectionError("smtp server unreachable")
        self.sent.append((template, kwargs))

    async def send_tenant_welcome_email(self, **kwargs):
        await self._record("welcome", **kwargs)

    async def send_tenant_onboarding_with_password_email(self, **kwargs):
        await self._record("with_password", **kwargs)

    async def send_tenant_onboarding_existing_user_email(self, **kwargs):
        await self._record("existing_user", **kwargs)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    SessionLocal.remove()


@pytest.fixture
def db():
    session = SessionLocal.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(user_type=UserType.APPLICANT, name=None, with_password=True):
        counter["n"] += 1
        user = User(
            name=name or f"User {counter['n']}",
            email=f"user{counter['n']}@example.com",
            phone="9876543210",
            hashed_password=HASHED_PASSWORD if with_password else None,
            user_type=user_type.value,
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def owner(make_user):
    return make_user(UserType.OWNER, name="Olivia Owner")


@pytest.fixture
def applicant(make_user):
    return make_user(UserType.APPLICANT, name="Arjun Applicant")


@pytest.fixture
def pg(db, owner):
    pg = Pg(owner_id=owner.id, name="Sunrise PG", address="12 MG Road", city="Pune")
    db.add(pg)
    db.commit()
    db.refresh(pg)
    return pg


@pytest.fixture
def make_room(db):
    def _make_room(pg, room_number="101", sharing=2, monthly_rent=8000.0, tenant_ids=None):
        tenant_ids = list(tenant_ids or [])
        status = RoomStatus.VACANT
        if tenant_ids:
            status = (
                RoomStatus.FULLY_OCCUPIED
                if len(tenant_ids) == sharing
                else RoomStatus.PARTIALLY_OCCUPIED
            )
        room = Room(
            pg_id=pg.id,
            owner_id=pg.owner_id,
            room_number=room_number,
            sharing=sharing,
            monthly_rent=monthly_rent,
            tenant_ids=tenant_ids,
            status=status.value,
        )
        db.add(room)
        db.commit()
        db.refresh(room)
        return room

    return _make_room


@pytest.fixture
def room(make_room, pg):
    return make_room(pg)


@pytest.fixture
def make_tenant(db):
    def _make_tenant(owner, pg=None, user=None, name="Existing Tenant", room_id=None):
        tenant = Tenant(
            owner_id=owner.id,
            user_id=user.id if user else None,
            pg_id=pg.id if pg else None,
            room_id=room_id,
            name=name,
            email=user.email if user else None,
        )
        db.add(tenant)
        db.commit()
        db.refresh(tenant)
        return tenant

    return _make_tenant


@pytest.fixture
def make_visit(db):
    def _make_visit(tenant_user, pg, status=VisitRequestStatus.PENDING, requested_date=None, room=None):
        visit = VisitRequest(
            tenant_user_id=tenant_user.id,
            pg_id=pg.id,
            owner_id=pg.owner_id,
            room_id=room.id if room else None,
            requested_date=requested_date or date.today() - timedelta(days=1),
            requested_time="10:30",
        )
        visit.set_status(status)
        if status in (VisitRequestStatus.APPROVED, VisitRequestStatus.COMPLETED):
            visit.confirmed_date = visit.requested_date
            visit.confirmed_time = visit.requested_time
        db.add(visit)
        db.commit()
        db.refresh(visit)
        return visit

    return _make_visit


@pytest.fixture
def make_onboarding(db):
    def _make_onboarding(tenant_user, pg, room, status=OnboardingRequestStatus.PENDING, **profile):
        request = OnboardingRequest(
            tenant_user_id=tenant_user.id,
            pg_id=pg.id,
            room_id=room.id,
            owner_id=pg.owner_id,
            name=profile.pop("name", tenant_user.name),
            email=profile.pop("email", tenant_user.email),
            phone=profile.pop("phone", "9876543210"),
            monthly_rent=profile.pop("monthly_rent", None),
            **profile,
        )
        request.set_status(status)
        db.add(request)
        db.commit()
        db.refresh(request)
        return request

    return _make_onboarding


def actor_for(user, selected_pg_id=None) -> ActorContext:
    return ActorContext(
        user_id=user.id, role=UserType(user.user_type), selected_pg_id=selected_pg_id
    )


def auth_headers(user, selected_pg_id=None) -> dict:
    headers = {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}
    if selected_pg_id is not None:
        headers["X-Selected-Pg-Id"] = str(selected_pg_id)
    return headers


class FixedClock:
    def __init__(self, now: datetime = None):
        self.now = now or datetime(2026, 3, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def fake_email():
    from routes import onboarding_request_routes

    fake = FakeEmailService()
    onboarding_request_routes.notifier.email_service = fake
    yield fake
    onboarding_request_routes.notifier.email_service = None


@pytest.fixture
def client(fake_email):
    from main import app

    with TestClient(app) as test_client:
        yield test_client
