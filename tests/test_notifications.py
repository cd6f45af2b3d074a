import asyncio
import logging
import threading

from config import WorkflowSettings
from database.models import Notification
from enums.notification_type import NotificationType
from enums.welcome_template import WelcomeTemplate
from services.notification_service import NotificationService
from services.onboarding_request_service import OnboardingRequestService
from services.workflow_notifier import WorkflowNotifier, welcome_details

from conftest import FakeEmailService, actor_for, auth_headers


class BrokenSession:
    def add(self, obj):
        pass

    def commit(self):
        raise RuntimeError("notifications table is gone")

    def rollback(self):
        pass

    def close(self):
        pass


class SlowEmailService(FakeEmailService):
    async def send_tenant_welcome_email(self, **kwargs):
        await asyncio.sleep(5)


def details(**overrides):
    data = {
        "request_id": 1,
        "user_id": 1,
        "email": "arjun@example.com",
        "name": "Arjun",
        "pg_name": "Sunrise PG",
        "room_number": "101",
        "monthly_rent": 8000.0,
        "template": WelcomeTemplate.WELCOME.value,
        "temporary_password": None,
    }
    data.update(overrides)
    return data


def test_notify_stores_a_row(db, applicant):
    assert NotificationService().notify(
        applicant.id, "Visit approved", "See you at 10:30", NotificationType.VISIT_APPROVED, 7
    )

    row = db.query(Notification).one()
    assert row.user_id == applicant.id
    assert row.reference_id == 7
    assert row.is_read is False


def test_notify_failure_is_logged_not_raised(caplog):
    service = NotificationService(session_factory=BrokenSession)

    with caplog.at_level(logging.ERROR):
        ok = service.notify(1, "t", "m", NotificationType.ONBOARDING_REJECTED)

    assert ok is False
    assert "Failed to store onboarding_rejected notification" in caplog.text


def test_welcome_template_dispatch():
    fake = FakeEmailService()
    notifier = WorkflowNotifier(email_service=fake)

    asyncio.run(notifier.send_welcome_email(details()))
    asyncio.run(
        notifier.send_welcome_email(
            details(template=WelcomeTemplate.WITH_PASSWORD.value, temporary_password="Tmp12345ab")
        )
    )
    asyncio.run(notifier.send_welcome_email(details(template=WelcomeTemplate.EXISTING_USER.value)))

    assert [template for template, _ in fake.sent] == ["welcome", "with_password", "existing_user"]
    assert fake.sent[1][1]["temporary_password"] == "Tmp12345ab"
    assert "temporary_password" not in fake.sent[2][1]


def test_email_failure_is_swallowed(caplog):
    notifier = WorkflowNotifier(email_service=FakeEmailService(fail=True))

    with caplog.at_level(logging.ERROR):
        assert asyncio.run(notifier.send_welcome_email(details())) is False
    assert "arjun@example.com" in caplog.text


def test_email_is_bounded_by_timeout():
    notifier = WorkflowNotifier(
        email_service=SlowEmailService(),
        settings=WorkflowSettings(email_timeout_seconds=0.05),
    )

    assert asyncio.run(notifier.send_welcome_email(details())) is False


def test_welcome_details_come_from_the_conversion(db, owner, make_user, pg, room, make_onboarding):
    user = make_user(with_password=False)
    request = make_onboarding(user, pg, room, email="contact@example.com")

    result = OnboardingRequestService().approve(db, actor_for(owner), request.id)
    payload = welcome_details(result)

    assert payload["email"] == user.email
    assert payload["template"] == WelcomeTemplate.WITH_PASSWORD.value
    assert payload["temporary_password"] == result.temporary_password
    assert payload["room_number"] == room.room_number
    assert payload["monthly_rent"] == room.monthly_rent


def test_failed_email_does_not_undo_approval(client, owner, applicant, pg, room, make_onboarding, fake_email):
    fake_email.fail = True
    request = make_onboarding(applicant, pg, room)

    response = client.post(f"/onboarding-requests/{request.id}/approve", headers=auth_headers(owner))

    assert response.status_code == 200
    assert response.json()["data"]["onboarding_request"]["status"] == "approved"
    assert fake_email.sent == []


class ThreadRecordingNotifications(NotificationService):
    def __init__(self):
        self.threads = []

    def notify(self, user_id, title, message, type, reference_id=None):
        self.threads.append(threading.get_ident())
        return True


def test_onboarding_approved_stores_notification_off_the_event_loop():
    notifications = ThreadRecordingNotifications()
    fake = FakeEmailService()
    notifier = WorkflowNotifier(notification_service=notifications, email_service=fake)

    async def approve_and_note_loop_thread():
        loop_thread = threading.get_ident()
        await notifier.onboarding_approved(details())
        return loop_thread

    loop_thread = asyncio.run(approve_and_note_loop_thread())

    assert len(notifications.threads) == 1
    assert notifications.threads[0] != loop_thread
    assert [template for template, _ in fake.sent] == ["welcome"]
