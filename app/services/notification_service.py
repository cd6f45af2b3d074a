import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from database.init import SessionLocal
from database.models import Notification
from enums.notification_type import NotificationType

logger = logging.getLogger(__name__)


class NotificationService:
    """In-app notifications. Writes in its own session so a failure never touches the caller's work."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal.session_factory

    def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        type: NotificationType,
        reference_id: Optional[int] = None,
    ) -> bool:
        db = self.session_factory()
        try:
            db.add(
                Notification(
                    user_id=user_id,
                    title=title,
                    message=message,
                    type=type.value,
                    reference_id=reference_id,
                )
            )
            db.commit()
            return True
        except Exception:
            db.rollback()
            logger.exception("Failed to store %s notification for user %s", type.value, user_id)
            return False
        finally:
            db.close()

    def get_for_user(self, db: Session, user_id: int, unread_only: bool = False) -> List[Notification]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return query.order_by(Notification.id.desc()).all()
