import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.models import Room
from enums.room_status import RoomStatus
from schemas.actor_schema import ActorContext
from schemas.room_schema import RoomCreate
from services.base_service import BaseService
from services.exceptions import DuplicateRoomError, InvalidStateError
from services.onboarding_request_service import OnboardingRequestService
from services.pg_service import PgService, ensure_pg_owner
from services.visit_request_service import VisitRequestService

logger = logging.getLogger(__name__)


class RoomService(BaseService):
    label = "Room"

    def __init__(
        self,
        pg_service: Optional[PgService] = None,
        visit_request_service: Optional[VisitRequestService] = None,
        onboarding_request_service: Optional[OnboardingRequestService] = None,
    ):
        super().__init__(Room)
        self.pg_service = pg_service or PgService()
        self.visit_request_service = visit_request_service or VisitRequestService(self.pg_service)
        self.onboarding_request_service = onboarding_request_service or OnboardingRequestService(
            self.pg_service
        )

    def create_room(self, db: Session, actor: ActorContext, pg_id: int, room_in: RoomCreate) -> Room:
        pg = self.pg_service.get_pg_by_id(db, pg_id)
        ensure_pg_owner(pg, actor, "add rooms")

        exists = (
            db.query(Room)
            .filter(Room.pg_id == pg.id, Room.room_number == room_in.room_number)
            .first()
        )
        if exists:
            raise DuplicateRoomError(f"Room {room_in.room_number} already exists in this PG.")

        room = Room(
            pg_id=pg.id,
            owner_id=pg.owner_id,
            room_number=room_in.room_number,
            sharing=room_in.sharing,
            monthly_rent=room_in.monthly_rent,
            tenant_ids=[],
            status=RoomStatus.VACANT.value,
        )
        try:
            return self.create(db, room)
        except IntegrityError as e:
            db.rollback()
            raise DuplicateRoomError(f"Room {room_in.room_number} already exists in this PG.") from e

    def delete_room(self, db: Session, actor: ActorContext, room_id: int) -> dict:
        """
        Remove an empty room.

        Occupied rooms are refused. Active visits pointing at the room are
        cancelled and pending onboarding requests rejected; both keep their
        rows with the room reference cleared.
        """
        room = self.get_or_raise(db, room_id)
        pg = self.pg_service.get_pg_by_id(db, room.pg_id)
        ensure_pg_owner(pg, actor, "delete rooms")

        if room.occupant_count > 0:
            raise InvalidStateError(
                f"Room {room.room_number} still has {room.occupant_count} tenant(s); move them out first."
            )

        try:
            cancelled = self.visit_request_service.cancel_for_room(db, room.id)
            rejected = self.onboarding_request_service.reject_for_room(
                db, room.id, f"Room {room.room_number} is no longer available."
            )
            db.flush()
            db.delete(room)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(
            "Room %s deleted, %s visit(s) cancelled, %s onboarding request(s) rejected",
            room_id, cancelled, rejected,
        )
        return {
            "room_id": room_id,
            "cancelled_visit_requests": cancelled,
            "rejected_onboarding_requests": rejected,
        }
