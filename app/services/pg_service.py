from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from database.models import Pg, Room
from schemas.actor_schema import ActorContext
from schemas.pg_schema import PgCreate
from services.base_service import BaseService
from services.exceptions import AuthorizationError


class PgService(BaseService):
    """PG directory: the source of truth for which owner a PG belongs to."""

    label = "PG"

    def __init__(self):
        super().__init__(Pg)

    def get_pg_by_id(self, db: Session, pg_id: int) -> Pg:
        return self.get_or_raise(db, pg_id)

    def get_with_rooms(self, db: Session, pg_id: int) -> Pg:
        pg = (
            db.query(Pg)
            .options(selectinload(Pg.rooms))
            .filter(Pg.id == pg_id)
            .first()
        )
        if pg is None:
            return self.get_or_raise(db, pg_id)
        return pg

    def create_pg(self, db: Session, actor: ActorContext, pg_in: PgCreate) -> Pg:
        if not actor.is_owner:
            raise AuthorizationError("Only property owners can create a PG.")
        pg = Pg(owner_id=actor.user_id, name=pg_in.name, address=pg_in.address, city=pg_in.city)
        return self.create(db, pg)

    def get_by_owner(self, db: Session, owner_id: int) -> List[Pg]:
        return db.query(Pg).filter(Pg.owner_id == owner_id).order_by(Pg.id).all()

    def available_rooms(self, db: Session, pg_id: int) -> List[Room]:
        self.get_pg_by_id(db, pg_id)
        rooms = db.query(Room).filter(Room.pg_id == pg_id).order_by(Room.room_number).all()
        return [room for room in rooms if not room.is_full]


def ensure_pg_owner(pg: Pg, actor: ActorContext, action: Optional[str] = None):
    """Owner-only operations: the actor must be an owner and own this PG."""
    if not actor.is_owner or pg.owner_id != actor.user_id:
        raise AuthorizationError(
            f"Only the owner of this PG can {action or 'perform this action'}."
        )
