"""
Room occupancy ledger.

Owns ``Room.tenant_ids`` and ``Room.status``. Every write to the membership
list goes through :class:`RoomOccupancyLedger`, which recomputes the status in
the same flush. The ledger never commits; callers own the transaction.
"""
import logging

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from database.models import Room, Tenant
from enums.room_status import RoomStatus
from services.exceptions import NotFoundError, RoomFullError, ConcurrentUpdateError
from services.user_lifecycle import on_tenant_assigned, on_tenant_removed

logger = logging.getLogger(__name__)

LOCK_ERROR_MARKERS = ("database is locked", "deadlock", "lock wait timeout")


def compute_status(tenant_count: int, sharing: int) -> RoomStatus:
    if sharing < 1:
        raise ValueError("sharing must be at least 1")
    if tenant_count < 0 or tenant_count > sharing:
        raise ValueError(f"{tenant_count} occupants do not fit a {sharing}-sharing room")
    if tenant_count == 0:
        return RoomStatus.VACANT
    if tenant_count == sharing:
        return RoomStatus.FULLY_OCCUPIED
    return RoomStatus.PARTIALLY_OCCUPIED


def is_lock_conflict(exc: Exception) -> bool:
    """True for row/table lock contention reported by the driver (SQLite busy, MySQL deadlock)."""
    if not isinstance(exc, OperationalError):
        return False
    text = str(exc.orig).lower()
    return any(marker in text for marker in LOCK_ERROR_MARKERS)


class RoomOccupancyLedger:
    def lock_room(self, db: Session, room_id: int) -> Room:
        """Re-read the room, row-locked where the dialect supports FOR UPDATE."""
        room = (
            db.query(Room)
            .filter(Room.id == room_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if room is None:
            raise NotFoundError(f"Room with ID {room_id} not found.")
        return room

    def ensure_capacity(self, room: Room, tenant_id: int = None):
        if tenant_id is not None and tenant_id in (room.tenant_ids or []):
            return
        if room.is_full:
            raise RoomFullError(
                f"Room {room.room_number} is now full ({room.occupant_count}/{room.sharing} tenants)."
            )

    def assign_tenant(self, db: Session, room_id: int, tenant_id: int) -> Room:
        room = self.lock_room(db, room_id)
        current = list(room.tenant_ids or [])
        if tenant_id in current:
            # already a member, nothing to write
            return room

        self.ensure_capacity(room)
        self._write_members(room, current + [tenant_id])

        tenant = db.get(Tenant, tenant_id)
        if tenant is not None and tenant.user is not None:
            on_tenant_assigned(tenant.user)

        self._flush(db, room)
        logger.info(
            "Tenant %s assigned to room %s (%s/%s)",
            tenant_id, room.id, room.occupant_count, room.sharing,
        )
        return room

    def release_tenant(self, db: Session, room_id: int, tenant_id: int) -> Room:
        room = self.lock_room(db, room_id)
        current = list(room.tenant_ids or [])
        if tenant_id not in current:
            return room

        self._write_members(room, [tid for tid in current if tid != tenant_id])

        tenant = db.get(Tenant, tenant_id)
        if tenant is not None and tenant.user is not None:
            on_tenant_removed(db, tenant.user, exclude_tenant_id=tenant_id)

        self._flush(db, room)
        logger.info(
            "Tenant %s released from room %s (%s/%s)",
            tenant_id, room.id, room.occupant_count, room.sharing,
        )
        return room

    def _write_members(self, room: Room, tenant_ids):
        # status is derived here and nowhere else
        room.status = compute_status(len(tenant_ids), room.sharing).value
        room.tenant_ids = tenant_ids

    def _flush(self, db: Session, room: Room):
        # a failed flush leaves the session unusable, read what the messages need first
        room_number = room.room_number
        try:
            db.flush()
        except StaleDataError as e:
            raise ConcurrentUpdateError(
                f"Room {room_number} was updated by another request, please retry."
            ) from e
        except OperationalError as e:
            if is_lock_conflict(e):
                raise ConcurrentUpdateError(
                    f"Room {room_number} is being updated by another request, please retry."
                ) from e
            raise
