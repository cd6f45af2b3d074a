import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from schemas.actor_schema import ActorContext
from schemas.pg_schema import PgCreate, PgResponse
from schemas.room_schema import RoomCreate, RoomResponse
from services.exceptions import WorkflowError
from services.pg_service import PgService
from services.room_service import RoomService
from utils.dependencies import get_actor, owner_required
from responses.success import created_response, data_response
from responses.error import internal_server_error, workflow_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pgs", tags=["PGs"])
pg_service = PgService()
room_service = RoomService(pg_service)


@router.post("", response_model=PgResponse)
def create_pg(
    payload: PgCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(owner_required),
):
    try:
        pg = pg_service.create_pg(db, actor, payload)
        return created_response(PgResponse.model_validate(pg))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to create PG")
        return internal_server_error(f"Failed to create PG: {str(e)}")


@router.get("/mine")
def get_my_pgs(db: Session = Depends(get_db), actor: ActorContext = Depends(owner_required)):
    try:
        pgs = pg_service.get_by_owner(db, actor.user_id)
        return data_response([PgResponse.model_validate(pg) for pg in pgs])
    except Exception as e:
        logger.exception("Failed to list PGs for owner %s", actor.user_id)
        return internal_server_error(str(e))


@router.get("/{pg_id}", response_model=PgResponse)
def get_pg(pg_id: int, db: Session = Depends(get_db), actor: ActorContext = Depends(get_actor)):
    try:
        pg = pg_service.get_with_rooms(db, pg_id)
        return data_response(PgResponse.model_validate(pg))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to fetch PG %s", pg_id)
        return internal_server_error(str(e))


@router.get("/{pg_id}/available-rooms")
def get_available_rooms(
    pg_id: int, db: Session = Depends(get_db), actor: ActorContext = Depends(get_actor)
):
    """Rooms that still have at least one free bed."""
    try:
        rooms = pg_service.available_rooms(db, pg_id)
        return data_response([RoomResponse.model_validate(room) for room in rooms])
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to list available rooms for PG %s", pg_id)
        return internal_server_error(str(e))


@router.post("/{pg_id}/rooms", response_model=RoomResponse)
def create_room(
    pg_id: int,
    payload: RoomCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(owner_required),
):
    try:
        room = room_service.create_room(db, actor, pg_id, payload)
        return created_response(RoomResponse.model_validate(room))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to create room in PG %s", pg_id)
        return internal_server_error(f"Failed to create room: {str(e)}")
