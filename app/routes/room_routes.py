import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from schemas.actor_schema import ActorContext
from schemas.room_schema import RoomResponse
from services.exceptions import WorkflowError
from services.room_service import RoomService
from utils.dependencies import get_actor, owner_required
from responses.success import data_response
from responses.error import internal_server_error, workflow_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rooms", tags=["Rooms"])
room_service = RoomService()


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: int, db: Session = Depends(get_db), actor: ActorContext = Depends(get_actor)):
    try:
        room = room_service.get_or_raise(db, room_id)
        return data_response(RoomResponse.model_validate(room))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to fetch room %s", room_id)
        return internal_server_error(str(e))


@router.delete("/{room_id}")
def delete_room(
    room_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(owner_required),
):
    """Delete an empty room; its open visit and onboarding requests are closed."""
    try:
        summary = room_service.delete_room(db, actor, room_id)
        return data_response(summary)
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to delete room %s", room_id)
        return internal_server_error(str(e))
