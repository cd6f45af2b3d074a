import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from enums.reschedule_actor import RescheduleActor
from schemas.actor_schema import ActorContext
from schemas.visit_request_response import VisitRequestResponse
from schemas.visit_request_schema import VisitRequestCreate, VisitReschedule
from services.exceptions import WorkflowError
from services.visit_request_service import VisitRequestService
from services.workflow_notifier import WorkflowNotifier, visit_slot
from services.workflow_query_service import WorkflowQueryService
from utils.dependencies import get_actor, owner_required
from responses.success import created_response, data_response
from responses.error import internal_server_error, not_found_error, workflow_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/visit-requests", tags=["Visit Requests"])
visit_request_service = VisitRequestService()
workflow_query_service = WorkflowQueryService()
notifier = WorkflowNotifier()


@router.post("", response_model=VisitRequestResponse)
def create_visit_request(
    payload: VisitRequestCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    try:
        visit = visit_request_service.create(db, actor, payload)
        return created_response(VisitRequestResponse.model_validate(visit))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to create visit request")
        return internal_server_error(f"Failed to create visit request: {str(e)}")


@router.get("/tenant")
def get_tenant_visit_requests(
    db: Session = Depends(get_db), actor: ActorContext = Depends(get_actor)
):
    """All visit requests the current user has made, newest first."""
    try:
        visits = workflow_query_service.visit_requests_for_tenant(db, actor.user_id)
        return data_response(visits)
    except Exception as e:
        logger.exception("Failed to list visit requests for user %s", actor.user_id)
        return internal_server_error(str(e))


@router.get("/owner")
def get_owner_visit_requests(
    pg_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(owner_required),
):
    """Visit requests for the owner's PGs, narrowed to one PG when selected."""
    try:
        visits = workflow_query_service.visit_requests_for_owner(
            db, actor.user_id, pg_id if pg_id is not None else actor.selected_pg_id
        )
        return data_response(visits)
    except Exception as e:
        logger.exception("Failed to list visit requests for owner %s", actor.user_id)
        return internal_server_error(str(e))


@router.get("/{visit_id}", response_model=VisitRequestResponse)
def get_visit_request(
    visit_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    try:
        visit = visit_request_service.get_or_raise(db, visit_id)
        if actor.user_id not in (visit.tenant_user_id, visit.owner_id):
            return not_found_error(f"Visit request with ID {visit_id} not found.")
        return data_response(VisitRequestResponse.model_validate(visit))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to fetch visit request %s", visit_id)
        return internal_server_error(str(e))


@router.post("/{visit_id}/approve", response_model=VisitRequestResponse)
def approve_visit_request(
    visit_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    try:
        visit = visit_request_service.approve(db, actor, visit_id)
        background_tasks.add_task(
            notifier.visit_approved, visit.id, visit.tenant_user_id, visit_slot(visit)
        )
        return data_response(VisitRequestResponse.model_validate(visit))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to approve visit request %s", visit_id)
        return internal_server_error(str(e))


@router.post("/{visit_id}/reschedule", response_model=VisitRequestResponse)
def reschedule_visit_request(
    visit_id: int,
    payload: VisitReschedule,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    try:
        visit = visit_request_service.reschedule(db, actor, visit_id, payload)
        recipient = (
            visit.tenant_user_id
            if visit.rescheduled_by == RescheduleActor.OWNER.value
            else visit.owner_id
        )
        background_tasks.add_task(
            notifier.visit_rescheduled, visit.id, recipient, visit_slot(visit, rescheduled=True)
        )
        return data_response(VisitRequestResponse.model_validate(visit))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to reschedule visit request %s", visit_id)
        return internal_server_error(str(e))


@router.patch("/{visit_id}/accept-reschedule", response_model=VisitRequestResponse)
def accept_visit_reschedule(
    visit_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    try:
        visit = visit_request_service.accept_reschedule(db, actor, visit_id)
        return data_response(VisitRequestResponse.model_validate(visit))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to accept reschedule of visit request %s", visit_id)
        return internal_server_error(str(e))


@router.patch("/{visit_id}/complete", response_model=VisitRequestResponse)
def complete_visit_request(
    visit_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    try:
        visit = visit_request_service.complete(db, actor, visit_id)
        return data_response(VisitRequestResponse.model_validate(visit))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to complete visit request %s", visit_id)
        return internal_server_error(str(e))


@router.delete("/{visit_id}")
def cancel_visit_request(
    visit_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    try:
        visit_request_service.cancel(db, actor, visit_id)
        return data_response({"success": True})
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to cancel visit request %s", visit_id)
        return internal_server_error(str(e))
