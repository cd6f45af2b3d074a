import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from schemas.actor_schema import ActorContext
from services.exceptions import WorkflowError
from services.workflow_query_service import ORDER_RECENT, WorkflowQueryService
from utils.dependencies import get_actor, owner_required
from responses.success import data_response
from responses.error import internal_server_error, workflow_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflow", tags=["Workflow"])
workflow_query_service = WorkflowQueryService()


@router.get("/tenant")
def get_tenant_workflow(
    order_by: str = ORDER_RECENT,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    """Active visit and onboarding requests of the current user."""
    try:
        listing = workflow_query_service.list_active_for_tenant(
            db, actor.user_id, order_by=order_by, include_inactive=include_inactive
        )
        return data_response(listing)
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to build workflow listing for user %s", actor.user_id)
        return internal_server_error(str(e))


@router.get("/owner")
def get_owner_workflow(
    pg_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(owner_required),
):
    try:
        listing = workflow_query_service.list_for_owner(
            db, actor.user_id, pg_id if pg_id is not None else actor.selected_pg_id
        )
        return data_response(listing)
    except Exception as e:
        logger.exception("Failed to build workflow listing for owner %s", actor.user_id)
        return internal_server_error(str(e))
