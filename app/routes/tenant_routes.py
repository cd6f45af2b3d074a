import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from schemas.actor_schema import ActorContext
from schemas.tenant_schema import TenantFeedback, TenantHistoryResponse, TenantResponse
from services.exceptions import AuthorizationError, WorkflowError
from services.tenant_service import TenantService
from utils.dependencies import get_actor, owner_required
from responses.success import data_response
from responses.error import internal_server_error, not_found_error, workflow_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["Tenants"])
tenant_service = TenantService()


@router.get("/get_by_owner")
def get_my_tenants(
    pg_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(owner_required),
):
    try:
        tenants = tenant_service.get_by_owner(
            db, actor.user_id, pg_id if pg_id is not None else actor.selected_pg_id
        )
        return data_response([TenantResponse.model_validate(t) for t in tenants])
    except Exception as e:
        logger.exception("Failed to list tenants for owner %s", actor.user_id)
        return internal_server_error(str(e))


@router.get("/history/{user_id}", response_model=List[TenantHistoryResponse])
def get_tenant_history(
    user_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    """Past stays of a user, newest move-out first. Visible to owners and to the user."""
    try:
        if not actor.is_owner and actor.user_id != user_id:
            raise AuthorizationError("You can only view your own tenant history.")
        history = tenant_service.get_history(db, user_id)
        return data_response([TenantHistoryResponse.model_validate(h) for h in history])
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to fetch tenant history for user %s", user_id)
        return internal_server_error(str(e))


@router.get("/{tenant_id}", response_model=TenantResponse)
def get_tenant_by_id(
    tenant_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(owner_required),
):
    try:
        tenant = tenant_service.get(db, tenant_id)
        if not tenant or tenant.owner_id != actor.user_id:
            return not_found_error("Tenant not found.")
        return data_response(TenantResponse.model_validate(tenant))
    except Exception as e:
        logger.exception("Failed to fetch tenant %s", tenant_id)
        return internal_server_error(str(e))


@router.delete("/{tenant_id}", response_model=TenantResponse)
def remove_tenant(
    tenant_id: int,
    feedback: Optional[TenantFeedback] = None,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(owner_required),
):
    """Move the tenant out of their room, keeping the record as vacated."""
    try:
        tenant = tenant_service.remove_tenant(db, actor, tenant_id, feedback)
        return data_response(TenantResponse.model_validate(tenant))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to remove tenant %s", tenant_id)
        return internal_server_error(str(e))
