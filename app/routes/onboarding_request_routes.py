import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from schemas.actor_schema import ActorContext
from schemas.onboarding_request_response import OnboardingApprovalResponse, OnboardingRequestResponse
from schemas.onboarding_request_schema import OnboardingReject, OnboardingRequestCreate
from schemas.tenant_schema import TenantResponse
from services.exceptions import WorkflowError
from services.onboarding_request_service import OnboardingRequestService
from services.workflow_notifier import WorkflowNotifier, welcome_details
from services.workflow_query_service import WorkflowQueryService
from utils.dependencies import get_actor, owner_required
from responses.success import created_response, data_response
from responses.error import internal_server_error, workflow_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding-requests", tags=["Onboarding Requests"])
onboarding_request_service = OnboardingRequestService()
workflow_query_service = WorkflowQueryService()
notifier = WorkflowNotifier()


@router.post("", response_model=OnboardingRequestResponse)
def create_onboarding_request(
    payload: OnboardingRequestCreate,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    try:
        request = onboarding_request_service.create(db, actor, payload)
        return created_response(OnboardingRequestResponse.model_validate(request))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to create onboarding request")
        return internal_server_error(f"Failed to create onboarding request: {str(e)}")


@router.get("/owner")
def get_owner_onboarding_requests(
    pg_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(owner_required),
):
    try:
        requests = workflow_query_service.onboarding_requests_for_owner(
            db, actor.user_id, pg_id if pg_id is not None else actor.selected_pg_id
        )
        return data_response(requests)
    except Exception as e:
        logger.exception("Failed to list onboarding requests for owner %s", actor.user_id)
        return internal_server_error(str(e))


@router.get("/active")
def get_active_onboarding_request(
    pg_id: int,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    """The caller's active onboarding request for a PG, or null."""
    try:
        request = workflow_query_service.has_active_onboarding(db, actor.user_id, pg_id)
        visit = workflow_query_service.has_active_visit(db, actor.user_id, pg_id)
        return data_response(
            {
                "onboarding_request": (
                    OnboardingRequestResponse.model_validate(request) if request else None
                ),
                "has_active_visit": visit is not None,
            }
        )
    except Exception as e:
        logger.exception("Failed to look up active onboarding request")
        return internal_server_error(str(e))


@router.get("/status")
def get_onboarding_status(
    db: Session = Depends(get_db), actor: ActorContext = Depends(get_actor)
):
    try:
        pg_id = workflow_query_service.current_tenancy(db, actor.user_id)
        return data_response({"is_onboarded": pg_id is not None, "pg_id": pg_id})
    except Exception as e:
        logger.exception("Failed to read onboarding status for user %s", actor.user_id)
        return internal_server_error(str(e))


@router.post("/{request_id}/approve", response_model=OnboardingApprovalResponse)
def approve_onboarding_request(
    request_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    try:
        result = onboarding_request_service.approve(db, actor, request_id)
        background_tasks.add_task(notifier.onboarding_approved, welcome_details(result))
        return data_response(
            OnboardingApprovalResponse(
                onboarding_request=OnboardingRequestResponse.model_validate(result.request),
                tenant=TenantResponse.model_validate(result.tenant),
            )
        )
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to approve onboarding request %s", request_id)
        return internal_server_error(str(e))


@router.post("/{request_id}/reject", response_model=OnboardingRequestResponse)
def reject_onboarding_request(
    request_id: int,
    payload: OnboardingReject,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: ActorContext = Depends(get_actor),
):
    try:
        request = onboarding_request_service.reject(db, actor, request_id, payload.reason)
        background_tasks.add_task(
            notifier.onboarding_rejected, request.id, request.tenant_user_id, request.rejection_reason
        )
        return data_response(OnboardingRequestResponse.model_validate(request))
    except WorkflowError as e:
        return workflow_error_response(e)
    except Exception as e:
        logger.exception("Failed to reject onboarding request %s", request_id)
        return internal_server_error(str(e))
