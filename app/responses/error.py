from fastapi import status
from .base import build_response
from services.exceptions import (
    WorkflowError,
    NotFoundError,
    InvalidStateError,
    RoomFullError,
    DuplicateActiveRequestError,
    DuplicateRoomError,
    AuthorizationError,
    WorkflowValidationError,
    ConcurrentUpdateError,
)


def bad_request_error(error: str = "Bad request"):
    return build_response(
        status.HTTP_400_BAD_REQUEST,
        "failure",
        error="bad_request",
        message=error,
    )


def conflict_error(error: str = "Credentials already exists", code: str = "conflict"):
    return build_response(
        status.HTTP_409_CONFLICT,
        "failure",
        error=code,
        message=error,
    )


def not_found_error(error: str = "Resource not found"):
    return build_response(
        status.HTTP_404_NOT_FOUND,
        "failure",
        error="not_found",
        message=error,
    )


def unauthorized_error(error: str = "Invalid credentials"):
    return build_response(
        status.HTTP_401_UNAUTHORIZED,
        "failure",
        error="unauthorized",
        message=error,
    )


def internal_server_error(error: str = "Internal server error"):
    return build_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "failure",
        error="internal_server_error",
        message=error,
    )


def forbidden_error(error: str = "Access denied"):
    return build_response(
        status.HTTP_403_FORBIDDEN,
        "failure",
        error="forbidden",
        message=error,
    )


def workflow_error_response(exc: WorkflowError):
    """Map a domain error onto the matching HTTP error response."""
    if isinstance(exc, NotFoundError):
        return not_found_error(exc.message)
    if isinstance(exc, AuthorizationError):
        return forbidden_error(exc.message)
    if isinstance(exc, WorkflowValidationError):
        return bad_request_error(exc.message)
    if isinstance(exc, RoomFullError):
        return conflict_error(exc.message, code="room_full")
    if isinstance(exc, DuplicateActiveRequestError):
        return conflict_error(exc.message, code="duplicate_active_request")
    if isinstance(exc, DuplicateRoomError):
        return conflict_error(exc.message, code="duplicate_room")
    if isinstance(exc, ConcurrentUpdateError):
        return conflict_error(exc.message, code="concurrent_update")
    if isinstance(exc, InvalidStateError):
        return conflict_error(exc.message, code="invalid_state")
    return internal_server_error(exc.message)
