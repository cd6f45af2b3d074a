"""
Domain errors raised by the visit / onboarding workflow.

Routes translate them into the JSON error envelope through
``responses.error.workflow_error_response``.
"""


class WorkflowError(Exception):
    """Base class, ``message`` is safe to show to the end user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(WorkflowError):
    pass


class InvalidStateError(WorkflowError):
    pass


class RoomFullError(WorkflowError):
    pass


class DuplicateActiveRequestError(WorkflowError):
    pass


class DuplicateRoomError(WorkflowError):
    pass


class AuthorizationError(WorkflowError):
    pass


class WorkflowValidationError(WorkflowError):
    pass


class ConcurrentUpdateError(WorkflowError):
    pass


class NotificationDeliveryError(WorkflowError):
    """Email / in-app delivery failed. Logged by the notifier, never returned to a caller."""
