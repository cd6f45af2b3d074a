import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from database.models import User
from schemas.auth_schema import LoginRequest, UserCreate, UserResponse
from services.auth_service import create_user, get_user_by_email
from services.notification_service import NotificationService
from utils.dependencies import create_access_token, get_current_user, verify_password
from responses.success import created_response, data_response
from responses.error import conflict_error, internal_server_error, unauthorized_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])
notification_service = NotificationService()


@router.post("/signup")
def signup(payload: UserCreate, db: Session = Depends(get_db)):
    existing = get_user_by_email(payload.email, db)
    if existing:
        return conflict_error("User already exists")

    try:
        user = create_user(payload, db)
        token = create_access_token({"sub": user.email})
        return created_response(
            {
                "access_token": token,
                "token_type": "bearer",
                "user": UserResponse.model_validate(user),
            }
        )
    except Exception as e:
        logger.exception("Failed to register %s", payload.email)
        return internal_server_error(f"Failed to register user: {str(e)}")


@router.post("/signin")
def signin(credentials: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = get_user_by_email(credentials.email, db)
        if not user or not verify_password(credentials.password, user.hashed_password):
            return unauthorized_error("Invalid credentials")

        token = create_access_token({"sub": user.email})
        return data_response(
            {
                "access_token": token,
                "token_type": "bearer",
                "user": UserResponse.model_validate(user),
            }
        )
    except Exception as e:
        logger.exception("Sign in failed for %s", credentials.email)
        return internal_server_error(str(e))


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user)):
    return data_response(UserResponse.model_validate(current_user))


@router.get("/notifications")
def get_my_notifications(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        notifications = notification_service.get_for_user(db, current_user.id, unread_only)
        return data_response(
            [
                {
                    "id": n.id,
                    "title": n.title,
                    "message": n.message,
                    "type": n.type,
                    "reference_id": n.reference_id,
                    "is_read": n.is_read,
                    "created_at": n.created_at,
                }
                for n in notifications
            ]
        )
    except Exception as e:
        logger.exception("Failed to list notifications for user %s", current_user.id)
        return internal_server_error(str(e))
