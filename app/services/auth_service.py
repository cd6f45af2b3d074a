from sqlalchemy.orm import Session

from database.models import User
from schemas.auth_schema import UserCreate
from utils.dependencies import hash_password


def create_user(payload: UserCreate, db: Session) -> User:
    user = User(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        hashed_password=hash_password(payload.password),
        user_type=payload.user_type.value,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_user_by_email(email: str, db: Session):
    return db.query(User).filter_by(email=email).first()


def get_user_by_id(user_id: int, db: Session):
    return db.query(User).filter(User.id == user_id).first()
