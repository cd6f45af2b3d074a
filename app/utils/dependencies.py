from fastapi import Depends, Header, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from datetime import datetime, timedelta, timezone
from typing import Optional

from database.init import get_db
from database.models.user_model import User
from enums.user_type import UserType
from schemas.actor_schema import ActorContext
from config import ALGORITHM, SECRET_KEY, ACCESS_TOKEN_EXPIRE_MINUTES

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/signin")
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password):
    return pwd_context.hash(password)


def verify_password(plain_password, hashed_password):
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        email = payload.get("sub")
        if email is None:
            raise HTTPException(status_code=401, detail="Invalid credentials")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid provided token")

    user = db.query(User).filter_by(email=email).first()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is deactivated")

    return user


def get_actor(
    current_user: User = Depends(get_current_user),
    x_selected_pg_id: Optional[int] = Header(default=None),
) -> ActorContext:
    """Build the explicit actor context; owners may pin a PG with X-Selected-Pg-Id."""
    return ActorContext(
        user_id=current_user.id,
        role=UserType(current_user.user_type),
        selected_pg_id=x_selected_pg_id,
    )


def owner_required(actor: ActorContext = Depends(get_actor)) -> ActorContext:
    """Dependency to ensure the current user is a property owner"""
    if not actor.is_owner:
        raise HTTPException(status_code=403, detail="Only property owners can access this endpoint")
    return actor
