from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from typing import Optional

from enums.user_type import UserType


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    phone: Optional[str] = None
    user_type: UserType = UserType.APPLICANT

    @field_validator("user_type")
    @classmethod
    def self_service_types_only(cls, value: UserType) -> UserType:
        if value not in (UserType.APPLICANT, UserType.OWNER):
            raise ValueError("Only applicant or owner accounts can sign up")
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    user_type: UserType

    model_config = ConfigDict(from_attributes=True)
