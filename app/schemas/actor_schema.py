from pydantic import BaseModel
from typing import Optional

from enums.user_type import UserType


class ActorContext(BaseModel):
    """Who is acting, passed explicitly into every workflow operation."""

    user_id: int
    role: UserType
    selected_pg_id: Optional[int] = None

    @property
    def is_owner(self) -> bool:
        return self.role == UserType.OWNER

    @property
    def is_tenant_side(self) -> bool:
        return self.role in (UserType.TENANT, UserType.APPLICANT)
