"""
applicant <-> tenant transitions of ``User.user_type``.

Only room membership changes drive these; the occupancy ledger calls them
whenever a tenant record is attached to or released from a room.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from database.models import Tenant, User
from enums.tenant_status import TenantStatus
from enums.user_type import UserType

logger = logging.getLogger(__name__)


def on_tenant_assigned(user: User) -> User:
    if user.user_type == UserType.APPLICANT.value:
        user.user_type = UserType.TENANT.value
        logger.info("User %s is now a tenant", user.id)
    return user


def has_other_active_tenancy(db: Session, user_id: int, exclude_tenant_id: Optional[int] = None) -> bool:
    query = db.query(Tenant).filter(
        Tenant.user_id == user_id,
        Tenant.status == TenantStatus.ACTIVE.value,
        Tenant.room_id.isnot(None),
    )
    if exclude_tenant_id is not None:
        query = query.filter(Tenant.id != exclude_tenant_id)
    return db.query(query.exists()).scalar()


def on_tenant_removed(db: Session, user: User, exclude_tenant_id: Optional[int] = None) -> User:
    if user.user_type != UserType.TENANT.value:
        return user
    if has_other_active_tenancy(db, user.id, exclude_tenant_id):
        return user
    user.user_type = UserType.APPLICANT.value
    logger.info("User %s has no room left, back to applicant", user.id)
    return user
