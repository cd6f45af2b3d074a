from enum import Enum


class UserType(str, Enum):
    """Classification of a user account, tenant/applicant flips with room membership"""

    OWNER = "owner"
    TENANT = "tenant"
    APPLICANT = "applicant"
    ADMIN = "admin"

    def __str__(self):
        return self.value
