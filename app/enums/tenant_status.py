from enum import Enum


class TenantStatus(str, Enum):
    ACTIVE = "active"
    VACATED = "vacated"

    def __str__(self):
        return self.value
