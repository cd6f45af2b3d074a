from enum import Enum


class RescheduleActor(str, Enum):
    OWNER = "owner"
    TENANT = "tenant"

    def __str__(self):
        return self.value
