from enum import Enum


class RoomStatus(str, Enum):
    VACANT = "vacant"
    PARTIALLY_OCCUPIED = "partially_occupied"
    FULLY_OCCUPIED = "fully_occupied"

    def __str__(self):
        return self.value
