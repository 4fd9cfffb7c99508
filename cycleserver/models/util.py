from enum import Enum


class UnitStatus(str, Enum):
    """We subclass string to make json serialization work."""
    FREE = "FREE"
    OCCUPIED = "OCCUPIED"


class CycleStatus(str, Enum):
    PARKED = "PARKED"
    IN_USE = "IN_USE"
