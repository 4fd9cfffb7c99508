"""
Exceptions
----------

Every rejected operation raises a subclass of :class:`RentalError`.
Each carries a stable ``reason`` which is returned to the client,
and its category decides the HTTP status the api responds with.
"""
from http import HTTPStatus
from typing import Optional


class RentalError(Exception):
    reason = "rental_error"
    status = HTTPStatus.BAD_REQUEST

    def __init__(self, message: Optional[str] = None):
        super().__init__(message if message is not None else self.__doc__)
        self.message = str(self)


class NotFoundError(RentalError):
    status = HTTPStatus.NOT_FOUND


class ConflictError(RentalError):
    status = HTTPStatus.CONFLICT


class ValidationError(RentalError):
    status = HTTPStatus.BAD_REQUEST


class UnitNotFound(NotFoundError):
    """Unit not found."""
    reason = "unit_not_found"


class BoothNotFound(NotFoundError):
    """Booth not found."""
    reason = "booth_not_found"


class CycleNotFound(NotFoundError):
    """Cycle not found."""
    reason = "cycle_not_found"


class UnitAlreadyOccupied(ConflictError):
    """Unit is already occupied."""
    reason = "unit_already_occupied"


class UnitAlreadyFree(ConflictError):
    """Unit is already free."""
    reason = "unit_already_free"


class RfidMismatch(ConflictError):
    """RFID does not match the cycle in this unit."""
    reason = "rfid_mismatch"


class CycleAlreadyDocked(ConflictError):
    """This cycle is already parked in another unit."""
    reason = "cycle_already_docked"

    def __init__(self, message: Optional[str] = None, unit_id: Optional[str] = None):
        super().__init__(message)
        self.unit_id = unit_id


class CycleAlreadyParked(ConflictError):
    """Cycle is already parked."""
    reason = "cycle_already_parked"


class DuplicateName(ConflictError):
    """A booth with that name already exists."""
    reason = "duplicate_name"


class DuplicateUnitId(ConflictError):
    """A unit with that id already exists."""
    reason = "duplicate_unit_id"


class DuplicateRfid(ConflictError):
    """A cycle with that RFID already exists."""
    reason = "duplicate_rfid"


class BoothInUse(ConflictError):
    """The booth still has units attached to it."""
    reason = "booth_in_use"


class GeofenceViolation(RentalError):
    """You are not within the booth geofence."""
    reason = "geofence_violation"
    status = HTTPStatus.FORBIDDEN

    def __init__(self, distance: float, radius: float):
        super().__init__(
            f"You are not within the booth geofence ({distance:.0f}m away, must be within {radius:.0f}m)."
        )
        self.distance = distance
        self.radius = radius


class InvalidLocation(ValidationError):
    """The supplied coordinates or radius are out of range."""
    reason = "invalid_location"


class InvalidUnitState(ValidationError):
    """An occupied unit must have a cycle RFID, and a free unit must not."""
    reason = "invalid_unit_state"


class InvalidName(ValidationError):
    """A booth name must not be blank."""
    reason = "invalid_name"
