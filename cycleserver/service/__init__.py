"""
.. autoclasstree:: cycleserver.service

The service layer for the system. Acts as the internal API.
Each interface (REST API, web-sockets) should use the
service layer to implement their logic.

The access modules hold the plain reads and writes for each model.
The managers implement the use cases that span several models: the
rental coordinator for park/take and the update notifier for pushing
changes to dashboards.
"""

from .exceptions import (
    RentalError, NotFoundError, ConflictError, ValidationError,
    UnitNotFound, BoothNotFound, CycleNotFound,
    UnitAlreadyOccupied, UnitAlreadyFree, RfidMismatch, CycleAlreadyDocked, CycleAlreadyParked,
    DuplicateName, DuplicateUnitId, DuplicateRfid, BoothInUse,
    GeofenceViolation, InvalidLocation, InvalidName, InvalidUnitState,
)
