"""
Rental Coordinator
------------------

This module is what handles all the state transitions of units and cycles.

Responsibilities
================

This object is the only thing that writes to units and cycles once
they have been created.

- parking a cycle in a unit
- taking a cycle out of a unit
- checking which booth a user is standing in
- administrative edits of units and cycles

Concurrency
===========

Every await is a point where another request can run, so the
load, validate, write sequence for a unit is done while holding
that unit's lock. Checking that a cycle is not docked anywhere
else (and docking it) is done while holding the lock for its rfid,
so two units can't accept the same cycle at once. Locks are always
taken unit first, then rfid.

The writes themselves are conditional on the unit still being in
the state we validated, and the unit and cycle writes are committed
in a single transaction, so a failed transition leaves nothing behind.
"""
import asyncio
from contextlib import AsyncExitStack
from typing import Tuple, Optional
from weakref import WeakValueDictionary

from tortoise.transactions import in_transaction

from cycleserver import logger
from cycleserver.events import EventHub, EventList
from cycleserver.models import Booth, Cycle, Unit, UnitStatus, CycleStatus
from cycleserver.service.access.booths import get_booths
from cycleserver.service.access.cycles import get_cycle, create_cycle, set_cycle_status, delete_cycle
from cycleserver.service.access.units import (
    get_unit, find_unit_by_cycle_rfid, update_unit, create_unit, change_unit, delete_unit
)
from cycleserver.service.exceptions import (
    UnitNotFound, UnitAlreadyOccupied, UnitAlreadyFree, RfidMismatch,
    CycleAlreadyDocked, CycleAlreadyParked, CycleNotFound, GeofenceViolation
)
from cycleserver.service.geofence import distance, find_containing, validate_coordinates


class UnitEvent(EventList):

    def unit_updated(self, unit: Unit):
        """A unit was parked in, taken from, created or edited."""


class RentalEvent(EventList):

    def cycle_parked(self, unit: Unit, cycle: Cycle):
        """A cycle was docked into a unit."""

    def cycle_taken(self, unit: Unit, cycle: Cycle):
        """A cycle was taken out of a unit."""


class KeyedLocks:
    """
    Hands out one lock per key. Locks are only kept alive
    while something holds or waits on them.
    """

    def __init__(self):
        self._locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()

    def __call__(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self):
        return len(self._locks)


class RentalCoordinator:
    """
    Validates and applies park and take transitions.

    Publishes events on its hub so that other modules (such as the
    :class:`~cycleserver.service.manager.update_notifier.UpdateNotifier`)
    can stay up to date with the system.
    """

    def __init__(self, *, strict_parking: bool = False):
        """
        :param strict_parking: Refuse to park a cycle whose status is already
            PARKED, even when it isn't docked in any unit.
        """
        self.strict_parking = strict_parking
        self.hub = EventHub(UnitEvent, RentalEvent)

        self._unit_locks = KeyedLocks()
        self._rfid_locks = KeyedLocks()

    async def park(self, unit_id: str, rfid: str, user_lat: float, user_lon: float) -> Tuple[Unit, Cycle]:
        """
        Docks a cycle into a free unit.

        :raises InvalidLocation: If the user's coordinates are malformed.
        :raises UnitNotFound: If there is no unit with the given id.
        :raises UnitAlreadyOccupied: If the unit holds a cycle.
        :raises GeofenceViolation: If the user is outside of the unit's booth.
        :raises CycleAlreadyDocked: If the cycle is docked in another unit.
        :raises CycleAlreadyParked: If strict parking is on and the cycle is PARKED.
        """
        validate_coordinates(user_lat, user_lon)

        async with self._unit_locks(unit_id):
            unit = await self._get_unit(unit_id)
            if unit.status is UnitStatus.OCCUPIED:
                raise UnitAlreadyOccupied(f"Unit {unit_id} is already occupied.")

            self._check_geofence(unit.booth, user_lat, user_lon)

            async with self._rfid_locks(rfid):
                docked_in = await find_unit_by_cycle_rfid(rfid)
                if docked_in is not None:
                    raise CycleAlreadyDocked(
                        f"Cycle {rfid} is already parked in unit {docked_in.unit_id}.", unit_id=docked_in.unit_id
                    )

                cycle = await get_cycle(rfid)
                if cycle is not None and cycle.status is CycleStatus.PARKED and self.strict_parking:
                    raise CycleAlreadyParked(f"Cycle {rfid} is already parked.")

                async with in_transaction() as connection:
                    await update_unit(
                        unit, UnitStatus.OCCUPIED, rfid,
                        expected_status=UnitStatus.FREE, connection=connection
                    )
                    if cycle is None:
                        cycle = await create_cycle(rfid, CycleStatus.PARKED, connection)
                    else:
                        await set_cycle_status(cycle, CycleStatus.PARKED, connection)

        logger.info("Cycle %s parked in unit %s", rfid, unit_id)
        self.hub.emit(UnitEvent.unit_updated, unit)
        self.hub.emit(RentalEvent.cycle_parked, unit, cycle)
        return unit, cycle

    async def take(self, unit_id: str, rfid: str, user_lat: float, user_lon: float) -> Tuple[Unit, Cycle]:
        """
        Takes a docked cycle out of its unit.

        The caller must know the rfid of the cycle in the unit.

        :raises InvalidLocation: If the user's coordinates are malformed.
        :raises UnitNotFound: If there is no unit with the given id.
        :raises UnitAlreadyFree: If the unit is empty.
        :raises RfidMismatch: If the unit holds a different cycle.
        :raises GeofenceViolation: If the user is outside of the unit's booth.
        :raises CycleNotFound: If the docked cycle has no record.
        """
        validate_coordinates(user_lat, user_lon)

        async with self._unit_locks(unit_id):
            unit = await self._get_unit(unit_id)
            if unit.status is UnitStatus.FREE:
                raise UnitAlreadyFree(f"Unit {unit_id} is already free.")
            if unit.cycle_rfid != rfid:
                raise RfidMismatch(f"RFID {rfid} does not match the cycle in unit {unit_id}.")

            self._check_geofence(unit.booth, user_lat, user_lon)

            async with self._rfid_locks(rfid):
                cycle = await get_cycle(rfid)
                if cycle is None:
                    logger.error("Unit %s holds cycle %s which has no record", unit_id, rfid)
                    raise CycleNotFound(f"Cycle {rfid} not found.")

                async with in_transaction() as connection:
                    await update_unit(
                        unit, UnitStatus.FREE, None,
                        expected_status=UnitStatus.OCCUPIED, connection=connection
                    )
                    await set_cycle_status(cycle, CycleStatus.IN_USE, connection)

        logger.info("Cycle %s taken from unit %s", rfid, unit_id)
        self.hub.emit(UnitEvent.unit_updated, unit)
        self.hub.emit(RentalEvent.cycle_taken, unit, cycle)
        return unit, cycle

    @staticmethod
    async def check_geofence(user_lat: float, user_lon: float) -> Optional[Booth]:
        """
        Gets the booth the user is standing in.

        Booths are checked in the order they were created, and the
        first one containing the user wins.
        """
        validate_coordinates(user_lat, user_lon)
        return find_containing((user_lat, user_lon), await get_booths())

    async def create_unit(self, unit_id: str, booth_id: int) -> Unit:
        """
        Adds a free unit to a booth.

        :raises BoothNotFound: If the booth doesn't exist.
        :raises DuplicateUnitId: If the unit id is taken.
        """
        async with self._unit_locks(unit_id):
            unit = await create_unit(unit_id, booth_id)

        self.hub.emit(UnitEvent.unit_updated, unit)
        return unit

    async def update_unit(self, unit_id: str, *, new_unit_id: str = None, booth_id: int = None) -> Unit:
        """
        Renames a unit or moves it to another booth.

        :raises UnitNotFound: If there is no unit with the given id.
        :raises BoothNotFound: If the new booth doesn't exist.
        :raises DuplicateUnitId: If the new unit id is taken.
        """
        keys = sorted({unit_id, new_unit_id} - {None})

        async with AsyncExitStack() as stack:
            for key in keys:
                await stack.enter_async_context(self._unit_locks(key))

            unit = await self._get_unit(unit_id)
            unit = await change_unit(unit, unit_id=new_unit_id, booth_id=booth_id)

        logger.info("Unit %s updated (now %s in booth %s)", unit_id, unit.unit_id, unit.booth_id)
        self.hub.emit(UnitEvent.unit_updated, unit)
        return unit

    async def delete_unit(self, unit_id: str):
        """
        Removes an empty unit.

        :raises UnitNotFound: If there is no unit with the given id.
        :raises UnitAlreadyOccupied: If a cycle is docked in it.
        """
        async with self._unit_locks(unit_id):
            unit = await self._get_unit(unit_id)
            await delete_unit(unit)

        logger.info("Unit %s deleted", unit_id)

    async def register_cycle(self, rfid: str, status: CycleStatus = CycleStatus.PARKED) -> Cycle:
        """
        Registers a new cycle. It is not docked anywhere.

        :raises DuplicateRfid: If the rfid is taken.
        """
        async with self._rfid_locks(rfid):
            return await create_cycle(rfid, status)

    async def update_cycle(self, rfid: str, status: CycleStatus) -> Cycle:
        """
        Changes the status of an undocked cycle.

        :raises CycleNotFound: If there is no cycle with the rfid.
        :raises CycleAlreadyDocked: If the cycle is docked, and the status would change.
        """
        async with self._rfid_locks(rfid):
            cycle = await self._get_cycle(rfid)
            if cycle.status is status:
                return cycle

            docked_in = await find_unit_by_cycle_rfid(rfid)
            if docked_in is not None:
                raise CycleAlreadyDocked(
                    f"Cycle {rfid} is docked in unit {docked_in.unit_id}, take it out first.",
                    unit_id=docked_in.unit_id
                )

            return await set_cycle_status(cycle, status)

    async def delete_cycle(self, rfid: str):
        """
        Removes an undocked cycle.

        :raises CycleNotFound: If there is no cycle with the rfid.
        :raises CycleAlreadyDocked: If the cycle is docked.
        """
        async with self._rfid_locks(rfid):
            cycle = await self._get_cycle(rfid)
            docked_in = await find_unit_by_cycle_rfid(rfid)
            if docked_in is not None:
                raise CycleAlreadyDocked(
                    f"Cycle {rfid} is docked in unit {docked_in.unit_id}, take it out first.",
                    unit_id=docked_in.unit_id
                )
            await delete_cycle(cycle)

    @staticmethod
    def _check_geofence(booth: Booth, user_lat: float, user_lon: float):
        meters = distance((user_lat, user_lon), (booth.latitude, booth.longitude))
        if not meters <= booth.radius:
            logger.debug("User at (%s, %s) is %.1fm from booth %s", user_lat, user_lon, meters, booth)
            raise GeofenceViolation(meters, booth.radius)

    @staticmethod
    async def _get_unit(unit_id: str) -> Unit:
        unit = await get_unit(unit_id)
        if unit is None:
            raise UnitNotFound(f"Unit {unit_id} not found.")
        return unit

    @staticmethod
    async def _get_cycle(rfid: str) -> Cycle:
        cycle = await get_cycle(rfid)
        if cycle is None:
            raise CycleNotFound(f"Cycle {rfid} not found.")
        return cycle
