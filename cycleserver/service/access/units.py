"""
Units
=====

Reads and writes for units. Status and cycle writes go through
:func:`update_unit`, which refuses any write that would leave an
occupied unit without a cycle (or a free unit with one). It is only
called by the :class:`~cycleserver.service.manager.rental_coordinator.RentalCoordinator`.
"""
from typing import Optional, List

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.exceptions import IntegrityError

from cycleserver.models import Unit, UnitStatus
from cycleserver.service.access.booths import get_booth
from cycleserver.service.exceptions import (
    BoothNotFound, DuplicateUnitId, InvalidUnitState, UnitNotFound,
    CycleAlreadyDocked, UnitAlreadyOccupied, UnitAlreadyFree
)


def _using(query, connection: Optional[BaseDBAsyncClient]):
    return query.using_db(connection) if connection is not None else query


async def get_units(*, booth_id: int = None, status: UnitStatus = None) -> List[Unit]:
    """Gets the units (along with their booth) matching the filters."""
    query = Unit.all()

    if booth_id is not None:
        query = query.filter(booth_id=booth_id)
    if status is not None:
        query = query.filter(status=status)

    return await query.order_by("id").prefetch_related("booth")


async def count_units(booth_id: int) -> int:
    return await Unit.filter(booth_id=booth_id).count()


async def get_unit(unit_id: str, connection: BaseDBAsyncClient = None) -> Optional[Unit]:
    """Gets a unit by its code, along with its booth."""
    return await _using(Unit.filter(unit_id=unit_id), connection).first().prefetch_related("booth")


async def find_unit_by_cycle_rfid(rfid: str, connection: BaseDBAsyncClient = None) -> Optional[Unit]:
    """Gets the unit the given cycle is docked in, if any."""
    return await _using(Unit.filter(cycle_rfid=rfid), connection).first().prefetch_related("booth")


async def create_unit(unit_id: str, booth_id: int) -> Unit:
    """
    Creates a new, free, unit in a booth.

    :raises BoothNotFound: If the booth doesn't exist.
    :raises DuplicateUnitId: If the unit id is taken.
    """
    booth = await get_booth(booth_id)
    if booth is None:
        raise BoothNotFound(f"Booth {booth_id} does not exist.")

    try:
        unit = await Unit.create(unit_id=unit_id, booth=booth, status=UnitStatus.FREE, cycle_rfid=None)
    except IntegrityError:
        raise DuplicateUnitId(f"A unit with id {unit_id} already exists.")

    await unit.fetch_related("booth")
    return unit


def check_unit_state(status: UnitStatus, cycle_rfid: Optional[str]):
    """
    :raises InvalidUnitState: Unless the unit is occupied exactly when it has a cycle.
    """
    if (status is UnitStatus.OCCUPIED) != (cycle_rfid is not None):
        raise InvalidUnitState(
            f"A unit with status {status.value} can't have cycle {cycle_rfid!r}."
        )


async def update_unit(
    unit: Unit, status: UnitStatus, cycle_rfid: Optional[str], *,
    expected_status: UnitStatus = None, connection: BaseDBAsyncClient = None
) -> Unit:
    """
    Sets the status and cycle of a unit.

    When ``expected_status`` is given, the write only happens if the unit
    is still in that state in the database.

    :raises InvalidUnitState: If the status and cycle don't agree.
    :raises UnitNotFound: If the unit no longer exists.
    :raises UnitAlreadyOccupied: If the unit was expected to be free and isn't.
    :raises UnitAlreadyFree: If the unit was expected to be occupied and isn't.
    :raises CycleAlreadyDocked: If the cycle is docked in another unit.
    """
    check_unit_state(status, cycle_rfid)

    query = Unit.filter(id=unit.id)
    if expected_status is not None:
        query = query.filter(status=expected_status)

    try:
        updated = await _using(query, connection).update(status=status, cycle_rfid=cycle_rfid)
    except IntegrityError:
        raise CycleAlreadyDocked(f"Cycle {cycle_rfid} is already parked in another unit.")

    if not updated:
        if not await _using(Unit.filter(id=unit.id), connection).exists():
            raise UnitNotFound(f"Unit {unit.unit_id} no longer exists.")
        if expected_status is UnitStatus.FREE:
            raise UnitAlreadyOccupied(f"Unit {unit.unit_id} is already occupied.")
        raise UnitAlreadyFree(f"Unit {unit.unit_id} is already free.")

    unit.status = status
    unit.cycle_rfid = cycle_rfid
    return unit


async def change_unit(unit: Unit, *, unit_id: str = None, booth_id: int = None) -> Unit:
    """
    Renames a unit, or moves it to another booth. Its status and cycle are untouched.

    :raises BoothNotFound: If the new booth doesn't exist.
    :raises DuplicateUnitId: If the new unit id is taken.
    """
    if booth_id is not None and booth_id != unit.booth_id:
        booth = await get_booth(booth_id)
        if booth is None:
            raise BoothNotFound(f"Booth {booth_id} does not exist.")
        unit.booth = booth

    previous_unit_id = unit.unit_id
    if unit_id is not None:
        unit.unit_id = unit_id

    try:
        await unit.save()
    except IntegrityError:
        unit.unit_id = previous_unit_id
        raise DuplicateUnitId(f"A unit with id {unit_id} already exists.")

    await unit.fetch_related("booth")
    return unit


async def delete_unit(unit: Unit):
    """
    Deletes a unit.

    :raises UnitAlreadyOccupied: If there is a cycle docked in it.
    """
    if unit.is_occupied:
        raise UnitAlreadyOccupied(f"Unit {unit.unit_id} still holds cycle {unit.cycle_rfid}.")

    await unit.delete()
