"""
Cycles
======
"""
from typing import Optional, List

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.exceptions import IntegrityError

from cycleserver.models import Cycle, CycleStatus
from cycleserver.service.exceptions import DuplicateRfid, CycleNotFound


async def get_cycles(*, status: CycleStatus = None) -> List[Cycle]:
    """Gets all cycles, optionally only those with the given status."""
    query = Cycle.all()
    if status is not None:
        query = query.filter(status=status)
    return await query.order_by("id")


async def get_cycle(rfid: str, connection: BaseDBAsyncClient = None) -> Optional[Cycle]:
    query = Cycle.filter(rfid=rfid)
    if connection is not None:
        query = query.using_db(connection)
    return await query.first()


async def create_cycle(
    rfid: str, status: CycleStatus = CycleStatus.PARKED, connection: BaseDBAsyncClient = None
) -> Cycle:
    """
    Registers a cycle with the system.

    :raises DuplicateRfid: If a cycle with the tag exists.
    """
    try:
        return await Cycle.create(rfid=rfid, status=status, using_db=connection)
    except IntegrityError:
        raise DuplicateRfid(f"A cycle with RFID {rfid} already exists.")


async def set_cycle_status(cycle: Cycle, status: CycleStatus, connection: BaseDBAsyncClient = None) -> Cycle:
    """
    Sets the status of a cycle.

    :raises CycleNotFound: If the cycle no longer exists.
    """
    query = Cycle.filter(id=cycle.id)
    if connection is not None:
        query = query.using_db(connection)

    if not await query.update(status=status):
        raise CycleNotFound(f"Cycle {cycle.rfid} no longer exists.")

    cycle.status = status
    return cycle


async def delete_cycle(cycle: Cycle):
    await cycle.delete()
