"""
Seed
----

Fills an empty database with a small campus: three booths with five
units each, and ten cycles, three of which are docked at the first booth.
Everything goes through the service layer so the same rules apply as
for the api.
"""
from typing import Dict

from tortoise import Tortoise

from cycleserver import logger
from cycleserver.models import Booth, Unit, Cycle, CycleStatus
from cycleserver.service.access.booths import create_booth
from cycleserver.service.access.cycles import create_cycle
from cycleserver.service.access.units import create_unit
from cycleserver.service.manager.rental_coordinator import RentalCoordinator
from cycleserver.signals import MODELS

SAMPLE_BOOTHS = [
    ("Main Gate Booth", 28.6139, 77.2090, 100),
    ("Library Booth", 28.6145, 77.2085, 100),
    ("Cafeteria Booth", 28.6135, 77.2095, 100),
]
"""The name, latitude, longitude and radius of each sample booth."""

UNITS_PER_BOOTH = 5
SAMPLE_CYCLES = 10
DOCKED_CYCLES = 3


async def seed_database(rental_coordinator: RentalCoordinator, *, clear=False) -> Dict[str, int]:
    """
    Creates the sample booths, units and cycles.

    A database that already has booths is left alone, unless
    ``clear`` is set, in which case everything is removed first.

    :returns: The number of booths, units, occupied units and cycles created.
    """
    if clear:
        logger.info("Clearing existing data")
        await Unit.all().delete()
        await Cycle.all().delete()
        await Booth.all().delete()
    elif await Booth.all().exists():
        logger.info("Database already has booths, not seeding")
        return {"booths": 0, "units": 0, "occupied": 0, "cycles": 0}

    booths = [await create_booth(*booth) for booth in SAMPLE_BOOTHS]

    units = []
    for booth in booths:
        prefix = booth.name.split(" ")[0]
        for number in range(1, UNITS_PER_BOOTH + 1):
            units.append(await create_unit(f"{prefix}-U{number}", booth.id))

    # the docked cycles start out in use and are parked like any other return
    cycles = [
        await create_cycle(
            f"RFID{number:05}",
            CycleStatus.IN_USE if number <= DOCKED_CYCLES else CycleStatus.PARKED
        )
        for number in range(1, SAMPLE_CYCLES + 1)
    ]

    first_booth = booths[0]
    for unit, cycle in zip(units[:DOCKED_CYCLES], cycles):
        await rental_coordinator.park(unit.unit_id, cycle.rfid, first_booth.latitude, first_booth.longitude)

    summary = {"booths": len(booths), "units": len(units), "occupied": DOCKED_CYCLES, "cycles": len(cycles)}
    logger.info(
        "Seeded %(booths)s booths, %(units)s units (%(occupied)s occupied) and %(cycles)s cycles", summary
    )
    return summary


async def seed(db_uri: str, *, clear=False) -> Dict[str, int]:
    """Connects to the database, creating the schema if needed, and seeds it."""
    logger.info("Connecting to the database")
    await Tortoise.init(db_url=db_uri, modules=MODELS)
    try:
        await Tortoise.generate_schemas(safe=True)
        return await seed_database(RentalCoordinator(), clear=clear)
    finally:
        await Tortoise.close_connections()
