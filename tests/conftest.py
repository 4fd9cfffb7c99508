from itertools import count

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient
from faker import Faker
from tortoise import Tortoise

from cycleserver.middleware import rental_error_middleware
from cycleserver.models import Booth, Unit, Cycle, UnitStatus, CycleStatus
from cycleserver.service.manager.rental_coordinator import RentalCoordinator
from cycleserver.service.manager.update_notifier import UpdateNotifier
from cycleserver.signals import register_signals, MODELS
from cycleserver.views import register_views, health
from tests.util import DELHI

fake = Faker()


@pytest.fixture
async def database():
    """A fresh, in-memory database for each test."""
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules=MODELS,
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def rental_coordinator(database) -> RentalCoordinator:
    return RentalCoordinator()


@pytest.fixture
def strict_coordinator(database) -> RentalCoordinator:
    return RentalCoordinator(strict_parking=True)


@pytest.fixture
def update_notifier(rental_coordinator) -> UpdateNotifier:
    return UpdateNotifier(rental_coordinator, send_timeout=0.2)


@pytest.fixture
async def client(aiohttp_client, database, rental_coordinator, update_notifier) -> TestClient:
    app = web.Application(middlewares=[rental_error_middleware])

    app['rental_coordinator'] = rental_coordinator
    app['update_notifier'] = update_notifier

    register_signals(app, init_database=False)  # we get the database from a fixture
    register_views(app, "/api/v1")
    app.router.add_get("/health", health)

    return await aiohttp_client(app)


@pytest.fixture
def random_booth_factory(database):
    booth_id = count(1)

    async def create_booth(latitude=DELHI[0], longitude=DELHI[1], radius=100):
        return await Booth.create(
            name=f"{fake.street_name()} {next(booth_id)}",
            latitude=latitude, longitude=longitude, radius=radius
        )

    return create_booth


@pytest.fixture
def random_unit_factory(database):
    unit_id = count(1)

    async def create_unit(booth: Booth):
        unit = await Unit.create(unit_id=f"{fake.lexify('???').upper()}-{next(unit_id)}", booth=booth)
        await unit.fetch_related("booth")
        return unit

    return create_unit


@pytest.fixture
async def random_booth(random_booth_factory) -> Booth:
    """Creates a booth in Delhi with a 100m radius."""
    return await random_booth_factory()


@pytest.fixture
async def random_unit(random_unit_factory, random_booth) -> Unit:
    """Creates a free unit in the random booth."""
    return await random_unit_factory(random_booth)


@pytest.fixture
async def random_cycle(database) -> Cycle:
    """Creates an undocked cycle that is in use."""
    return await Cycle.create(rfid=fake.hexify("^^^^^^^^").upper(), status=CycleStatus.IN_USE)


@pytest.fixture
async def occupied_unit(random_unit, random_cycle) -> Unit:
    """A unit with the random cycle docked in it."""
    await Unit.filter(id=random_unit.id).update(status=UnitStatus.OCCUPIED, cycle_rfid=random_cycle.rfid)
    await Cycle.filter(id=random_cycle.id).update(status=CycleStatus.PARKED)
    random_unit.status = UnitStatus.OCCUPIED
    random_unit.cycle_rfid = random_cycle.rfid
    return random_unit
