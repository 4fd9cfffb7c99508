import asyncio

from aiohttp.test_utils import TestClient

from cycleserver.models import Unit, Cycle, UnitStatus, CycleStatus
from cycleserver.serializer.fields import Many
from cycleserver.serializer.jsend import JSendStatus, JSendSchema
from cycleserver.serializer.models import UnitSchema, CycleSchema
from tests.util import DELHI, FIVE_HUNDRED_METERS_NORTH


def rental_request(unit, rfid, location=DELHI):
    return {"unit_id": unit.unit_id, "rfid": rfid, "user_lat": location[0], "user_lon": location[1]}


class TestUnitsView:

    async def test_get_units(self, client: TestClient, random_unit, occupied_unit):
        response = await client.get('/api/v1/units')

        data = JSendSchema.of(units=Many(UnitSchema())).load(await response.json())
        assert data["status"] == JSendStatus.SUCCESS
        [unit] = data["data"]["units"]
        assert unit["status"] == UnitStatus.OCCUPIED
        assert unit["booth"]["latitude"] == DELHI[0]

    async def test_filter_units(self, client: TestClient, random_booth_factory, random_unit_factory, random_unit):
        other_booth = await random_booth_factory()
        other_unit = await random_unit_factory(other_booth)

        response = await client.get('/api/v1/units', params={"booth_id": other_booth.id, "status": "FREE"})

        data = JSendSchema.of(units=Many(UnitSchema())).load(await response.json())
        assert [unit["unit_id"] for unit in data["data"]["units"]] == [other_unit.unit_id]

    async def test_filter_units_bad_status(self, client: TestClient, database):
        response = await client.get('/api/v1/units', params={"status": "BROKEN"})
        assert response.status == 400

    async def test_create_unit(self, client: TestClient, random_booth):
        response = await client.post('/api/v1/units', json={"unit_id": "A1", "booth_id": random_booth.id})

        assert response.status == 201
        data = JSendSchema.of(unit=UnitSchema()).load(await response.json())
        assert data["data"]["unit"]["status"] == UnitStatus.FREE
        assert data["data"]["unit"]["booth"]["id"] == random_booth.id

    async def test_create_unit_missing_booth(self, client: TestClient, database):
        response = await client.post('/api/v1/units', json={"unit_id": "A1", "booth_id": 1})

        assert response.status == 404
        assert (await response.json())["data"]["reason"] == "booth_not_found"

    async def test_create_duplicate_unit(self, client: TestClient, random_unit, random_booth):
        response = await client.post('/api/v1/units', json={"unit_id": random_unit.unit_id, "booth_id": random_booth.id})

        assert response.status == 409
        assert (await response.json())["data"]["reason"] == "duplicate_unit_id"


class TestParkView:

    async def test_park(self, client: TestClient, random_unit):
        """Assert that a user in Delhi can park in a Delhi booth."""
        response = await client.post('/api/v1/units/park', json=rental_request(random_unit, "RFID-1"))

        assert response.status == 200
        data = JSendSchema.of(unit=UnitSchema(), cycle=CycleSchema()).load(await response.json())
        assert data["data"]["unit"]["status"] == UnitStatus.OCCUPIED
        assert data["data"]["unit"]["cycle_rfid"] == "RFID-1"
        assert data["data"]["cycle"]["status"] == CycleStatus.PARKED

    async def test_park_outside_geofence(self, client: TestClient, random_unit):
        """Assert that a user 500m away is forbidden from parking."""
        response = await client.post(
            '/api/v1/units/park', json=rental_request(random_unit, "RFID-1", FIVE_HUNDRED_METERS_NORTH)
        )

        assert response.status == 403
        data = JSendSchema().load(await response.json())
        assert data["status"] == JSendStatus.FAIL
        assert data["data"]["reason"] == "geofence_violation"
        assert data["data"]["radius"] == 100
        assert 499 < data["data"]["distance"] < 501
        assert (await Unit.get(id=random_unit.id)).status is UnitStatus.FREE

    async def test_park_occupied_unit(self, client: TestClient, occupied_unit):
        response = await client.post('/api/v1/units/park', json=rental_request(occupied_unit, "RFID-2"))

        assert response.status == 409
        assert (await response.json())["data"]["reason"] == "unit_already_occupied"

    async def test_park_docked_cycle(self, client: TestClient, occupied_unit, random_booth, random_unit_factory):
        other = await random_unit_factory(random_booth)

        response = await client.post('/api/v1/units/park', json=rental_request(other, occupied_unit.cycle_rfid))

        assert response.status == 409
        response_data = await response.json()
        assert response_data["data"]["reason"] == "cycle_already_docked"
        assert response_data["data"]["unit_id"] == occupied_unit.unit_id

    async def test_park_missing_unit(self, client: TestClient, database):
        response = await client.post('/api/v1/units/park', json={
            "unit_id": "missing", "rfid": "RFID-1", "user_lat": DELHI[0], "user_lon": DELHI[1]
        })

        assert response.status == 404
        assert (await response.json())["data"]["reason"] == "unit_not_found"

    async def test_park_missing_fields(self, client: TestClient, random_unit):
        response = await client.post('/api/v1/units/park', json={"unit_id": random_unit.unit_id})

        assert response.status == 400
        errors = (await response.json())["data"]["errors"]
        assert {"rfid", "user_lat", "user_lon"} <= errors.keys()

    async def test_concurrent_parks(self, client: TestClient, random_unit):
        """Assert that one of two simultaneous park requests is refused."""
        responses = await asyncio.gather(
            client.post('/api/v1/units/park', json=rental_request(random_unit, "RFID-1")),
            client.post('/api/v1/units/park', json=rental_request(random_unit, "RFID-2")),
        )

        assert sorted(response.status for response in responses) == [200, 409]


class TestTakeView:

    async def test_take(self, client: TestClient, occupied_unit):
        response = await client.post('/api/v1/units/take', json=rental_request(occupied_unit, occupied_unit.cycle_rfid))

        assert response.status == 200
        data = JSendSchema.of(unit=UnitSchema(), cycle=CycleSchema()).load(await response.json())
        assert data["data"]["unit"]["status"] == UnitStatus.FREE
        assert data["data"]["unit"]["cycle_rfid"] is None
        assert data["data"]["cycle"]["status"] == CycleStatus.IN_USE

    async def test_take_wrong_rfid(self, client: TestClient, occupied_unit):
        response = await client.post('/api/v1/units/take', json=rental_request(occupied_unit, "WRONG"))

        assert response.status == 409
        assert (await response.json())["data"]["reason"] == "rfid_mismatch"
        assert (await Unit.get(id=occupied_unit.id)).status is UnitStatus.OCCUPIED

    async def test_take_free_unit(self, client: TestClient, random_unit):
        response = await client.post('/api/v1/units/take', json=rental_request(random_unit, "RFID-1"))

        assert response.status == 409
        assert (await response.json())["data"]["reason"] == "unit_already_free"


class TestUnitView:

    async def test_get_unit(self, client: TestClient, occupied_unit):
        response = await client.get(f'/api/v1/units/{occupied_unit.unit_id}')

        data = JSendSchema.of(unit=UnitSchema()).load(await response.json())
        assert data["data"]["unit"]["cycle_rfid"] == occupied_unit.cycle_rfid

    async def test_get_missing_unit(self, client: TestClient, database):
        response = await client.get('/api/v1/units/missing')

        assert response.status == 404
        assert (await response.json())["data"]["reason"] == "unit_not_found"

    async def test_get_unit_named_like_a_route(self, client: TestClient, random_booth):
        """Assert that only the exact words park and take are reserved."""
        unit = await Unit.create(unit_id="parking-1", booth=random_booth)

        response = await client.get(f'/api/v1/units/{unit.unit_id}')

        assert response.status == 200

    async def test_update_unit(self, client: TestClient, random_unit, random_booth_factory):
        booth = await random_booth_factory()

        response = await client.patch(
            f'/api/v1/units/{random_unit.unit_id}', json={"unit_id": "Z9", "booth_id": booth.id}
        )

        data = JSendSchema.of(unit=UnitSchema()).load(await response.json())
        assert data["data"]["unit"]["unit_id"] == "Z9"
        assert data["data"]["unit"]["booth"]["id"] == booth.id

    async def test_update_unit_nothing(self, client: TestClient, random_unit):
        response = await client.patch(f'/api/v1/units/{random_unit.unit_id}', json={})
        assert response.status == 400

    async def test_delete_unit(self, client: TestClient, random_unit):
        response = await client.delete(f'/api/v1/units/{random_unit.unit_id}')
        assert response.status == 204
        assert not await Unit.all().exists()

    async def test_delete_occupied_unit(self, client: TestClient, occupied_unit):
        response = await client.delete(f'/api/v1/units/{occupied_unit.unit_id}')

        assert response.status == 409
        assert await Cycle.filter(rfid=occupied_unit.cycle_rfid).exists()
